"""
Supabase implementation of Dispute repository (disputes table).
"""

from datetime import datetime, timezone
from typing import Optional, List
from uuid import UUID
from core.domain.models import Dispute, DisputeCreate, DisputeResolution, DisputeStatus
from core.interfaces.repositories import IDisputeRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

OPEN_STATUSES = [s.value for s in DisputeStatus if not s.is_terminal]


class SupabaseDisputeRepository(SupabaseRepository, IDisputeRepository):
    """Supabase implementation of dispute repository"""

    def _to_model(self, data: dict) -> Dispute:
        return Dispute(
            id=data["id"],
            user_id=data["user_id"],
            title=data["title"],
            description=data["description"],
            category=data["category"],
            related_fight_id=data.get("related_fight_id"),
            status=DisputeStatus(data.get("status") or "pending"),
            resolution=data.get("resolution"),
            admin_notes=data.get("admin_notes"),
            resolved_by=data.get("resolved_by"),
            resolved_at=data.get("resolved_at"),
            created_at=data.get("created_at"),
        )

    @run_sync
    def _create_sync(self, dispute_data: DisputeCreate) -> dict:
        data = dispute_data.model_dump(mode="json")
        data["status"] = DisputeStatus.PENDING.value
        response = self.client.table("disputes").insert(data).execute()
        return response.data[0]

    async def create(self, dispute_data: DisputeCreate) -> Dispute:
        return self._to_model(await self._create_sync(dispute_data))

    @run_sync
    def _get_by_id_sync(self, dispute_id: UUID) -> Optional[dict]:
        response = self.client.table("disputes").select("*").eq("id", str(dispute_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, dispute_id: UUID) -> Optional[Dispute]:
        data = await self._get_by_id_sync(dispute_id)
        return self._to_model(data) if data else None

    @run_sync
    def _resolve_sync(self, dispute_id: UUID, data: dict) -> Optional[dict]:
        # Status filter makes the transition one-way even under concurrent resolutions
        response = self.client.table("disputes").update(data)\
            .eq("id", str(dispute_id))\
            .in_("status", OPEN_STATUSES)\
            .execute()
        return response.data[0] if response.data else None

    async def resolve(self, dispute_id: UUID, status: DisputeStatus, resolution: DisputeResolution,
                      admin_notes: Optional[str], resolved_by: UUID) -> Optional[Dispute]:
        data = {
            "status": status.value,
            "resolution": resolution.value,
            "admin_notes": admin_notes,
            "resolved_by": str(resolved_by),
        }
        if status.is_terminal:
            data["resolved_at"] = datetime.now(timezone.utc).isoformat()
        row = await self._resolve_sync(dispute_id, data)
        return self._to_model(row) if row else None

    @run_sync
    def _list_sync(self, status: Optional[DisputeStatus], user_id: Optional[UUID]) -> List[dict]:
        query = self.client.table("disputes").select("*")
        if status:
            query = query.eq("status", status.value)
        if user_id:
            query = query.eq("user_id", str(user_id))
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def list(self, status: Optional[DisputeStatus] = None,
                   user_id: Optional[UUID] = None) -> List[Dispute]:
        return [self._to_model(r) for r in await self._list_sync(status, user_id)]

    @run_sync
    def _count_sync(self, status: Optional[DisputeStatus]) -> int:
        query = self.client.table("disputes").select("id", count="exact")
        if status:
            query = query.eq("status", status.value)
        return query.execute().count or 0

    async def count(self, status: Optional[DisputeStatus] = None) -> int:
        return await self._count_sync(status)
