"""
Supabase implementation of Matchmaking repository (matchmaking_requests table).
"""

from typing import Optional, List
from uuid import UUID
from core.domain.models import MatchmakingRequest, MatchmakingRequestCreate, MatchmakingStatus
from core.interfaces.repositories import IMatchmakingRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseMatchmakingRepository(SupabaseRepository, IMatchmakingRepository):
    """Supabase implementation of matchmaking repository"""

    def _to_model(self, data: dict) -> MatchmakingRequest:
        return MatchmakingRequest(
            id=data["id"],
            fighter_id=data["fighter_id"],
            weight_class=data["weight_class"],
            tier=data["tier"],
            max_distance=data.get("max_distance"),
            preferred_date=data.get("preferred_date"),
            notes=data.get("notes"),
            status=MatchmakingStatus(data.get("status") or "pending"),
            created_at=data.get("created_at"),
        )

    @run_sync
    def _create_sync(self, request_data: MatchmakingRequestCreate) -> dict:
        data = request_data.model_dump(mode="json")
        data["status"] = MatchmakingStatus.PENDING.value
        response = self.client.table("matchmaking_requests").insert(data).execute()
        return response.data[0]

    async def create(self, request_data: MatchmakingRequestCreate) -> MatchmakingRequest:
        return self._to_model(await self._create_sync(request_data))

    @run_sync
    def _get_by_id_sync(self, request_id: UUID) -> Optional[dict]:
        response = self.client.table("matchmaking_requests").select("*").eq("id", str(request_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, request_id: UUID) -> Optional[MatchmakingRequest]:
        data = await self._get_by_id_sync(request_id)
        return self._to_model(data) if data else None

    @run_sync
    def _get_pending_sync(self, fighter_id: UUID) -> Optional[dict]:
        response = self.client.table("matchmaking_requests").select("*")\
            .eq("fighter_id", str(fighter_id))\
            .eq("status", MatchmakingStatus.PENDING.value)\
            .limit(1)\
            .execute()
        return response.data[0] if response.data else None

    async def get_pending_for_fighter(self, fighter_id: UUID) -> Optional[MatchmakingRequest]:
        data = await self._get_pending_sync(fighter_id)
        return self._to_model(data) if data else None

    @run_sync
    def _list_by_fighter_sync(self, fighter_id: UUID) -> List[dict]:
        response = self.client.table("matchmaking_requests").select("*")\
            .eq("fighter_id", str(fighter_id))\
            .order("created_at", desc=True)\
            .execute()
        return response.data or []

    async def list_by_fighter(self, fighter_id: UUID) -> List[MatchmakingRequest]:
        return [self._to_model(r) for r in await self._list_by_fighter_sync(fighter_id)]

    @run_sync
    def _update_status_sync(self, request_id: UUID, status: MatchmakingStatus,
                            expected: Optional[MatchmakingStatus]) -> Optional[dict]:
        query = self.client.table("matchmaking_requests").update({"status": status.value}).eq("id", str(request_id))
        if expected:
            query = query.eq("status", expected.value)
        response = query.execute()
        return response.data[0] if response.data else None

    async def update_status(self, request_id: UUID, status: MatchmakingStatus,
                            expected: Optional[MatchmakingStatus] = None) -> Optional[MatchmakingRequest]:
        data = await self._update_status_sync(request_id, status, expected)
        return self._to_model(data) if data else None
