"""
Supabase implementation of FightRecord repository (fight_records table).
Records are append-only: there is no update or delete.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from core.domain.models import FightRecord, FightRecordCreate
from core.interfaces.repositories import IFightRecordRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseFightRecordRepository(SupabaseRepository, IFightRecordRepository):
    """Supabase implementation of fight record repository"""

    def _to_model(self, data: dict) -> FightRecord:
        return FightRecord(
            id=data["id"],
            fighter_id=data["fighter_id"],
            opponent_name=data["opponent_name"],
            result=data["result"],
            method=data["method"],
            round=data.get("round"),
            date=data["date"],
            location=data.get("location"),
            weight_class=data["weight_class"],
            points_earned=data.get("points_earned") or 0,
            proof_url=data.get("proof_url"),
            notes=data.get("notes"),
            created_at=data.get("created_at"),
        )

    @run_sync
    def _create_sync(self, record_data: FightRecordCreate) -> dict:
        response = self.client.table("fight_records").insert(record_data.model_dump(mode="json")).execute()
        return response.data[0]

    async def create(self, record_data: FightRecordCreate) -> FightRecord:
        return self._to_model(await self._create_sync(record_data))

    @run_sync
    def _list_by_fighter_sync(self, fighter_id: UUID, limit: int) -> List[dict]:
        response = self.client.table("fight_records").select("*")\
            .eq("fighter_id", str(fighter_id))\
            .order("date", desc=True)\
            .order("created_at", desc=True)\
            .limit(limit)\
            .execute()
        return response.data or []

    async def list_by_fighter(self, fighter_id: UUID, limit: int = 50) -> List[FightRecord]:
        rows = await self._list_by_fighter_sync(fighter_id, limit)
        return [self._to_model(r) for r in rows]

    @run_sync
    def _list_for_fighters_sync(self, fighter_ids: List[str], limit: int) -> List[dict]:
        response = self.client.table("fight_records").select("*")\
            .in_("fighter_id", fighter_ids)\
            .order("date", desc=True)\
            .order("created_at", desc=True)\
            .limit(limit)\
            .execute()
        return response.data or []

    async def list_for_fighters(self, fighter_ids: List[UUID], per_fighter: int) -> List[FightRecord]:
        """
        One round trip for the whole leaderboard. The cap is per_fighter x
        fighters overall, so very active fighters can crowd out others' history.
        """
        if not fighter_ids:
            return []
        rows = await self._list_for_fighters_sync([str(f) for f in fighter_ids], per_fighter * len(fighter_ids))
        return [self._to_model(r) for r in rows]

    @run_sync
    def _count_sync(self, since_iso: Optional[str]) -> int:
        query = self.client.table("fight_records").select("id", count="exact")
        if since_iso:
            query = query.gte("created_at", since_iso)
        return query.execute().count or 0

    async def count(self, since: Optional[datetime] = None) -> int:
        return await self._count_sync(since.isoformat() if since else None)
