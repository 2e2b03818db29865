"""
Supabase implementation of Fighter repository (fighter_profiles table).
"""

from datetime import datetime, timezone
from typing import Optional, List
from uuid import UUID
from core.domain.models import FighterProfile, FighterProfileCreate, FighterStats, Tier, WeightClass
from core.interfaces.repositories import IFighterRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

# Counters a concurrent fight record would have moved
GUARDED_COUNTERS = ("wins", "losses", "draws", "points", "knockouts")


class SupabaseFighterRepository(SupabaseRepository, IFighterRepository):
    """Supabase implementation of fighter repository"""

    def _to_model(self, data: dict) -> FighterProfile:
        """Convert database row to FighterProfile model"""
        return FighterProfile(
            id=data["id"],
            user_id=data["user_id"],
            name=data.get("name") or "Unknown",
            handle=data.get("handle") or "unknown",
            birthday=data.get("birthday"),
            hometown=data.get("hometown"),
            stance=data.get("stance"),
            height_feet=data.get("height_feet"),
            height_inches=data.get("height_inches"),
            reach=data.get("reach"),
            weight=data.get("weight"),
            weight_class=WeightClass(data["weight_class"]),
            trainer=data.get("trainer"),
            gym=data.get("gym"),
            tier=Tier(data.get("tier") or "Amateur"),
            points=data.get("points") or 0,
            wins=data.get("wins") or 0,
            losses=data.get("losses") or 0,
            draws=data.get("draws") or 0,
            knockouts=data.get("knockouts") or 0,
            win_percentage=data.get("win_percentage") or 0,
            ko_percentage=data.get("ko_percentage") or 0,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @run_sync
    def _get_by_id_sync(self, fighter_id: UUID) -> Optional[dict]:
        response = self.client.table("fighter_profiles").select("*").eq("id", str(fighter_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, fighter_id: UUID) -> Optional[FighterProfile]:
        data = await self._get_by_id_sync(fighter_id)
        return self._to_model(data) if data else None

    @run_sync
    def _get_by_user_id_sync(self, user_id: UUID) -> Optional[dict]:
        response = self.client.table("fighter_profiles").select("*").eq("user_id", str(user_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_user_id(self, user_id: UUID) -> Optional[FighterProfile]:
        data = await self._get_by_user_id_sync(user_id)
        return self._to_model(data) if data else None

    @run_sync
    def _create_sync(self, fighter_data: FighterProfileCreate) -> dict:
        data = fighter_data.model_dump(mode="json")
        # New fighters always start at the bottom
        data.update({
            "tier": Tier.AMATEUR.value,
            **FighterStats().model_dump(),
        })
        response = self.client.table("fighter_profiles").insert(data).execute()
        return response.data[0]

    async def create(self, fighter_data: FighterProfileCreate) -> FighterProfile:
        data = await self._create_sync(fighter_data)
        return self._to_model(data)

    @run_sync
    def _update_stats_sync(self, fighter_id: UUID, stats: FighterStats,
                           expected: Optional[FighterStats]) -> Optional[dict]:
        data = stats.model_dump()
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        query = self.client.table("fighter_profiles").update(data).eq("id", str(fighter_id))
        if expected is not None:
            # Compare-and-set: no row comes back if another write got there first
            for column in GUARDED_COUNTERS:
                query = query.eq(column, getattr(expected, column))
        response = query.execute()
        return response.data[0] if response.data else None

    async def update_stats(self, fighter_id: UUID, stats: FighterStats,
                           expected: Optional[FighterStats] = None) -> Optional[FighterProfile]:
        data = await self._update_stats_sync(fighter_id, stats, expected)
        return self._to_model(data) if data else None

    @run_sync
    def _list_ranked_sync(self, weight_class: Optional[WeightClass], tier: Optional[Tier], limit: int) -> List[dict]:
        query = self.client.table("fighter_profiles").select("*")
        if weight_class:
            query = query.eq("weight_class", weight_class.value)
        if tier:
            query = query.eq("tier", tier.value)
        response = query.order("points", desc=True).limit(limit).execute()
        return response.data or []

    async def list_ranked(self, weight_class: Optional[WeightClass] = None,
                          tier: Optional[Tier] = None, limit: int = 50) -> List[FighterProfile]:
        rows = await self._list_ranked_sync(weight_class, tier, limit)
        return [self._to_model(r) for r in rows]

    @run_sync
    def _count_sync(self) -> int:
        return self.client.table("fighter_profiles").select("id", count="exact").execute().count or 0

    async def count(self) -> int:
        return await self._count_sync()
