"""
Supabase implementation of Tournament repository
(tournaments + tournament_participants tables).
"""

from datetime import datetime, timezone
from typing import Optional, List
from uuid import UUID
from core.domain.errors import Conflict
from core.domain.models import (
    Tournament, TournamentCreate, TournamentParticipant, TournamentStatus, WeightClass,
)
from core.interfaces.repositories import ITournamentRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseTournamentRepository(SupabaseRepository, ITournamentRepository):
    """Supabase implementation of tournament repository"""

    def _to_model(self, data: dict) -> Tournament:
        return Tournament(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            weight_class=data["weight_class"],
            tier=data["tier"],
            max_participants=data["max_participants"],
            current_participants=data.get("current_participants") or 0,
            start_date=data["start_date"],
            end_date=data["end_date"],
            created_by=data["created_by"],
            entry_fee=data.get("entry_fee") or 0,
            prize_pool=data.get("prize_pool") or 0,
            status=TournamentStatus(data.get("status") or "upcoming"),
            created_at=data.get("created_at"),
        )

    def _to_participant(self, data: dict) -> TournamentParticipant:
        return TournamentParticipant(
            id=data["id"],
            tournament_id=data["tournament_id"],
            fighter_id=data["fighter_id"],
            joined_at=data.get("joined_at"),
        )

    @run_sync
    def _create_sync(self, tournament_data: TournamentCreate) -> dict:
        data = tournament_data.model_dump(mode="json")
        data.update({"status": TournamentStatus.UPCOMING.value, "current_participants": 0})
        response = self.client.table("tournaments").insert(data).execute()
        return response.data[0]

    async def create(self, tournament_data: TournamentCreate) -> Tournament:
        return self._to_model(await self._create_sync(tournament_data))

    @run_sync
    def _get_by_id_sync(self, tournament_id: UUID) -> Optional[dict]:
        response = self.client.table("tournaments").select("*").eq("id", str(tournament_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, tournament_id: UUID) -> Optional[Tournament]:
        data = await self._get_by_id_sync(tournament_id)
        return self._to_model(data) if data else None

    @run_sync
    def _list_sync(self, status: Optional[TournamentStatus], weight_class: Optional[WeightClass]) -> List[dict]:
        query = self.client.table("tournaments").select("*")
        if status:
            query = query.eq("status", status.value)
        if weight_class:
            query = query.eq("weight_class", weight_class.value)
        response = query.order("start_date", desc=False).execute()
        return response.data or []

    async def list(self, status: Optional[TournamentStatus] = None,
                   weight_class: Optional[WeightClass] = None) -> List[Tournament]:
        return [self._to_model(r) for r in await self._list_sync(status, weight_class)]

    @run_sync
    def _get_participant_sync(self, tournament_id: UUID, fighter_id: UUID) -> Optional[dict]:
        response = self.client.table("tournament_participants").select("*")\
            .eq("tournament_id", str(tournament_id))\
            .eq("fighter_id", str(fighter_id))\
            .execute()
        return response.data[0] if response.data else None

    async def get_participant(self, tournament_id: UUID, fighter_id: UUID) -> Optional[TournamentParticipant]:
        data = await self._get_participant_sync(tournament_id, fighter_id)
        return self._to_participant(data) if data else None

    @run_sync
    def _add_participant_sync(self, tournament_id: UUID, fighter_id: UUID) -> dict:
        response = self.client.table("tournament_participants").insert({
            "tournament_id": str(tournament_id),
            "fighter_id": str(fighter_id),
            "joined_at": datetime.now(timezone.utc).isoformat(),
        }).execute()
        return response.data[0]

    async def add_participant(self, tournament_id: UUID, fighter_id: UUID) -> TournamentParticipant:
        try:
            data = await self._add_participant_sync(tournament_id, fighter_id)
        except Conflict:
            raise Conflict("Already joined this tournament")
        return self._to_participant(data)

    @run_sync
    def _list_participants_sync(self, tournament_id: UUID) -> List[dict]:
        response = self.client.table("tournament_participants").select("*")\
            .eq("tournament_id", str(tournament_id))\
            .order("joined_at", desc=False)\
            .execute()
        return response.data or []

    async def list_participants(self, tournament_id: UUID) -> List[TournamentParticipant]:
        return [self._to_participant(r) for r in await self._list_participants_sync(tournament_id)]

    @run_sync
    def _increment_participants_sync(self, tournament_id: UUID) -> bool:
        # Server-side: UPDATE ... WHERE current_participants < max_participants, returns whether a row moved
        response = self.client.rpc("increment_tournament_participants", {"tournament_id": str(tournament_id)}).execute()
        return bool(response.data)

    async def increment_participants(self, tournament_id: UUID) -> bool:
        return await self._increment_participants_sync(tournament_id)

    @run_sync
    def _remove_participant_sync(self, tournament_id: UUID, fighter_id: UUID) -> None:
        self.client.table("tournament_participants").delete()\
            .eq("tournament_id", str(tournament_id))\
            .eq("fighter_id", str(fighter_id))\
            .execute()

    async def remove_participant(self, tournament_id: UUID, fighter_id: UUID) -> None:
        await self._remove_participant_sync(tournament_id, fighter_id)

    @run_sync
    def _count_sync(self) -> int:
        return self.client.table("tournaments").select("id", count="exact").execute().count or 0

    async def count(self) -> int:
        return await self._count_sync()
