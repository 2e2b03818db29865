"""
Supabase implementation of Training repository
(training_camps, training_camp_participants, training_objectives, training_logs).
"""

from datetime import datetime, timezone
from typing import Optional, List
from uuid import UUID
from core.domain.errors import Conflict
from core.domain.models import (
    CampStatus, TrainingCamp, TrainingCampCreate, TrainingLog, TrainingLogCreate,
    TrainingObjective, TrainingObjectiveCreate,
)
from core.interfaces.repositories import ITrainingRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseTrainingRepository(SupabaseRepository, ITrainingRepository):
    """Supabase implementation of training repository"""

    def _to_camp(self, data: dict) -> TrainingCamp:
        return TrainingCamp(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            location=data["location"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            max_participants=data["max_participants"],
            current_participants=data.get("current_participants") or 0,
            created_by=data["created_by"],
            status=CampStatus(data.get("status") or "upcoming"),
            created_at=data.get("created_at"),
        )

    @run_sync
    def _create_camp_sync(self, camp_data: TrainingCampCreate) -> dict:
        data = camp_data.model_dump(mode="json")
        data.update({"status": CampStatus.UPCOMING.value, "current_participants": 0})
        response = self.client.table("training_camps").insert(data).execute()
        return response.data[0]

    async def create_camp(self, camp_data: TrainingCampCreate) -> TrainingCamp:
        return self._to_camp(await self._create_camp_sync(camp_data))

    @run_sync
    def _get_camp_sync(self, camp_id: UUID) -> Optional[dict]:
        response = self.client.table("training_camps").select("*").eq("id", str(camp_id)).execute()
        return response.data[0] if response.data else None

    async def get_camp(self, camp_id: UUID) -> Optional[TrainingCamp]:
        data = await self._get_camp_sync(camp_id)
        return self._to_camp(data) if data else None

    @run_sync
    def _list_camps_sync(self, status: Optional[CampStatus]) -> List[dict]:
        query = self.client.table("training_camps").select("*")
        if status:
            query = query.eq("status", status.value)
        response = query.order("start_date", desc=False).execute()
        return response.data or []

    async def list_camps(self, status: Optional[CampStatus] = None) -> List[TrainingCamp]:
        return [self._to_camp(r) for r in await self._list_camps_sync(status)]

    @run_sync
    def _is_participant_sync(self, camp_id: UUID, fighter_id: UUID) -> bool:
        response = self.client.table("training_camp_participants").select("id")\
            .eq("camp_id", str(camp_id))\
            .eq("fighter_id", str(fighter_id))\
            .execute()
        return bool(response.data)

    async def is_participant(self, camp_id: UUID, fighter_id: UUID) -> bool:
        return await self._is_participant_sync(camp_id, fighter_id)

    @run_sync
    def _add_participant_sync(self, camp_id: UUID, fighter_id: UUID) -> None:
        self.client.table("training_camp_participants").insert({
            "camp_id": str(camp_id),
            "fighter_id": str(fighter_id),
            "joined_at": datetime.now(timezone.utc).isoformat(),
        }).execute()

    async def add_participant(self, camp_id: UUID, fighter_id: UUID) -> None:
        try:
            await self._add_participant_sync(camp_id, fighter_id)
        except Conflict:
            raise Conflict("Already joined this training camp")

    @run_sync
    def _increment_participants_sync(self, camp_id: UUID) -> bool:
        # Server-side: UPDATE ... WHERE current_participants < max_participants, returns whether a row moved
        response = self.client.rpc("increment_camp_participants", {"camp_id": str(camp_id)}).execute()
        return bool(response.data)

    async def increment_participants(self, camp_id: UUID) -> bool:
        return await self._increment_participants_sync(camp_id)

    @run_sync
    def _remove_participant_sync(self, camp_id: UUID, fighter_id: UUID) -> None:
        self.client.table("training_camp_participants").delete()\
            .eq("camp_id", str(camp_id))\
            .eq("fighter_id", str(fighter_id))\
            .execute()

    async def remove_participant(self, camp_id: UUID, fighter_id: UUID) -> None:
        await self._remove_participant_sync(camp_id, fighter_id)

    @run_sync
    def _create_objective_sync(self, data: dict) -> dict:
        response = self.client.table("training_objectives").insert(data).execute()
        return response.data[0]

    async def create_objective(self, objective_data: TrainingObjectiveCreate) -> TrainingObjective:
        data = objective_data.model_dump(mode="json")
        data["status"] = "pending"
        return TrainingObjective(**await self._create_objective_sync(data))

    @run_sync
    def _create_log_sync(self, data: dict) -> dict:
        response = self.client.table("training_logs").insert(data).execute()
        return response.data[0]

    async def create_log(self, log_data: TrainingLogCreate) -> TrainingLog:
        return TrainingLog(**await self._create_log_sync(log_data.model_dump(mode="json")))
