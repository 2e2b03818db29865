"""
Supabase implementation of Admin repository
(user_suspensions + single-row system_settings).
"""

from datetime import datetime, timezone
from uuid import UUID
from core.domain.models import SystemSettings, UserSuspension, UserSuspensionCreate
from core.interfaces.repositories import IAdminRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

SETTINGS_ROW_ID = 1


class SupabaseAdminRepository(SupabaseRepository, IAdminRepository):
    """Supabase implementation of admin repository"""

    @run_sync
    def _create_suspension_sync(self, data: dict) -> dict:
        response = self.client.table("user_suspensions").insert(data).execute()
        return response.data[0]

    async def create_suspension(self, suspension_data: UserSuspensionCreate) -> UserSuspension:
        data = suspension_data.model_dump(mode="json")
        data["status"] = "active"
        return UserSuspension(**await self._create_suspension_sync(data))

    @run_sync
    def _get_settings_sync(self):
        response = self.client.table("system_settings").select("*").eq("id", SETTINGS_ROW_ID).execute()
        return response.data[0] if response.data else None

    async def get_settings(self) -> SystemSettings:
        """Defaults when the row has never been written"""
        data = await self._get_settings_sync()
        return SystemSettings(**data) if data else SystemSettings()

    @run_sync
    def _upsert_settings_sync(self, data: dict) -> dict:
        response = self.client.table("system_settings").upsert(data).execute()
        return response.data[0]

    async def update_settings(self, system_settings: SystemSettings, updated_by: UUID) -> SystemSettings:
        data = system_settings.model_dump()
        data.update({
            "id": SETTINGS_ROW_ID,
            "updated_by": str(updated_by),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        })
        return SystemSettings(**await self._upsert_settings_sync(data))
