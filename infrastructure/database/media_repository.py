"""
Supabase implementation of Media repository (media_assets + interviews tables).
"""

from typing import Optional, List
from uuid import UUID
from core.domain.models import Interview, InterviewCreate, MediaAsset, MediaAssetCreate, MediaCategory
from core.interfaces.repositories import IMediaRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseMediaRepository(SupabaseRepository, IMediaRepository):
    """Supabase implementation of media repository"""

    @run_sync
    def _create_asset_sync(self, data: dict) -> dict:
        response = self.client.table("media_assets").insert(data).execute()
        return response.data[0]

    async def create_asset(self, asset_data: MediaAssetCreate) -> MediaAsset:
        data = await self._create_asset_sync(asset_data.model_dump(mode="json"))
        return MediaAsset(**data)

    @run_sync
    def _list_assets_sync(self, category: Optional[MediaCategory], user_id: Optional[UUID]) -> List[dict]:
        query = self.client.table("media_assets").select("*")
        if category:
            query = query.eq("category", category.value)
        if user_id:
            query = query.eq("user_id", str(user_id))
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def list_assets(self, category: Optional[MediaCategory] = None,
                          user_id: Optional[UUID] = None) -> List[MediaAsset]:
        return [MediaAsset(**r) for r in await self._list_assets_sync(category, user_id)]

    @run_sync
    def _create_interview_sync(self, data: dict) -> dict:
        response = self.client.table("interviews").insert(data).execute()
        return response.data[0]

    async def create_interview(self, interview_data: InterviewCreate) -> Interview:
        data = interview_data.model_dump(mode="json")
        data["status"] = "scheduled"
        return Interview(**await self._create_interview_sync(data))

    @run_sync
    def _list_interviews_sync(self, fighter_id: Optional[UUID]) -> List[dict]:
        query = self.client.table("interviews").select("*")
        if fighter_id:
            query = query.eq("fighter_id", str(fighter_id))
        response = query.order("scheduled_date", desc=False).execute()
        return response.data or []

    async def list_interviews(self, fighter_id: Optional[UUID] = None) -> List[Interview]:
        return [Interview(**r) for r in await self._list_interviews_sync(fighter_id)]
