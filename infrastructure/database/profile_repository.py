"""
Supabase implementation of Profile repository (profiles table).
"""

from datetime import datetime
from typing import Optional, List, Tuple
from uuid import UUID
from core.domain.models import Profile, UserRole
from core.interfaces.repositories import IProfileRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

# Characters with meaning inside a PostgREST or=() filter
_FILTER_UNSAFE = str.maketrans("", "", ",()*%")


class SupabaseProfileRepository(SupabaseRepository, IProfileRepository):
    """Supabase implementation of profile repository"""

    def _to_model(self, data: dict) -> Profile:
        """Convert database row to Profile model"""
        return Profile(
            id=data["id"],
            email=data.get("email"),
            full_name=data.get("full_name"),
            role=UserRole(data.get("role") or "user"),
            created_at=data.get("created_at"),
        )

    @run_sync
    def _get_by_id_sync(self, user_id: UUID) -> Optional[dict]:
        response = self.client.table("profiles").select("*").eq("id", str(user_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, user_id: UUID) -> Optional[Profile]:
        data = await self._get_by_id_sync(user_id)
        return self._to_model(data) if data else None

    @run_sync
    def _upsert_sync(self, data: dict) -> dict:
        response = self.client.table("profiles").upsert(data).execute()
        return response.data[0]

    async def upsert(self, profile: Profile) -> Profile:
        data = profile.model_dump(mode="json", exclude_none=True)
        return self._to_model(await self._upsert_sync(data))

    @run_sync
    def _list_sync(self, offset: int, limit: int, search: str) -> Tuple[List[dict], int]:
        query = self.client.table("profiles").select("*", count="exact")
        if search:
            query = query.or_(f"full_name.ilike.%{search}%,email.ilike.%{search}%")
        response = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        return response.data or [], response.count or 0

    async def list(self, page: int, limit: int, search: str = "") -> Tuple[List[Profile], int]:
        rows, total = await self._list_sync((page - 1) * limit, limit, search.translate(_FILTER_UNSAFE).strip())
        return [self._to_model(r) for r in rows], total

    @run_sync
    def _update_role_sync(self, user_id: UUID, role: UserRole) -> Optional[dict]:
        response = self.client.table("profiles").update({"role": role.value}).eq("id", str(user_id)).execute()
        return response.data[0] if response.data else None

    async def update_role(self, user_id: UUID, role: UserRole) -> Optional[Profile]:
        data = await self._update_role_sync(user_id, role)
        return self._to_model(data) if data else None

    @run_sync
    def _count_sync(self, since_iso: Optional[str]) -> int:
        query = self.client.table("profiles").select("id", count="exact")
        if since_iso:
            query = query.gte("created_at", since_iso)
        return query.execute().count or 0

    async def count(self, since: Optional[datetime] = None) -> int:
        return await self._count_sync(since.isoformat() if since else None)
