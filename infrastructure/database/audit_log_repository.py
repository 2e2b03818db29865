"""
Application log repository - forwarded audit events (application_logs table).
"""

from core.domain.models import LogEntry
from core.interfaces.repositories import IAuditLogRepository
from infrastructure.database.supabase_client import SupabaseRepository, run_sync


class SupabaseAuditLogRepository(SupabaseRepository, IAuditLogRepository):
    """Insert-only sink. Callers treat failures as best-effort."""

    @run_sync
    def _insert_sync(self, data: dict):
        self.client.table("application_logs").insert(data).execute()

    async def insert(self, entry: LogEntry) -> None:
        await self._insert_sync(entry.model_dump(mode="json"))
