"""
Supabase Storage adapter for uploaded media.
"""

import logging

from core.domain.errors import LeagueError, PersistenceFailure
from core.interfaces.gateways import IFileStore
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

logger = logging.getLogger(__name__)


class SupabaseFileStore(SupabaseRepository, IFileStore):
    """Uploads into a public bucket and hands back the public URL"""

    @run_sync
    def _upload_sync(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        storage = self.client.storage.from_(bucket)
        storage.upload(path, data, {"content-type": content_type})
        return storage.get_public_url(path)

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            url = await self._upload_sync(bucket, path, data, content_type)
        except LeagueError:
            raise
        except Exception as e:
            logger.error(f"[STORAGE] Upload to {bucket}/{path} failed: {e}")
            raise PersistenceFailure(str(e), "storage.upload") from e
        logger.info(f"[STORAGE] Stored {len(data)} bytes at {bucket}/{path}")
        return url
