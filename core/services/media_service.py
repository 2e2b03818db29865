"""
Media service - uploads to the file store plus interview scheduling.
Files are validated (size, MIME) before anything touches storage.
"""

import logging
import re
import time
from typing import Any, Mapping, Optional
from uuid import uuid4

from core.domain.models import (
    ActionResult, AuthUser, InterviewCreate, MediaAssetCreate, MediaType, OperationClass,
)
from core.domain.schemas import InterviewForm, InterviewQuery, MediaQuery, MediaUploadForm
from core.interfaces.gateways import IFileStore, IIdentityProvider
from core.interfaces.repositories import IMediaRepository
from core.services.fighter_service import FighterService
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"^[A-Za-z0-9]{1,10}$")


def storage_path(user_id, filename: str, now: Optional[float] = None) -> str:
    """<user_id>/<millis>-<random>.<ext> - the original filename never reaches the bucket"""
    millis = int((now if now is not None else time.time()) * 1000)
    name = f"{millis}-{uuid4().hex[:8]}"
    ext = filename.rsplit(".", 1)[-1] if "." in filename else ""
    if not _EXT_RE.match(ext):
        return f"{user_id}/{name}"
    return f"{user_id}/{name}.{ext.lower()}"


class MediaService:
    """Service for media assets and interviews"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        media_repo: IMediaRepository,
        file_store: IFileStore,
        fighter_service: FighterService,
        bucket: str,
    ):
        self.pipeline = pipeline
        self.media_repo = media_repo
        self.file_store = file_store
        self.fighter_service = fighter_service
        self.bucket = bucket

    async def upload_media_asset(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: MediaUploadForm) -> ActionResult:
            upload = form.file
            path = storage_path(user.id, upload.filename)
            file_url = await self.file_store.upload(self.bucket, path, upload.data, upload.content_type)

            asset = await self.media_repo.create_asset(MediaAssetCreate(
                user_id=user.id,
                title=form.title,
                description=form.description,
                file_url=file_url,
                file_type=MediaType.VIDEO if upload.content_type.startswith("video/") else MediaType.IMAGE,
                category=form.category,
            ))
            logger.info(f"Media asset {asset.id} uploaded by {user.id}: {upload.filename} ({upload.size} bytes)")
            return ActionResult.ok("Media asset uploaded successfully", asset)

        return await self.pipeline.run(
            "upload_media_asset", identity, MediaUploadForm, raw, OperationClass.UPLOAD, handler
        )

    async def list_media_assets(self, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        async def handler(_, query: MediaQuery) -> ActionResult:
            assets = await self.media_repo.list_assets(category=query.category)
            return ActionResult.ok("Media assets loaded", assets)

        return await self.pipeline.query("list_media_assets", handler, schema=MediaQuery, raw=raw)

    async def schedule_interview(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: InterviewForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)
            interview = await self.media_repo.create_interview(
                InterviewCreate(fighter_id=fighter.id, **form.model_dump())
            )
            return ActionResult.ok("Interview scheduled successfully", interview)

        return await self.pipeline.run(
            "schedule_interview", identity, InterviewForm, raw, OperationClass.API, handler
        )

    async def list_interviews(self, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        async def handler(_, query: InterviewQuery) -> ActionResult:
            interviews = await self.media_repo.list_interviews(fighter_id=query.fighter_id)
            return ActionResult.ok("Interviews loaded", interviews)

        return await self.pipeline.query("list_interviews", handler, schema=InterviewQuery, raw=raw)
