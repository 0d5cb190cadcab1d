# technurture/services/media.py

"""
Media hosting. Files go to Cloudinary when credentials are configured;
otherwise they come back inline as data URLs so the editor keeps working
in development.
"""

import base64
import uuid
from typing import Callable, Optional

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from starlette.concurrency import run_in_threadpool

from technurture.config import Settings, settings
from technurture.schemas.media import MediaUploadResult


class MediaError(Exception):
    """Upload to the media host failed."""


def media_kind(content_type: str) -> Optional[str]:
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return None


class MediaService:
    def __init__(self, config: Settings, uploader: Callable | None = None):
        self.folder = config.CLOUDINARY_FOLDER
        self.configured = config.cloudinary_configured
        if self.configured:
            cloudinary.config(
                cloud_name=config.CLOUDINARY_CLOUD_NAME,
                api_key=config.CLOUDINARY_API_KEY,
                api_secret=config.CLOUDINARY_API_SECRET,
                secure=True,
            )
        self.uploader = uploader or cloudinary.uploader.upload

    async def upload(self, content: bytes, content_type: str, folder: str | None = None) -> MediaUploadResult:
        kind = media_kind(content_type)
        if kind is None:
            raise ValueError("Only image and video files are allowed")
        if not self.configured:
            return self.inline(content, content_type, kind)
        return await self.upload_remote(content, kind, folder)

    def inline(self, content: bytes, content_type: str, kind: str) -> MediaUploadResult:
        encoded = base64.b64encode(content).decode("ascii")
        return MediaUploadResult(
            url=f"data:{content_type};base64,{encoded}",
            public_id=f"inline_{uuid.uuid4().hex}",
            type=kind,
            format=content_type.split("/", 1)[1].split(";")[0],
        )

    async def upload_remote(self, content: bytes, kind: str, folder: str | None) -> MediaUploadResult:
        if kind == "image":
            options = {
                "resource_type": "image",
                "folder": folder or self.folder,
                "transformation": [{"quality": "auto"}, {"fetch_format": "auto"}],
            }
        else:
            options = {
                "resource_type": "video",
                "folder": folder or f"{self.folder}/videos",
                "transformation": [{"quality": "auto"}],
            }

        try:
            result = await run_in_threadpool(self.uploader, content, **options)
        except Exception as e:
            raise MediaError(f"Failed to upload {kind} to Cloudinary") from e

        thumbnail = None
        if kind == "video":
            thumbnail, _ = cloudinary.utils.cloudinary_url(
                result["public_id"],
                resource_type="video",
                format="jpg",
                start_offset="0",
                width=400,
                height=300,
                crop="fill",
                secure=True,
            )
        return MediaUploadResult(
            url=result["secure_url"],
            public_id=result["public_id"],
            type=kind,
            width=result.get("width"),
            height=result.get("height"),
            duration=result.get("duration"),
            format=result.get("format", ""),
            thumbnail=thumbnail,
        )

    async def delete(self, public_id: str, kind: str = "image") -> None:
        if not self.configured:
            return
        try:
            await run_in_threadpool(cloudinary.uploader.destroy, public_id, resource_type=kind)
        except Exception as e:
            raise MediaError("Failed to delete media from Cloudinary") from e


media_service = MediaService(settings)
