# technurture/schemas/media.py

from typing import Literal, Optional

from technurture.schemas.base import CamelModel


class MediaUploadResult(CamelModel):
    url: str
    public_id: str
    type: Literal["image", "video"]
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    format: str
    thumbnail: Optional[str] = None
