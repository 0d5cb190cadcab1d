# technurture/routes/upload.py

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from technurture.config import settings
from technurture.middleware.auth import require_admin
from technurture.middleware.security_middleware import PayloadTooLargeError
from technurture.services.media import MediaError, media_kind, media_service

router = APIRouter(dependencies=[Depends(require_admin)])


async def store_upload(request: Request, upload: UploadFile, expected: str | None = None) -> dict:
    """Read the uploaded file, check its size and type, hand it to the media host."""
    content = await upload.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError(settings.MAX_UPLOAD_BYTES)

    content_type = upload.content_type or ""
    kind = media_kind(content_type)
    if kind is None or (expected and kind != expected):
        allowed = f"{expected} files are" if expected else "Only image and video files are"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{allowed.capitalize()} allowed")

    try:
        result = await media_service.upload(content, content_type)
    except MediaError as e:
        await request.app.state.log.log_error("upload", str(e), {"filename": upload.filename})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    await request.app.state.log.log_info("upload", "Media uploaded", {
        "filename": upload.filename,
        "type": result.type,
        "publicId": result.public_id,
        "size": len(content),
    })
    return {"success": True, "data": result.to_json()}


@router.post("/upload", summary="Upload an image or a video (admin)")
async def upload_media(request: Request, file: UploadFile = File(...)):
    return await store_upload(request, file)


@router.post("/upload/image", summary="Upload an image (admin)")
async def upload_image(request: Request, image: UploadFile = File(...)):
    return await store_upload(request, image, expected="image")


@router.post("/upload/video", summary="Upload a video (admin)")
async def upload_video(request: Request, video: UploadFile = File(...)):
    return await store_upload(request, video, expected="video")
