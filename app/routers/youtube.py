from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import Optional
import logging
import traceback

from app.clients.video_platform import VideoPlatform, watch_url
from app.core.errors import UploadError
from app.core.security import CurrentUser, get_current_user
from app.dependencies import get_video_platform
from app.schemas.media import read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents/youtube", tags=["YouTube"])


@router.post(
    "/upload-youtube",
    summary="Upload a standalone video to YouTube",
    description="Publishes the uploaded video (public) and returns its watch URL.",
)
async def upload_youtube(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    user: CurrentUser = Depends(get_current_user),
    video: VideoPlatform = Depends(get_video_platform),
):
    try:
        upload = await read_upload(file)
        if upload is None:
            raise ValueError("No video file provided")
        video_id = await video.insert(
            title or "Property Video",
            description or "",
            [],
            "public",
            upload.content,
            mimetype=upload.content_type,
        )
        logger.info("YouTube upload %s by %s", video_id, user.user_id)
        return {"youtubeUrl": watch_url(video_id)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError:
        raise HTTPException(status_code=500, detail="YouTube upload failed")
    except Exception as e:
        logger.error("Error in upload_youtube: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="YouTube upload failed")
