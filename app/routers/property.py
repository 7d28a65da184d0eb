from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Dict, List, Optional
from uuid import UUID
import logging
import traceback

from app.core.errors import UploadError
from app.core.security import CurrentUser, get_current_user
from app.dependencies import get_property_services, property_form, property_media
from app.schemas.media import UploadedFile
from app.schemas.property import (
    DeleteImageRequest,
    DeleteImagesRequest,
    DeleteVideoRequest,
    DeleteVideosRequest,
    DeleteYouTubeRequest,
    PropertyFields,
    PropertyFilterParams,
)
from app.services.property_services import PropertyServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents/properties", tags=["Properties"])


# --- Public ---
@router.get("/all", summary="All properties, newest first, with their agents")
async def get_all_properties(services: PropertyServices = Depends(get_property_services)):
    try:
        return await services.get_all_properties_with_agents()
    except Exception as e:
        logger.error("Error in get_all_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/single/{property_id}", summary="Single property (counts a view)")
async def get_single_property(
    property_id: UUID,
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.get_single_property(property_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_single_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/filter",
    summary="Search properties",
    description="`transactionType`, `states` (CSV), `types` (CSV), `priceRange` (`100k-500k`, `1M-2M`, `5M+`) and free-text `search`.",
)
async def filter_properties(
    transaction_type: Optional[str] = Query(None, alias="transactionType"),
    states: Optional[str] = Query(None),
    types: Optional[str] = Query(None),
    price_range: Optional[str] = Query(None, alias="priceRange"),
    search: Optional[str] = Query(None),
    services: PropertyServices = Depends(get_property_services),
):
    params = PropertyFilterParams(
        transaction_type=transaction_type,
        states=states,
        types=types,
        price_range=price_range,
        search=search,
    )
    try:
        return await services.filter_properties(params)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in filter_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Agent only ---
@router.get("/my-properties", summary="The logged-in agent with their properties")
async def get_my_properties(
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.get_agent_with_properties(user.user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_my_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/add",
    status_code=201,
    summary="Add a property",
    description="Multipart form with `images` and/or `videos`. Videos are also published to YouTube.",
)
async def add_property(
    user: CurrentUser = Depends(get_current_user),
    fields: PropertyFields = Depends(property_form),
    media: Dict[str, List[UploadedFile]] = Depends(property_media),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.add_property(user.user_id, fields, media["images"], media["videos"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Error in add_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put("/{property_id}", summary="Update an owned property")
async def update_property(
    property_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    fields: PropertyFields = Depends(property_form),
    media: Dict[str, List[UploadedFile]] = Depends(property_media),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.update_property(user.user_id, property_id, fields, media["images"], media["videos"])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Error in update_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/delete/{property_id}", summary="Delete an owned property")
async def delete_property(
    property_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.delete_property(user.user_id, property_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Media deletion ---
@router.delete("/delete-image", summary="Remove one image from a property")
async def delete_single_image(
    request: DeleteImageRequest,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        images = await services.delete_images(user.user_id, request.property_id, [request.image_url])
        return {"message": "Image deleted successfully", "images": images}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_single_image: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/delete-images", summary="Remove several images from a property")
async def delete_multiple_images(
    request: DeleteImagesRequest,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        images = await services.delete_images(user.user_id, request.property_id, request.image_urls)
        return {"message": "Images deleted successfully", "images": images}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_multiple_images: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/delete-video", summary="Remove one video from a property and Cloudinary")
async def delete_single_video(
    request: DeleteVideoRequest,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        videos = await services.delete_videos(user.user_id, request.property_id, [request.video_url])
        return {"message": "Video deleted successfully", "videos": videos}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_single_video: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/delete-videos", summary="Remove several videos from a property and Cloudinary")
async def delete_multiple_videos(
    request: DeleteVideosRequest,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        videos = await services.delete_videos(user.user_id, request.property_id, request.video_urls)
        return {"message": "Videos deleted successfully", "videos": videos}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_multiple_videos: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/delete-youtube", summary="Unlink a YouTube video from a property")
async def delete_youtube_video(
    request: DeleteYouTubeRequest,
    user: CurrentUser = Depends(get_current_user),
    services: PropertyServices = Depends(get_property_services),
):
    try:
        youtube_videos = await services.delete_youtube_video(user.user_id, request.property_id, request.youtube_url)
        return {"message": "YouTube video removed successfully", "youtubeVideos": youtube_videos}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_youtube_video: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# Keep last so it does not catch the static paths above
@router.get("/{agent_id}", summary="Public view of an agent with their properties")
async def get_public_agent_properties(
    agent_id: str,
    services: PropertyServices = Depends(get_property_services),
):
    try:
        return await services.get_agent_with_properties(agent_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_public_agent_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
