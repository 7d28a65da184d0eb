from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID
import logging

from app.clients.media_storage import MediaStorage, public_id_from_url
from app.clients.video_platform import VideoPlatform, watch_url
from app.core.errors import NotFoundError, UploadError, ValidationError
from app.crud import agent_profile as crud_profile
from app.crud import property as crud_property
from app.models import Property
from app.schemas.agent_profile import profile_to_dict
from app.schemas.base import normalize_list
from app.schemas.media import UploadedFile
from app.schemas.property import PropertyFields, PropertyFilterParams, property_to_dict
from app.services.agent_profile_services import dashboard_cache_key
from app.services.enrichment import EnrichmentAggregator
from app.services.property_filters import build_property_filters

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "properties/images"
VIDEO_FOLDER = "properties/videos"
YOUTUBE_TAGS = ["real estate", "property", "house", "land"]
SCALAR_FIELDS = ("title", "location", "description", "transaction_type", "duration", "type", "area")


def is_land(property_type: Optional[str]) -> bool:
    return (property_type or "").strip().lower() == "land"


def to_count(value, default: int = 0) -> int:
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return default


def drop_hashes(file_hashes: Optional[Mapping[str, str]], removed_urls: Iterable[str]) -> Dict[str, str]:
    """ Forget the hashes of removed media so the same file can be uploaded again """
    removed = set(removed_urls)
    return {digest: url for digest, url in (file_hashes or {}).items() if url not in removed}


class PropertyServices:
    """
        Service class for property listings.

        Media flow: images go to Cloudinary, videos go to Cloudinary and (on
        creation) are mirrored to YouTube. A failed YouTube mirror is logged and
        the listing keeps its Cloudinary video without a YouTube link.

        `file_hashes` maps the sha256 of every attached file to its URL; a file
        whose hash is already attached is skipped instead of being uploaded a
        second time. Removing media forgets its hash.

        Invariant: a property whose type is "land" always has zero bedrooms and
        toilets after create or update, whatever the request said.

        Agent details on read paths come from `EnrichmentAggregator` and degrade to
        the local profile alone when the Auth service is unavailable. Every write
        (and view count) drops the owning agent's cached dashboard overview.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        video: VideoPlatform,
        enrichment: EnrichmentAggregator,
        redis: Optional[Redis] = None,
    ):
        self.db = db
        self.storage = storage
        self.video = video
        self.enrichment = enrichment
        self.redis = redis

    # --- Media helpers ---
    async def _upload_media(
        self,
        known_hashes: Optional[Mapping[str, str]],
        images: List[UploadedFile],
        videos: List[UploadedFile],
        youtube: Optional[dict] = None,
    ) -> dict:
        hashes = dict(known_hashes or {})
        uploaded = {"images": [], "videos": [], "youtube_videos": []}

        for file in images:
            digest = file.sha256
            if digest in hashes:
                logger.info("Skipping duplicate image %s", file.filename)
                continue
            url = await self.storage.upload(
                file.content, IMAGE_FOLDER, content_type=file.content_type,
                filename=file.filename, resource_type="image",
            )
            uploaded["images"].append(url)
            hashes[digest] = url

        for file in videos:
            digest = file.sha256
            if digest in hashes:
                logger.info("Skipping duplicate video %s", file.filename)
                continue
            url = await self.storage.upload(
                file.content, VIDEO_FOLDER, content_type=file.content_type,
                filename=file.filename, resource_type="video",
            )
            uploaded["videos"].append(url)
            hashes[digest] = url

            if youtube is not None:
                try:
                    video_id = await self.video.insert(
                        youtube["title"], youtube["description"], YOUTUBE_TAGS, "public",
                        file.content, mimetype=file.content_type or "video/mp4",
                    )
                except UploadError as e:
                    logger.warning("YouTube mirror of %s skipped: %s", file.filename, e)
                else:
                    uploaded["youtube_videos"].append(watch_url(video_id))

        uploaded["file_hashes"] = hashes
        return uploaded

    async def _get_owned(self, agent_id: str, property_id: UUID) -> Property:
        prop = await crud_property.get_owned_property(self.db, property_id, agent_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    async def _invalidate_dashboard(self, agent_id: str) -> None:
        if self.redis is not None:
            await self.redis.delete(dashboard_cache_key(agent_id))

    # --- Create / update / delete ---
    async def add_property(
        self,
        agent_id: str,
        fields: PropertyFields,
        images: List[UploadedFile],
        videos: List[UploadedFile],
    ) -> dict:
        if not images and not videos:
            raise ValidationError("At least one image or video is required")
        if not fields.title or not fields.location:
            raise ValidationError("Title and location are required")

        features = normalize_list(fields.features)
        title = fields.title.strip() or "Property Video"
        if features:
            description = ", ".join(features)
        else:
            price = f"{fields.price:,.0f}" if fields.price is not None else "N/A"
            description = f"Property in {fields.location} priced at ₦{price}"

        media = await self._upload_media({}, images, videos, youtube={"title": title, "description": description})

        land = is_land(fields.type)
        prop = await crud_property.create_property(self.db, agent_id, {
            "title": fields.title,
            "location": fields.location,
            "description": fields.description,
            "price": fields.price,
            "transaction_type": fields.transaction_type,
            "duration": fields.duration,
            "type": fields.type,
            "bedrooms": 0 if land else to_count(fields.bedrooms),
            "toilets": 0 if land else to_count(fields.toilets),
            "area": fields.area,
            "features": features,
            "images": media["images"],
            "videos": media["videos"],
            "youtube_videos": media["youtube_videos"] + normalize_list(fields.youtube_videos),
            "file_hashes": media["file_hashes"],
        })
        await self.db.commit()
        await self.db.refresh(prop)
        await self._invalidate_dashboard(agent_id)
        logger.info("Property %s added by %s", prop.property_id, agent_id)

        return {"property": property_to_dict(prop), "message": "Property added successfully with media uploads"}

    async def update_property(
        self,
        agent_id: str,
        property_id: UUID,
        fields: PropertyFields,
        images: List[UploadedFile],
        videos: List[UploadedFile],
    ) -> dict:
        prop = await self._get_owned(agent_id, property_id)

        media = await self._upload_media(prop.file_hashes, images, videos)
        prop.images = list(prop.images or []) + media["images"]
        prop.videos = list(prop.videos or []) + media["videos"]
        prop.file_hashes = media["file_hashes"]

        for attr in SCALAR_FIELDS:
            value = getattr(fields, attr)
            if value:
                setattr(prop, attr, value)
        if fields.price is not None:
            prop.price = fields.price

        if is_land(prop.type):
            prop.bedrooms, prop.toilets = 0, 0
        else:
            if fields.bedrooms:
                prop.bedrooms = to_count(fields.bedrooms, prop.bedrooms)
            if fields.toilets:
                prop.toilets = to_count(fields.toilets, prop.toilets)

        if fields.features:
            prop.features = normalize_list(fields.features)
        if fields.youtube_videos:
            prop.youtube_videos = normalize_list(fields.youtube_videos)

        await self.db.commit()
        await self.db.refresh(prop)
        await self._invalidate_dashboard(agent_id)
        return {"message": "Property updated successfully", "property": property_to_dict(prop)}

    async def delete_property(self, agent_id: str, property_id: UUID) -> dict:
        deleted = await crud_property.delete_owned_property(self.db, property_id, agent_id)
        if not deleted:
            raise NotFoundError("Property not found")
        await self.db.commit()
        await self._invalidate_dashboard(agent_id)
        logger.info("Property %s deleted by %s", property_id, agent_id)
        return {"message": "Property deleted successfully"}

    async def delete_images(self, agent_id: str, property_id: UUID, image_urls: List[str]) -> List[str]:
        if not image_urls or not all(image_urls):
            raise ValidationError("Property ID and image URL(s) required")
        prop = await self._get_owned(agent_id, property_id)

        prop.images = [img for img in (prop.images or []) if img not in image_urls]
        prop.file_hashes = drop_hashes(prop.file_hashes, image_urls)
        await self.db.commit()
        await self._invalidate_dashboard(agent_id)
        return prop.images

    async def delete_videos(self, agent_id: str, property_id: UUID, video_urls: List[str]) -> List[str]:
        if not video_urls or not all(video_urls):
            raise ValidationError("Property ID and video URL(s) required")
        prop = await self._get_owned(agent_id, property_id)

        attached = [vid for vid in (prop.videos or []) if vid in video_urls]
        prop.videos = [vid for vid in (prop.videos or []) if vid not in video_urls]
        prop.file_hashes = drop_hashes(prop.file_hashes, attached)
        await self.db.commit()
        await self._invalidate_dashboard(agent_id)

        for url in attached:
            public_id = f"{VIDEO_FOLDER}/{public_id_from_url(url)}"
            if not await self.storage.delete(public_id, resource_type="video"):
                logger.warning("Cloudinary asset %s was not removed", public_id)
        return prop.videos

    async def delete_youtube_video(self, agent_id: str, property_id: UUID, youtube_url: str) -> List[str]:
        """ Unlinks the video from the property; the YouTube upload itself is left alone """
        if not youtube_url:
            raise ValidationError("Property ID and YouTube URL required")
        prop = await self._get_owned(agent_id, property_id)

        prop.youtube_videos = [yt for yt in (prop.youtube_videos or []) if yt != youtube_url]
        await self.db.commit()
        return prop.youtube_videos

    # --- Reads ---
    async def get_single_property(self, property_id: UUID) -> dict:
        if not await crud_property.increment_views(self.db, property_id):
            raise NotFoundError("Property not found")
        await self.db.commit()

        prop = await crud_property.get_property(self.db, property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self._invalidate_dashboard(prop.agent_id)

        profile = await crud_profile.get_profile_by_user_id(self.db, prop.agent_id)
        if not profile:
            logger.warning("Agent profile not found for property %s (agent %s)", property_id, prop.agent_id)

        agent = await self.enrichment.enrich_agent(profile_to_dict(profile) if profile else None, prop.agent_id)
        return {"property": property_to_dict(prop), "agent": agent}

    async def get_all_properties_with_agents(self) -> dict:
        properties = await crud_property.list_properties(self.db)
        if not properties:
            return {"properties": [], "message": "No properties found"}

        agent_ids = [p.agent_id for p in properties]
        profiles = await crud_profile.list_profiles_by_user_ids(self.db, set(agent_ids))
        profiles_by_id = {p.user_id: profile_to_dict(p) for p in profiles}

        enriched = await self.enrichment.enrich_agents_batch(
            [property_to_dict(p) for p in properties], agent_ids, profiles_by_id
        )
        return {"properties": enriched}

    async def get_agent_with_properties(self, agent_id: str) -> dict:
        profile = await crud_profile.get_profile_by_user_id(self.db, agent_id)
        if not profile:
            raise NotFoundError("Agent profile not found")

        agent = await self.enrichment.enrich_agent(profile_to_dict(profile), agent_id)
        properties = await crud_property.list_properties_by_agent(self.db, agent_id)
        return {"agent": agent, "properties": [property_to_dict(p) for p in properties]}

    async def filter_properties(self, params: PropertyFilterParams) -> dict:
        filters = build_property_filters(params)
        properties = await crud_property.list_properties(self.db, filters)
        return {"properties": [property_to_dict(p) for p in properties]}
