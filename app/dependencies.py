# app/dependencies.py
from fastapi import Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from typing import Dict, List, Optional

from app.clients.auth_client import AuthServiceClient
from app.clients.media_storage import MediaStorage
from app.clients.video_platform import VideoPlatform
from app.core.config import Settings, get_settings
from app.db.redis_client import get_redis
from app.db.session import get_db
from app.schemas.agent_profile import ProfileFields
from app.schemas.media import UploadedFile, read_upload, read_uploads
from app.schemas.property import PropertyFields
from app.services.agent_profile_services import AgentProfileServices
from app.services.enrichment import EnrichmentAggregator
from app.services.property_services import PropertyServices
from app.services.referral_ledger import ReferralLedger
from app.services.verification_workflow import VerificationWorkflow

_auth_client: Optional[AuthServiceClient] = None
_media_storage: Optional[MediaStorage] = None
_video_platform: Optional[VideoPlatform] = None


# --- Process-wide clients ---
def get_auth_client(settings: Settings = Depends(get_settings)) -> AuthServiceClient:
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthServiceClient(settings)
    return _auth_client


async def close_auth_client() -> None:
    global _auth_client
    if _auth_client is not None:
        await _auth_client.aclose()
        _auth_client = None


def get_media_storage(settings: Settings = Depends(get_settings)) -> MediaStorage:
    global _media_storage
    if _media_storage is None:
        _media_storage = MediaStorage(settings)
    return _media_storage


def get_video_platform(settings: Settings = Depends(get_settings)) -> VideoPlatform:
    global _video_platform
    if _video_platform is None:
        _video_platform = VideoPlatform(settings)
    return _video_platform


# --- Per-request services ---
def get_enrichment(auth_client: AuthServiceClient = Depends(get_auth_client)) -> EnrichmentAggregator:
    return EnrichmentAggregator(auth_client)


def get_referral_ledger(
    db: AsyncSession = Depends(get_db),
    enrichment: EnrichmentAggregator = Depends(get_enrichment),
    settings: Settings = Depends(get_settings),
) -> ReferralLedger:
    return ReferralLedger(db, enrichment, reward_amount=settings.REFERRAL_REWARD)


def get_verification_workflow(
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    auth_client: AuthServiceClient = Depends(get_auth_client),
) -> VerificationWorkflow:
    return VerificationWorkflow(db, storage, identity_client=auth_client)


def get_profile_services(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
    enrichment: EnrichmentAggregator = Depends(get_enrichment),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_settings),
) -> AgentProfileServices:
    return AgentProfileServices(
        db, redis, enrichment, storage,
        cache_ttl=settings.DASHBOARD_CACHE_TTL_SECONDS,
        recent_activity_limit=settings.RECENT_ACTIVITY_LIMIT,
    )


def get_property_services(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
    storage: MediaStorage = Depends(get_media_storage),
    video: VideoPlatform = Depends(get_video_platform),
    enrichment: EnrichmentAggregator = Depends(get_enrichment),
) -> PropertyServices:
    return PropertyServices(db, storage, video, enrichment, redis=redis)


# --- Multipart forms ---
async def profile_form(
    agency_name: Optional[str] = Form(None, alias="agencyName"),
    agency_email: Optional[str] = Form(None, alias="agencyEmail"),
    agency_phone: Optional[str] = Form(None, alias="agencyPhone"),
    phone: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    language: Optional[List[str]] = Form(None),
    about: Optional[str] = Form(None),
    other_info: Optional[str] = Form(None, alias="otherInfo"),
) -> ProfileFields:
    return ProfileFields(
        agency_name=agency_name,
        agency_email=agency_email,
        agency_phone=agency_phone,
        phone=phone,
        state=state,
        language=language,
        about=about,
        other_info=other_info,
    )


async def profile_documents(
    national_id: Optional[UploadFile] = File(None, alias="nationalId"),
    agency_logo: Optional[UploadFile] = File(None, alias="agencyLogo"),
) -> Dict[str, Optional[UploadedFile]]:
    return {
        "national_id": await read_upload(national_id),
        "agency_logo": await read_upload(agency_logo),
    }


async def property_form(
    title: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    transaction_type: Optional[str] = Form(None, alias="transactionType"),
    duration: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    toilets: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    features: Optional[List[str]] = Form(None),
    youtube_videos: Optional[List[str]] = Form(None, alias="youtubeVideos"),
) -> PropertyFields:
    return PropertyFields(
        title=title,
        location=location,
        description=description,
        price=price,
        transaction_type=transaction_type,
        duration=duration,
        type=type,
        bedrooms=bedrooms,
        toilets=toilets,
        area=area,
        features=features,
        youtube_videos=youtube_videos,
    )


async def property_media(
    images: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
) -> Dict[str, List[UploadedFile]]:
    return {"images": await read_uploads(images), "videos": await read_uploads(videos)}
