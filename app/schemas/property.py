from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import Field

from app.schemas.base import CamelModel


# --- Input: add / update form fields ---
class PropertyFields(CamelModel):
    title: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    transaction_type: Optional[str] = None
    duration: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[str] = None
    toilets: Optional[str] = None
    area: Optional[str] = None
    features: Optional[List[str]] = None
    youtube_videos: Optional[List[str]] = None


# --- Query params ---
class PropertyFilterParams(CamelModel):
    transaction_type: Optional[str] = None
    states: Optional[str] = None  # comma separated
    types: Optional[str] = None  # comma separated
    price_range: Optional[str] = None  # "100k-500k", "1M-2M", "5M+"
    search: Optional[str] = None


# --- Media deletion bodies ---
class DeleteImageRequest(CamelModel):
    property_id: UUID
    image_url: str


class DeleteImagesRequest(CamelModel):
    property_id: UUID
    image_urls: List[str]


class DeleteVideoRequest(CamelModel):
    property_id: UUID
    video_url: str


class DeleteVideosRequest(CamelModel):
    property_id: UUID
    video_urls: List[str]


class DeleteYouTubeRequest(CamelModel):
    property_id: UUID
    youtube_url: str


# --- Output ---
class PropertyOut(CamelModel):
    property_id: UUID
    agent_id: str
    title: str
    location: str
    description: Optional[str] = None
    price: Optional[float] = None
    transaction_type: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[str] = None
    bedrooms: int = 0
    toilets: int = 0
    area: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    youtube_videos: List[str] = Field(default_factory=list)
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def property_to_dict(prop) -> dict:
    return PropertyOut.model_validate(prop).model_dump(by_alias=True, mode="json")
