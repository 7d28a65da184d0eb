from typing import List, Optional, Literal
from uuid import UUID
from datetime import datetime
from pydantic import Field, field_validator

from app.schemas.base import CamelModel, normalize_list


# --- Input: profile / verification form fields ---
class ProfileFields(CamelModel):
    agency_name: Optional[str] = None
    agency_email: Optional[str] = None
    agency_phone: Optional[str] = None
    phone: Optional[str] = None
    state: Optional[str] = None
    language: Optional[List[str]] = None
    about: Optional[str] = None
    other_info: Optional[str] = None

    @field_validator("language", mode="before")
    @classmethod
    def split_language(cls, value):
        if value is None:
            return None
        return normalize_list([value] if isinstance(value, str) else value)


class AgentBatchRequest(CamelModel):
    ids: List[str] = Field(default_factory=list)


class ActivityEntry(CamelModel):
    kind: Literal["sales", "rented", "booked"]
    property_id: Optional[str] = None
    client_id: Optional[str] = None
    amount: Optional[float] = None
    date: datetime = Field(default_factory=datetime.utcnow)


# --- Output ---
class AgentProfileOut(CamelModel):
    profile_id: UUID
    user_id: str
    agency_name: Optional[str] = None
    agency_email: Optional[str] = None
    agency_phone: Optional[str] = None
    phone: Optional[str] = None
    state: Optional[str] = None
    languages: List[str] = []
    about: Optional[str] = None
    other_info: Optional[str] = None
    profile_image: str = ""
    cover_image: str = ""
    agency_logo: str = ""
    national_id: str = ""
    status: Literal["pending", "approved", "rejected"]
    review_message: str = ""
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    clients: List[str] = []
    handymen: List[str] = []
    fellow_agents: List[str] = []
    sales_total: int = 0
    recent_sales: List[dict] = []
    rented_total: int = 0
    recent_rented: List[dict] = []
    booked_total: int = 0
    recent_booked: List[dict] = []
    notifications_enabled: bool = True
    unread_notifications: int = 0
    notifications_checked_at: Optional[datetime] = None
    referral_code: Optional[str] = None
    referral_total_earnings: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AgentProfileSummary(CamelModel):
    profile_id: UUID
    user_id: str
    agency_name: Optional[str] = None
    agency_email: Optional[str] = None
    agency_phone: Optional[str] = None
    profile_image: str = ""
    cover_image: str = ""


def profile_to_dict(profile) -> dict:
    """ ORM row -> JSON-ready camelCase dict """
    return AgentProfileOut.model_validate(profile).model_dump(by_alias=True, mode="json")
