from typing import List, Optional
from pydantic import Field

from app.schemas.base import CamelModel


class TrackReferralRequest(CamelModel):
    ref_code: Optional[str] = None
    new_user_id: Optional[str] = None


class TrackReferralResponse(CamelModel):
    message: str
    reward_added: bool
    reward: Optional[int] = None


class ReferralCodeResponse(CamelModel):
    code: str


class ReferralDataResponse(CamelModel):
    code: Optional[str] = None
    total_earnings: int
    total_referrals: int
    referred_users: List[dict] = Field(default_factory=list)
