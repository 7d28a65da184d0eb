from typing import Optional, Literal
from datetime import datetime

from app.schemas.base import CamelModel


class VerificationReceipt(CamelModel):
    agent: str
    status: str
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    message: str = ""
    logo: str = ""


class VerificationReceiptResponse(CamelModel):
    message: str
    receipt: VerificationReceipt


class ReviewRequest(CamelModel):
    decision: Literal["approved", "rejected"]
    message: str = ""
