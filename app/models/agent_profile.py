# models/agent_profile.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, JSON, Uuid, CheckConstraint, Index
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime
from app.db.base_class import Base


class AgentProfile(Base):
    __tablename__ = "agent_profiles"

    profile_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(64), unique=True, nullable=False)  # Auth service user id

    # Basic information
    agency_name = Column(String(200), nullable=True)
    agency_email = Column(String(255), nullable=True)
    agency_phone = Column(String(30), nullable=True)
    phone = Column(String(30), nullable=True)
    state = Column(String(100), nullable=True)
    languages = Column(JSON, nullable=False, default=list)
    about = Column(Text, nullable=True)
    other_info = Column(Text, nullable=True)

    # Media / documents
    profile_image = Column(String(500), nullable=False, default="")
    cover_image = Column(String(500), nullable=False, default="")
    agency_logo = Column(String(500), nullable=False, default="")
    national_id = Column(String(500), nullable=False, default="")

    # Verification & review
    status = Column(String(20), nullable=False, default="pending")
    review_message = Column(Text, nullable=False, default="")
    submitted_at = Column(DateTime, default=datetime.utcnow)
    reviewed_at = Column(DateTime, nullable=True)

    # Connections (Auth user ids, references only)
    clients = Column(JSON, nullable=False, default=list)
    handymen = Column(JSON, nullable=False, default=list)
    fellow_agents = Column(JSON, nullable=False, default=list)

    # Performance counters
    sales_total = Column(Integer, nullable=False, default=0)
    recent_sales = Column(JSON, nullable=False, default=list)
    rented_total = Column(Integer, nullable=False, default=0)
    recent_rented = Column(JSON, nullable=False, default=list)
    booked_total = Column(Integer, nullable=False, default=0)
    recent_booked = Column(JSON, nullable=False, default=list)

    # Notifications
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    unread_notifications = Column(Integer, nullable=False, default=0)
    notifications_checked_at = Column(DateTime, default=datetime.utcnow)

    # Referral
    referral_code = Column(String(20), unique=True, nullable=True)
    referral_total_earnings = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("status IN ('pending','approved','rejected')", name="chk_profile_status"),
        Index("idx_profiles_status", "status"),
    )

    # Relationships
    referral_rewards = relationship(
        "ReferralReward",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ReferralReward.date",
    )
