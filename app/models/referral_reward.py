# models/referral_reward.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime
from app.db.base_class import Base


class ReferralReward(Base):
    __tablename__ = "referral_rewards"

    reward_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    profile_id = Column(Uuid(as_uuid=True), ForeignKey("agent_profiles.profile_id", ondelete="CASCADE"), nullable=False)
    referred_user_id = Column(String(64), nullable=False)
    reward = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        # A referred user can be rewarded at most once per referrer
        UniqueConstraint("profile_id", "referred_user_id", name="uq_referral_referred_user"),
    )

    profile = relationship("AgentProfile", back_populates="referral_rewards")
