# app/crud/referral.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update
from typing import List
from uuid import UUID, uuid4
from datetime import datetime

from app.models import AgentProfile, ReferralReward


async def add_referral_reward(db: AsyncSession, profile_id: UUID, referred_user_id: str, reward: int) -> bool:
    """
    Record a reward for `referred_user_id` and credit the referrer's earnings
    in one transaction. The unique (profile_id, referred_user_id) constraint
    makes the insert a push-if-absent, so a repeat (or a concurrent duplicate)
    rolls back and returns False without touching the earnings.
    """
    db.add(ReferralReward(
        reward_id=uuid4(),
        profile_id=profile_id,
        referred_user_id=str(referred_user_id),
        reward=reward,
        date=datetime.utcnow(),
    ))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        return False

    await db.execute(
        update(AgentProfile)
        .where(AgentProfile.profile_id == profile_id)
        .values(referral_total_earnings=AgentProfile.referral_total_earnings + reward)
    )
    await db.commit()
    return True


async def list_rewards(db: AsyncSession, profile_id: UUID) -> List[ReferralReward]:
    result = await db.execute(
        select(ReferralReward)
        .where(ReferralReward.profile_id == profile_id)
        .order_by(ReferralReward.date.asc())
    )
    return result.scalars().all()
