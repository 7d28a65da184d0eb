# app/crud/agent_profile.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import Iterable, List, Optional
from uuid import uuid4
from datetime import datetime

from app.models import AgentProfile

ACTIVITY_FIELDS = {
    "sales": ("sales_total", "recent_sales"),
    "rented": ("rented_total", "recent_rented"),
    "booked": ("booked_total", "recent_booked"),
}


# ---------------- READ ----------------
async def get_profile_by_user_id(db: AsyncSession, user_id: str) -> Optional[AgentProfile]:
    result = await db.execute(select(AgentProfile).where(AgentProfile.user_id == str(user_id)))
    return result.scalar_one_or_none()


async def get_approved_profile(db: AsyncSession, user_id: str) -> Optional[AgentProfile]:
    result = await db.execute(
        select(AgentProfile).where(
            AgentProfile.user_id == str(user_id),
            AgentProfile.status == "approved",
        )
    )
    return result.scalar_one_or_none()


async def get_profile_by_referral_code(db: AsyncSession, code: str) -> Optional[AgentProfile]:
    result = await db.execute(select(AgentProfile).where(AgentProfile.referral_code == code))
    return result.scalar_one_or_none()


async def list_profiles_by_status(db: AsyncSession, status: str) -> List[AgentProfile]:
    result = await db.execute(
        select(AgentProfile)
        .where(AgentProfile.status == status)
        .order_by(AgentProfile.created_at.desc())
    )
    return result.scalars().all()


async def list_profiles_by_user_ids(db: AsyncSession, user_ids: Iterable[str]) -> List[AgentProfile]:
    ids = [str(i) for i in user_ids]
    if not ids:
        return []
    result = await db.execute(select(AgentProfile).where(AgentProfile.user_id.in_(ids)))
    return result.scalars().all()


# ---------------- CREATE / UPDATE ----------------
async def create_profile(db: AsyncSession, user_id: str, values: dict) -> AgentProfile:
    profile = AgentProfile(profile_id=uuid4(), user_id=str(user_id), **values)
    db.add(profile)
    await db.flush()
    return profile


def apply_updates(profile: AgentProfile, values: dict) -> AgentProfile:
    for field, value in values.items():
        setattr(profile, field, value)
    profile.updated_at = datetime.utcnow()
    return profile


async def set_referral_code_if_absent(db: AsyncSession, user_id: str, code: str) -> bool:
    """ Conditional write: only assigns the code when none is set yet """
    result = await db.execute(
        update(AgentProfile)
        .where(AgentProfile.user_id == str(user_id), AgentProfile.referral_code.is_(None))
        .values(referral_code=code, updated_at=datetime.utcnow())
    )
    return result.rowcount > 0


async def record_activity(db: AsyncSession, profile: AgentProfile, kind: str, entry: dict, limit: int) -> AgentProfile:
    """ Bump the `kind` counter and keep only the newest `limit` entries in its recent list """
    if kind not in ACTIVITY_FIELDS:
        raise ValueError(f"Unknown activity kind: {kind}")
    total_field, recent_field = ACTIVITY_FIELDS[kind]

    recent = list(getattr(profile, recent_field) or [])
    recent.append(entry)
    setattr(profile, recent_field, recent[-limit:])
    setattr(profile, total_field, (getattr(profile, total_field) or 0) + 1)
    profile.updated_at = datetime.utcnow()
    return profile
