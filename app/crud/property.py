# app/crud/property.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from app.models import Property


# --- Insert Property ---
async def create_property(db: AsyncSession, agent_id: str, values: dict) -> Property:
    prop = Property(property_id=uuid4(), agent_id=str(agent_id), **values)
    db.add(prop)
    await db.flush()
    return prop


# --- Fetch ---
async def get_property(db: AsyncSession, property_id: UUID) -> Optional[Property]:
    result = await db.execute(select(Property).where(Property.property_id == property_id))
    return result.scalar_one_or_none()


async def get_owned_property(db: AsyncSession, property_id: UUID, agent_id: str) -> Optional[Property]:
    result = await db.execute(
        select(Property).where(
            Property.property_id == property_id,
            Property.agent_id == str(agent_id),
        )
    )
    return result.scalar_one_or_none()


async def list_properties(db: AsyncSession, filters: Optional[list] = None) -> List[Property]:
    """ Newest first, optionally narrowed by ORM filter expressions """
    result = await db.execute(
        select(Property)
        .where(*(filters or []))
        .order_by(Property.created_at.desc())
    )
    return result.scalars().all()


async def list_properties_by_agent(db: AsyncSession, agent_id: str) -> List[Property]:
    return await list_properties(db, [Property.agent_id == str(agent_id)])


async def count_by_transaction_type(db: AsyncSession, agent_id: str) -> Dict[str, int]:
    result = await db.execute(
        select(Property.transaction_type, func.count(Property.property_id))
        .where(Property.agent_id == str(agent_id))
        .group_by(Property.transaction_type)
    )
    return {(tx or "unspecified"): count for tx, count in result.all()}


# --- Update ---
async def increment_views(db: AsyncSession, property_id: UUID) -> bool:
    result = await db.execute(
        update(Property)
        .where(Property.property_id == property_id)
        .values(views=Property.views + 1)
    )
    return result.rowcount > 0


# --- Delete ---
async def delete_owned_property(db: AsyncSession, property_id: UUID, agent_id: str) -> bool:
    result = await db.execute(
        delete(Property).where(
            Property.property_id == property_id,
            Property.agent_id == str(agent_id),
        )
    )
    return result.rowcount > 0
