from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from typing import Dict, List, Optional
from datetime import datetime
import json
import logging

from app.clients.media_storage import MediaStorage
from app.core.errors import NotFoundError, ValidationError
from app.crud import agent_profile as crud_profile
from app.crud import property as crud_property
from app.schemas.agent_profile import AgentProfileSummary, ProfileFields, profile_to_dict
from app.schemas.media import UploadedFile
from app.services.enrichment import EnrichmentAggregator
from app.services.verification_workflow import DOCUMENT_FOLDERS, fields_to_columns

logger = logging.getLogger(__name__)


def dashboard_cache_key(user_id: str) -> str:
    return f"agent_dashboard:{user_id}"


class AgentProfileServices:
    """
        Service class for agent profile operations.

        Reads always come from the local profile store; Auth service user records
        are layered on top through the `EnrichmentAggregator` and never fail the
        request. The dashboard overview is cached in Redis and invalidated when
        the agent updates their profile.

        Methods:
            get_my_profile(user_id)                 own profile + user
            get_agent_by_id(agent_id)               approved profile + user
            update_my_profile(user_id, fields, documents)
            get_all_agents()                        approved profiles, batch-enriched
            get_agents_batch(ids)                   summary fields for many agents
            get_dashboard_overview(user_id)         profile, user and listing stats (cached)
            record_activity(user_id, kind, entry)   sales / rented / booked bookkeeping
    """

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis,
        enrichment: EnrichmentAggregator,
        storage: MediaStorage,
        cache_ttl: int = 300,
        recent_activity_limit: int = 20,
    ):
        self.db = db
        self.redis = redis
        self.enrichment = enrichment
        self.storage = storage
        self.cache_ttl = cache_ttl
        self.recent_activity_limit = recent_activity_limit

    async def get_my_profile(self, user_id: str) -> dict:
        if not user_id:
            raise ValidationError("User ID missing")
        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Agent profile not found")

        return {"profile": await self.enrichment.enrich_one(profile_to_dict(profile), user_id)}

    async def get_agent_by_id(self, agent_id: str) -> dict:
        profile = await crud_profile.get_approved_profile(self.db, agent_id)
        if not profile:
            raise NotFoundError("Agent not found or not verified")

        return {"profile": await self.enrichment.enrich_one(profile_to_dict(profile), agent_id)}

    async def update_my_profile(
        self,
        user_id: str,
        fields: ProfileFields,
        documents: Dict[str, Optional[UploadedFile]],
    ) -> dict:
        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Profile not found")

        values = fields_to_columns(fields, provided_only=True)
        for column, folder in DOCUMENT_FOLDERS.items():
            doc = documents.get(column)
            if doc is not None:
                values[column] = await self.storage.upload(
                    doc.content, folder, content_type=doc.content_type, filename=doc.filename
                )

        crud_profile.apply_updates(profile, values)
        await self.db.commit()
        await self.db.refresh(profile)
        await self.redis.delete(dashboard_cache_key(user_id))

        return {"message": "Profile updated successfully", "profile": profile_to_dict(profile)}

    async def get_all_agents(self) -> dict:
        profiles = await crud_profile.list_profiles_by_status(self.db, "approved")
        if not profiles:
            return {"count": 0, "agents": [], "message": "No approved agents found"}

        agents = await self.enrichment.enrich_batch(
            [profile_to_dict(p) for p in profiles],
            [p.user_id for p in profiles],
            key="user",
        )
        return {"count": len(agents), "agents": agents}

    async def get_agents_batch(self, ids: List[str]) -> dict:
        if not ids:
            raise ValidationError("No agent IDs provided")

        profiles = await crud_profile.list_profiles_by_user_ids(self.db, ids)
        return {
            "agents": [
                AgentProfileSummary.model_validate(p).model_dump(by_alias=True, mode="json")
                for p in profiles
            ]
        }

    async def get_dashboard_overview(self, user_id: str) -> dict:
        if not user_id:
            raise ValidationError("User ID missing")

        cache_key = dashboard_cache_key(user_id)
        cached = await self.redis.get(cache_key)
        if cached:
            return json.loads(cached)

        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Agent profile not found")

        user = await self.enrichment.fetch_one(user_id)
        properties = await crud_property.list_properties_by_agent(self.db, user_id)
        by_transaction_type = await crud_property.count_by_transaction_type(self.db, user_id)

        overview = {
            "agent": {**(user or {}), "profile": profile_to_dict(profile)},
            "stats": {
                "totalProperties": len(properties),
                "totalViews": sum(p.views or 0 for p in properties),
                "listingsByTransactionType": by_transaction_type,
                "totalSales": profile.sales_total,
                "totalRented": profile.rented_total,
                "totalBooked": profile.booked_total,
                "recentSales": profile.recent_sales or [],
                "recentRented": profile.recent_rented or [],
                "recentBooked": profile.recent_booked or [],
            },
        }

        # Partial overviews (Auth unavailable) are not cached
        if user is not None:
            await self.redis.set(cache_key, json.dumps(overview, default=str), ex=self.cache_ttl)
        return overview

    async def record_activity(self, user_id: str, kind: str, entry: dict) -> dict:
        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Agent profile not found")

        entry = {**entry, "date": entry.get("date") or datetime.utcnow().isoformat()}
        await crud_profile.record_activity(self.db, profile, kind, entry, self.recent_activity_limit)
        await self.db.commit()
        await self.db.refresh(profile)
        await self.redis.delete(dashboard_cache_key(user_id))
        return profile_to_dict(profile)
