from typing import Any, Dict, List, Mapping, Optional, Sequence
import copy
import logging

from app.clients.auth_client import AuthServiceClient
from app.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class EnrichmentAggregator:
    """
        Merges locally stored records with user records fetched from the Auth service.

        The remote data is decoration only: when the Auth service is slow, down or
        returns an error, the local records are still returned with an empty user
        field and a warning is logged. Nothing in here raises for remote failure.

        Methods:
            enrich_one(local_record, external_id, key):
                One GET; merges the remote record under `key` (None on failure).
            enrich_agent(profile, external_id):
                Agent view used by property pages: remote fields at the top level,
                the local profile under "profile".
            enrich_batch(local_records, external_ids, key):
                One batched POST over the de-duplicated ids; output order follows
                `local_records`; unmatched ids and whole-batch failure both yield
                an empty dict.
            enrich_agents_batch(records, external_ids, profiles_by_id):
                Batch counterpart of `enrich_agent`, merged under "agent".
    """

    def __init__(self, identity_client: AuthServiceClient):
        self.identity_client = identity_client

    # --- Remote fetches that never raise ---
    async def fetch_one(self, external_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.identity_client.get_user(str(external_id))
        except UpstreamUnavailableError as e:
            logger.warning("Failed to fetch Auth user %s: %s", external_id, e)
            return None

    async def fetch_many(self, external_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        # dict.fromkeys keeps first-seen order while dropping repeated owners
        unique_ids = list(dict.fromkeys(str(i) for i in external_ids if i))
        if not unique_ids:
            return {}

        try:
            users = await self.identity_client.get_users_batch(unique_ids)
        except UpstreamUnavailableError as e:
            logger.warning("Failed to fetch Auth users batch (%d ids): %s", len(unique_ids), e)
            return {}

        lookup = {}
        for user in users:
            user_id = user.get("_id") or user.get("id")
            if user_id is not None:
                lookup[str(user_id)] = user
        return lookup

    # --- Merges ---
    async def enrich_one(self, local_record: Mapping[str, Any], external_id: str, key: str = "user") -> Dict[str, Any]:
        remote = await self.fetch_one(external_id)
        return {**local_record, key: remote}

    async def enrich_agent(self, profile: Optional[Mapping[str, Any]], external_id: str) -> Dict[str, Any]:
        remote = await self.fetch_one(external_id)
        return {**(remote or {}), "profile": dict(profile or {})}

    async def enrich_batch(
        self,
        local_records: Sequence[Mapping[str, Any]],
        external_ids: Sequence[str],
        key: str = "user",
    ) -> List[Dict[str, Any]]:
        lookup = await self.fetch_many(external_ids)
        return [
            {**record, key: copy.deepcopy(lookup.get(str(external_id), {}))}
            for record, external_id in zip(local_records, external_ids)
        ]

    async def enrich_agents_batch(
        self,
        records: Sequence[Mapping[str, Any]],
        external_ids: Sequence[str],
        profiles_by_id: Mapping[str, Mapping[str, Any]],
    ) -> List[Dict[str, Any]]:
        lookup = await self.fetch_many(external_ids)
        return [
            {
                **record,
                "agent": {
                    **lookup.get(str(external_id), {}),
                    "profile": dict(profiles_by_id.get(str(external_id)) or {}),
                },
            }
            for record, external_id in zip(records, external_ids)
        ]
