from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging
import secrets
import string

from app.core.errors import NotFoundError, ValidationError
from app.crud import agent_profile as crud_profile
from app.crud import referral as crud_referral
from app.services.enrichment import EnrichmentAggregator

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
CODE_ATTEMPTS = 3


def generate_referral_code(user_id: str) -> str:
    """ Last 6 chars of the user id + 4 random base-36 chars (uppercased) """
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"{str(user_id)[-6:]}{suffix.upper()}"


class ReferralLedger:
    """
        Referral codes and reward bookkeeping for agent profiles.

        - `ensure_code` hands out one code per profile and never regenerates it.
        - `track_referral` grants a reward at most once per referred user, relying
          on the store's unique constraint rather than a read-then-write check.
        - `get_referral_data` reports the ledger with referred users enriched from
          the Auth service.
    """

    def __init__(self, db: AsyncSession, enrichment: EnrichmentAggregator, reward_amount: int = 500):
        self.db = db
        self.enrichment = enrichment
        self.reward_amount = reward_amount

    async def ensure_code(self, user_id: str) -> str:
        if not user_id:
            raise ValidationError("User ID missing")

        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        if profile.referral_code:
            return profile.referral_code

        for _ in range(CODE_ATTEMPTS):
            code = generate_referral_code(user_id)
            try:
                assigned = await crud_profile.set_referral_code_if_absent(self.db, user_id, code)
                await self.db.commit()
            except IntegrityError:
                # code already owned by another profile
                await self.db.rollback()
                continue

            if assigned:
                logger.info("Referral code %s assigned to %s", code, user_id)
                return code

            # A concurrent request assigned one first
            await self.db.refresh(profile)
            return profile.referral_code

        raise RuntimeError("Could not generate a unique referral code")

    async def track_referral(self, code: str, new_user_id: str, reward: int = None) -> dict:
        if not code or not new_user_id:
            raise ValidationError("Referral code or user missing")

        referrer = await crud_profile.get_profile_by_referral_code(self.db, code)
        if not referrer:
            raise NotFoundError("Invalid referral code")

        reward = self.reward_amount if reward is None else reward
        added = await crud_referral.add_referral_reward(self.db, referrer.profile_id, str(new_user_id), reward)
        if not added:
            logger.info("Referral %s -> %s already tracked", code, new_user_id)
            return {"message": "Referral already tracked.", "reward_added": False}

        logger.info("Referral %s -> %s tracked, reward %s", code, new_user_id, reward)
        return {"message": "Referral tracked successfully", "reward": reward, "reward_added": True}

    async def get_referral_data(self, user_id: str) -> dict:
        if not user_id:
            raise ValidationError("User ID missing")

        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Profile not found")

        rewards = await crud_referral.list_rewards(self.db, profile.profile_id)
        records = [
            {"userId": r.referred_user_id, "reward": r.reward, "date": r.date.isoformat()}
            for r in rewards
        ]
        referred_users = await self.enrichment.enrich_batch(
            records, [r.referred_user_id for r in rewards], key="user"
        )

        return {
            "code": profile.referral_code,
            "total_earnings": profile.referral_total_earnings,
            "total_referrals": len(rewards),
            "referred_users": referred_users,
        }
