from .agent_profile import AgentProfile
from .referral_reward import ReferralReward
from .property import Property

__all__ = ["AgentProfile", "ReferralReward", "Property"]
