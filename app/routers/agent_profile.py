from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Optional
import logging
import traceback

from app.core.errors import UploadError
from app.core.security import CurrentUser, get_current_user, require_admin
from app.dependencies import (
    get_profile_services,
    get_referral_ledger,
    profile_documents,
    profile_form,
)
from app.schemas.agent_profile import ActivityEntry, AgentBatchRequest, ProfileFields
from app.schemas.media import UploadedFile
from app.schemas.referral import (
    ReferralCodeResponse,
    ReferralDataResponse,
    TrackReferralRequest,
    TrackReferralResponse,
)
from app.services.agent_profile_services import AgentProfileServices
from app.services.referral_ledger import ReferralLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents/profile", tags=["Agent Profile"])


# --- Agent self ---
@router.get("/me", summary="Get the logged-in agent's profile")
async def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        return await services.get_my_profile(user.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_my_profile: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put(
    "/me",
    summary="Update the logged-in agent's profile",
    description="Multipart form: profile fields plus optional `nationalId` / `agencyLogo` files.",
)
async def update_my_profile(
    user: CurrentUser = Depends(get_current_user),
    fields: ProfileFields = Depends(profile_form),
    documents: Dict[str, Optional[UploadedFile]] = Depends(profile_documents),
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        return await services.update_my_profile(user.user_id, fields, documents)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Error in update_my_profile: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/overview",
    summary="Agent dashboard overview",
    description="Profile, Auth user record, listing stats and recent activity. Cached in Redis.",
)
async def get_dashboard_overview(
    user: CurrentUser = Depends(get_current_user),
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        return await services.get_dashboard_overview(user.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_dashboard_overview: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Listings ---
@router.post("/batch", summary="Summary fields for several agents")
async def get_agents_batch(
    request: AgentBatchRequest,
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        return await services.get_agents_batch(request.ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in get_agents_batch: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/all", summary="All approved agents with their Auth user records")
async def get_all_agents(services: AgentProfileServices = Depends(get_profile_services)):
    try:
        return await services.get_all_agents()
    except Exception as e:
        logger.error("Error in get_all_agents: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Referral ---
@router.get("/code", response_model=ReferralCodeResponse, summary="Get (or create) the agent's referral code")
async def ensure_referral_code(
    user: CurrentUser = Depends(get_current_user),
    ledger: ReferralLedger = Depends(get_referral_ledger),
):
    try:
        return {"code": await ledger.ensure_code(user.user_id)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in ensure_referral_code: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/track",
    response_model=TrackReferralResponse,
    summary="Record a signup made with a referral code",
    description="Called on signup. A referred user is rewarded at most once; repeats return `rewardAdded: false`.",
)
async def track_referral(
    request: TrackReferralRequest,
    ledger: ReferralLedger = Depends(get_referral_ledger),
):
    try:
        return await ledger.track_referral(request.ref_code, request.new_user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in track_referral: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/referraldata", response_model=ReferralDataResponse, summary="Referral earnings and referred users")
async def get_referral_data(
    user: CurrentUser = Depends(get_current_user),
    ledger: ReferralLedger = Depends(get_referral_ledger),
):
    try:
        return await ledger.get_referral_data(user.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_referral_data: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Admin ---
@router.post("/{agent_id}/activity", summary="Record a sale, rental or booking for an agent")
async def record_activity(
    agent_id: str,
    entry: ActivityEntry,
    admin: CurrentUser = Depends(require_admin),
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        payload = entry.model_dump(by_alias=True, mode="json", exclude={"kind"})
        return {"profile": await services.record_activity(agent_id, entry.kind, payload)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in record_activity: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# Keep last so it does not shadow the static paths above
@router.get("/{agent_id}", summary="Public view of an approved agent")
async def get_agent_by_id(
    agent_id: str,
    services: AgentProfileServices = Depends(get_profile_services),
):
    try:
        return await services.get_agent_by_id(agent_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_agent_by_id: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
