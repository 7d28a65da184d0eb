from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Optional
import logging
import traceback

from app.core.errors import UploadError
from app.core.security import CurrentUser, get_current_user, require_admin
from app.dependencies import get_verification_workflow, profile_documents, profile_form
from app.schemas.agent_profile import ProfileFields, profile_to_dict
from app.schemas.media import UploadedFile
from app.schemas.verification import ReviewRequest, VerificationReceiptResponse
from app.services.verification_workflow import VerificationWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents/verification", tags=["Verification"])


@router.post(
    "/submit",
    status_code=201,
    summary="Submit agent verification",
    description="Uploads the national ID and agency logo, then stores the profile as `pending` for admin review.",
)
async def submit_verification(
    user: CurrentUser = Depends(get_current_user),
    fields: ProfileFields = Depends(profile_form),
    documents: Dict[str, Optional[UploadedFile]] = Depends(profile_documents),
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
):
    try:
        profile = await workflow.submit(user.user_id, fields, documents)
        return {"message": "Verification submitted successfully.", "profile": profile_to_dict(profile)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Error in submit_verification: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Verification submission failed.")


@router.get("/my", summary="Get the caller's verification profile")
async def get_my_verification(
    user: CurrentUser = Depends(get_current_user),
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
):
    try:
        profile = await workflow.get_own(user.user_id)
        return {"profile": profile_to_dict(profile)}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_my_verification: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to fetch verification.")


@router.get("/receipt", response_model=VerificationReceiptResponse, summary="Verification receipt")
async def get_verification_receipt(
    user: CurrentUser = Depends(get_current_user),
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
):
    try:
        receipt = await workflow.get_receipt(user.user_id)
        return {"message": "Verification receipt retrieved successfully.", "receipt": receipt}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_verification_receipt: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to fetch verification receipt.")


@router.post(
    "/resubmit",
    summary="Resubmit a rejected verification",
    description="Only allowed from `rejected`. Fields that are not sent keep their stored values.",
)
async def resubmit_verification(
    user: CurrentUser = Depends(get_current_user),
    fields: ProfileFields = Depends(profile_form),
    documents: Dict[str, Optional[UploadedFile]] = Depends(profile_documents),
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
):
    try:
        profile = await workflow.resubmit(user.user_id, fields, documents)
        return {"message": "Verification resubmitted successfully.", "profile": profile_to_dict(profile)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Error in resubmit_verification: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Failed to resubmit verification.")


@router.patch("/{user_id}/review", summary="Approve or reject a pending verification (admin)")
async def review_verification(
    user_id: str,
    request: ReviewRequest,
    admin: CurrentUser = Depends(require_admin),
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
):
    try:
        profile = await workflow.review(user_id, request.decision, request.message)
        logger.info("Verification for %s reviewed by %s", user_id, admin.user_id)
        return {"message": f"Verification {request.decision}.", "profile": profile_to_dict(profile)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in review_verification: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
