from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from typing import Dict, Optional
from datetime import datetime
import logging

from app.clients.auth_client import AuthServiceClient
from app.clients.media_storage import MediaStorage
from app.core.errors import ConflictError, InvalidStateError, NotFoundError
from app.crud import agent_profile as crud_profile
from app.models import AgentProfile
from app.schemas.agent_profile import ProfileFields
from app.schemas.media import UploadedFile

logger = logging.getLogger(__name__)

# profile column -> Cloudinary folder
DOCUMENT_FOLDERS = {
    "national_id": "agents/nationalIds",
    "agency_logo": "agents/logos",
}

FIELD_COLUMNS = {
    "agency_name": "agency_name",
    "agency_email": "agency_email",
    "agency_phone": "agency_phone",
    "phone": "phone",
    "state": "state",
    "language": "languages",
    "about": "about",
    "other_info": "other_info",
}


def fields_to_columns(fields: ProfileFields, provided_only: bool = False) -> dict:
    """ Map form fields onto profile columns, optionally dropping empty values """
    values = {}
    for field, column in FIELD_COLUMNS.items():
        value = getattr(fields, field)
        if provided_only and not value:
            continue
        values[column] = value
    if "languages" in values and values["languages"] is None:
        values["languages"] = []
    if "agency_email" in values and values["agency_email"]:
        values["agency_email"] = values["agency_email"].strip().lower()
    return values


class VerificationWorkflow:
    """
        Agent identity verification over the profile's review status.

        States:
            (none) -> pending -> approved | rejected
            rejected -> pending   (submit again or resubmit)
            approved is terminal here.

        Documents are uploaded before anything is written, so an object-storage
        failure aborts the operation with `UploadError` and leaves the stored
        profile untouched.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        identity_client: Optional[AuthServiceClient] = None,
    ):
        self.db = db
        self.storage = storage
        self.identity_client = identity_client

    async def _upload_documents(self, documents: Dict[str, Optional[UploadedFile]]) -> Dict[str, str]:
        urls = {}
        for column, folder in DOCUMENT_FOLDERS.items():
            doc = documents.get(column)
            if doc is None:
                continue
            urls[column] = await self.storage.upload(
                doc.content, folder, content_type=doc.content_type, filename=doc.filename
            )
        return urls

    async def submit(
        self,
        user_id: str,
        fields: ProfileFields,
        documents: Dict[str, Optional[UploadedFile]],
    ) -> AgentProfile:
        existing = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if existing and existing.status != "rejected":
            raise ConflictError("Verification already submitted. Wait for admin review.")

        urls = await self._upload_documents(documents)

        values = fields_to_columns(fields)
        values.update(
            national_id=urls.get("national_id") or (existing.national_id if existing else ""),
            agency_logo=urls.get("agency_logo") or (existing.agency_logo if existing else ""),
            status="pending",
            submitted_at=datetime.utcnow(),
            review_message="",
        )

        try:
            if existing:
                profile = crud_profile.apply_updates(existing, values)
            else:
                profile = await crud_profile.create_profile(self.db, user_id, values)
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent first submission for the same user
            await self.db.rollback()
            raise ConflictError("Verification already submitted. Wait for admin review.")

        await self.db.refresh(profile)
        logger.info("Verification submitted for %s", user_id)
        return profile

    async def resubmit(
        self,
        user_id: str,
        fields: ProfileFields,
        documents: Dict[str, Optional[UploadedFile]],
    ) -> AgentProfile:
        existing = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not existing:
            raise NotFoundError("No verification found to resubmit.")
        if existing.status != "rejected":
            raise InvalidStateError("You can only resubmit if rejected.")

        urls = await self._upload_documents(documents)

        # Only explicitly provided values replace what is stored
        values = fields_to_columns(fields, provided_only=True)
        values.update(urls)
        values.update(status="pending", review_message="", submitted_at=datetime.utcnow())

        crud_profile.apply_updates(existing, values)
        await self.db.commit()
        await self.db.refresh(existing)
        logger.info("Verification resubmitted for %s", user_id)
        return existing

    async def get_own(self, user_id: str) -> AgentProfile:
        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Verification not found.")
        return profile

    async def get_receipt(self, user_id: str) -> dict:
        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("No verification found.")
        return {
            "agent": profile.agency_name or "N/A",
            "status": profile.status,
            "submitted_at": profile.submitted_at,
            "reviewed_at": profile.reviewed_at,
            "message": profile.review_message or "",
            "logo": profile.agency_logo or "",
        }

    async def review(self, user_id: str, decision: str, message: str = "") -> AgentProfile:
        """ Admin decision on a pending submission, pushed to the Auth service afterwards """
        if decision not in ("approved", "rejected"):
            raise InvalidStateError(f"Unknown review decision: {decision}")

        profile = await crud_profile.get_profile_by_user_id(self.db, user_id)
        if not profile:
            raise NotFoundError("Verification not found.")
        if profile.status != "pending":
            raise InvalidStateError(f"Only pending verifications can be reviewed (current: {profile.status}).")

        crud_profile.apply_updates(profile, {
            "status": decision,
            "review_message": message or "",
            "reviewed_at": datetime.utcnow(),
        })
        await self.db.commit()
        await self.db.refresh(profile)
        logger.info("Verification for %s %s", user_id, decision)

        if self.identity_client is not None:
            await self.identity_client.update_agent_status(user_id, decision)
        return profile
