import asyncio
import io
import logging
from typing import List

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

from app.core.config import Settings
from app.core.errors import UploadError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
YOUTUBE_UPLOAD_SCOPE = "https://www.googleapis.com/auth/youtube.upload"


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


class VideoPlatform:
    """YouTube Data API v3 uploader using a long-lived OAuth refresh token."""

    def __init__(self, settings: Settings):
        self.category_id = settings.YOUTUBE_CATEGORY_ID
        self.configured = all([
            settings.GOOGLE_CLIENT_ID,
            settings.GOOGLE_CLIENT_SECRET,
            settings.GOOGLE_REFRESH_TOKEN,
        ])
        self._credentials = None
        if self.configured:
            self._credentials = Credentials(
                token=None,
                refresh_token=settings.GOOGLE_REFRESH_TOKEN,
                client_id=settings.GOOGLE_CLIENT_ID,
                client_secret=settings.GOOGLE_CLIENT_SECRET,
                token_uri=GOOGLE_TOKEN_URI,
                scopes=[YOUTUBE_UPLOAD_SCOPE],
            )
        self._youtube = None

    def _service(self):
        if self._youtube is None:
            self._youtube = build("youtube", "v3", credentials=self._credentials, cache_discovery=False)
        return self._youtube

    def _insert_sync(self, title, description, tags, privacy_status, content, mimetype) -> str:
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mimetype, resumable=True)
        request = self._service().videos().insert(
            part="snippet,status",
            body={
                "snippet": {
                    "title": title,
                    "description": description,
                    "tags": tags,
                    "categoryId": self.category_id,
                },
                "status": {"privacyStatus": privacy_status},
            },
            media_body=media,
        )
        response = request.execute()
        return response["id"]

    async def insert(
        self,
        title: str,
        description: str,
        tags: List[str],
        privacy_status: str,
        content: bytes,
        mimetype: str = "video/mp4",
    ) -> str:
        """Upload a video and return its YouTube video id."""
        if not self.configured:
            raise UploadError("YouTube not configured")
        try:
            video_id = await asyncio.to_thread(
                self._insert_sync, title, description, tags, privacy_status, content, mimetype
            )
        except Exception as e:
            logger.error("YouTube upload of %r failed: %s", title, e)
            raise UploadError("YouTube upload failed") from e

        logger.info("Uploaded %r to YouTube: %s", title, video_id)
        return video_id
