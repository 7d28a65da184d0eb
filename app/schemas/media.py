from dataclasses import dataclass
from typing import List, Optional
import hashlib


@dataclass
class UploadedFile:
    """ A fully-buffered multipart file handed from the router to the services """
    filename: str
    content_type: str
    content: bytes

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.content).hexdigest()


async def read_upload(upload) -> Optional[UploadedFile]:
    """ fastapi.UploadFile -> UploadedFile (None when no file was sent) """
    if upload is None or not getattr(upload, "filename", None):
        return None
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        content=await upload.read(),
    )


async def read_uploads(uploads) -> List[UploadedFile]:
    files = []
    for upload in uploads or []:
        file = await read_upload(upload)
        if file is not None:
            files.append(file)
    return files
