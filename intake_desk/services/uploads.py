"""Upload shim: turn a file into a durable, dereferenceable string reference.

Locally the reference is a self-contained ``data:`` URI carrying the whole
file; with a backend it is whatever ``file_url`` the backend returns. Callers
treat both the same way.
"""

import base64
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Union

from pydantic import BaseModel

from ..core.config import Settings
from ..core.exceptions import RemoteRequestError, UploadError
from ..core.http import ApiClient

logger = logging.getLogger(__name__)

FileInput = Union[bytes, bytearray, str, Path, BinaryIO]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class UploadResult(BaseModel):
    """Reference to an uploaded file."""

    file_url: str


def read_file(file: FileInput | None, filename: str | None = None) -> tuple[bytes, str | None]:
    """Return the file's bytes and the best known file name."""
    if file is None:
        raise UploadError("No file provided")
    if isinstance(file, (bytes, bytearray)):
        return bytes(file), filename
    if isinstance(file, (str, Path)):
        path = Path(file)
        if not path.is_file():
            raise UploadError(f"File not found: {path}")
        return path.read_bytes(), filename or path.name
    content = file.read()
    if isinstance(content, str):
        raise UploadError("File must be opened in binary mode")
    return content, filename or Path(getattr(file, "name", "") or "").name or None


def guess_content_type(filename: str | None, content_type: str | None = None) -> str:
    if content_type:
        return content_type
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_CONTENT_TYPE


def to_data_uri(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class Uploader(ABC):
    @abstractmethod
    async def upload_file(
        self,
        file: FileInput | None,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        pass


class LocalUploader(Uploader):
    """Embeds the file as a data URI."""

    async def upload_file(
        self,
        file: FileInput | None,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        content, filename = read_file(file, filename)
        file_url = to_data_uri(content, guess_content_type(filename, content_type))
        logger.info(f"Embedded {filename or 'upload'} ({len(content)} bytes) as data URI")
        return UploadResult(file_url=file_url)


class RemoteUploader(Uploader):
    """Multipart POST to ``/api/upload``; expects ``{"file_url": ...}`` back."""

    def __init__(self, client: ApiClient, settings: Settings):
        self._client = client
        self._path = f"{settings.api_prefix.rstrip('/')}/upload"

    async def upload_file(
        self,
        file: FileInput | None,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        content, filename = read_file(file, filename)
        files = {
            "file": (
                filename or "upload",
                content,
                guess_content_type(filename, content_type),
            )
        }
        try:
            response = await self._client.request("POST", self._path, files=files)
        except RemoteRequestError as e:
            raise UploadError("Upload failed") from e
        return UploadResult.model_validate(response.json())
