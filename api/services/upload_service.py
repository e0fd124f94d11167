"""Media upload storage on local disk.

Files are written under ``UPLOAD_DIR`` with collision-resistant names and
served back by the gateway's static mount at ``/uploads``.
"""

import mimetypes
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from api.exceptions import UpstreamError, ValidationError
from postboard.config import MAX_UPLOAD_BYTES, PUBLIC_BASE_URL, UPLOAD_DIR
from postboard.logging import get_logger

logger = get_logger(__name__)

UPLOAD_URL_PATH = "/uploads"


@dataclass
class StoredFile:
    """A media file that has been written to storage."""

    file_name: str
    url: str
    size: int
    mime_type: str


class UploadService:
    """Validates and stores a single uploaded media file."""

    ALLOWED_MIME_TYPES = {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "video/mp4",
        "video/quicktime",
        "video/x-msvideo",
        "video/webm",
    }
    CHUNK_SIZE = 1024 * 1024

    def __init__(
        self,
        upload_dir: Path = UPLOAD_DIR,
        base_url: str = PUBLIC_BASE_URL,
        max_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    @staticmethod
    def generate_file_name(original_name: Optional[str], mime_type: str) -> str:
        """``<epoch-ms>-<random hex><ext>``.

        The original extension is kept only when it matches the MIME type;
        static serving picks Content-Type from the extension, so a PNG named
        ``x.html`` must not come back as HTML.
        """
        ext = os.path.splitext(original_name or "")[1].lower()
        if ext not in mimetypes.guess_all_extensions(mime_type):
            ext = mimetypes.guess_extension(mime_type) or ""
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"

    def validate(self, mime_type: Optional[str], size: Optional[int] = None) -> None:
        """Check type against the allow-list and a known size against the ceiling.

        Raises:
            ValidationError: Disallowed type or file too large
        """
        if mime_type not in self.ALLOWED_MIME_TYPES:
            raise ValidationError(
                f"File type not allowed: {mime_type or 'unknown'}",
                details={"allowed": sorted(self.ALLOWED_MIME_TYPES)},
            )
        if size is not None and size > self.max_bytes:
            raise self._too_large(size)

    def store(
        self,
        stream: BinaryIO,
        original_name: Optional[str],
        mime_type: Optional[str],
        size: Optional[int] = None,
    ) -> StoredFile:
        """Stream an upload to disk and return where it can be fetched.

        The size ceiling is enforced while copying, so a client that
        under-reports its size is still cut off. Partial files are removed.

        Raises:
            ValidationError: No file, disallowed type, empty or oversize file
            UpstreamError: The file could not be written
        """
        if stream is None:
            raise ValidationError("No file uploaded", details={"field": "media"})
        self.validate(mime_type, size)

        file_name = self.generate_file_name(original_name, mime_type)
        path = self.upload_dir / file_name
        written = 0
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as out:
                while True:
                    chunk = stream.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise self._too_large(written)
                    out.write(chunk)
        except ValidationError:
            path.unlink(missing_ok=True)
            raise
        except OSError as e:
            path.unlink(missing_ok=True)
            raise UpstreamError(f"Failed to store upload: {e}")

        if written == 0:
            path.unlink(missing_ok=True)
            raise ValidationError("Uploaded file is empty", details={"field": "media"})

        logger.info("media_uploaded", file_name=file_name, size=written, mime_type=mime_type)
        return StoredFile(
            file_name=file_name,
            url=f"{self.base_url}{UPLOAD_URL_PATH}/{file_name}",
            size=written,
            mime_type=mime_type,
        )

    def _too_large(self, size: int) -> ValidationError:
        return ValidationError(
            f"File too large: {size / 1024 / 1024:.1f}MB. "
            f"Maximum: {self.max_bytes / 1024 / 1024:.0f}MB",
            details={"maxBytes": self.max_bytes},
        )
