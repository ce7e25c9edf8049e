"""Image storage for book covers and admin uploads."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from bookstore.core.config import get_settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

UPLOADS_URL_PREFIX = "/uploads"
BOOK_COVERS_DIR = "book-covers"
IMAGES_DIR = "books"


class UploadValidationError(Exception):
    """Raised when an uploaded file is empty, too large or not an allowed image."""


@dataclass
class StoredFile:
    """A file written to upload storage."""

    file_name: str
    url: str
    original_name: str
    content_type: str | None
    size: int


class FileStorageService:
    """Stores uploaded images under the public uploads directory."""

    def __init__(self, root: Path | str | None = None, max_bytes: int | None = None) -> None:
        settings = get_settings()
        self.root = Path(root if root is not None else settings.upload_dir)
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes

    def validate(self, filename: str, content_type: str | None, data: bytes) -> str:
        """Check an upload and return its normalized extension.

        Raises:
            UploadValidationError: If the file is empty, too large, or not an
                allowed image type.
        """
        if not data:
            raise UploadValidationError("No file uploaded.")

        extension = Path(filename).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise UploadValidationError("Invalid file type. Only image files are allowed.")

        if content_type and content_type.lower() not in ALLOWED_CONTENT_TYPES:
            raise UploadValidationError(
                "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed."
            )

        if len(data) > self.max_bytes:
            max_mb = self.max_bytes // (1024 * 1024)
            raise UploadValidationError(f"File size too large. Maximum size is {max_mb}MB.")

        return extension

    def _write(self, subdir: str, file_name: str, data: bytes) -> Path:
        directory = self.root / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / file_name
        path.write_bytes(data)
        return path

    def save_image(self, filename: str, content_type: str | None, data: bytes) -> StoredFile:
        """Store a generic image upload under a random name."""
        extension = self.validate(filename, content_type, data)
        file_name = f"{uuid.uuid4()}{extension}"
        self._write(IMAGES_DIR, file_name, data)

        logger.info(f"File uploaded successfully: {file_name}")
        return StoredFile(
            file_name=file_name,
            url=f"{UPLOADS_URL_PREFIX}/{IMAGES_DIR}/{file_name}",
            original_name=filename,
            content_type=content_type,
            size=len(data),
        )

    def save_book_cover(
        self,
        book_id: int,
        filename: str,
        content_type: str | None,
        data: bytes,
    ) -> StoredFile:
        """Store a book cover as ``book_<id>_<timestamp><ext>``."""
        extension = self.validate(filename, content_type, data)
        timestamp = datetime.now(tz=timezone.utc).strftime("%Y%m%d%H%M%S%f")
        file_name = f"book_{book_id}_{timestamp}{extension}"
        self._write(BOOK_COVERS_DIR, file_name, data)

        return StoredFile(
            file_name=file_name,
            url=f"{UPLOADS_URL_PREFIX}/{BOOK_COVERS_DIR}/{file_name}",
            original_name=filename,
            content_type=content_type,
            size=len(data),
        )

    def _resolve_url(self, url: str) -> Path | None:
        prefix = f"{UPLOADS_URL_PREFIX}/"
        if not url.startswith(prefix):
            return None
        path = (self.root / url[len(prefix) :]).resolve()
        if not path.is_relative_to(self.root.resolve()):
            return None
        return path

    def delete_by_url(self, url: str | None) -> bool:
        """Best-effort removal of a stored file referenced by its public url.

        Failures are logged and reported as False, never raised.
        """
        if not url:
            return False
        path = self._resolve_url(url)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to delete stored file {url}: {e}")
            return False
        return True

    def delete_image(self, file_name: str) -> bool:
        """Delete a generic image upload by file name.

        Returns:
            True if the file existed and was removed, False if it was missing.

        Raises:
            UploadValidationError: If the name is not a plain file name.
        """
        if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
            raise UploadValidationError("Invalid file name.")

        path = self.root / IMAGES_DIR / file_name
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"File deleted successfully: {file_name}")
        return True


def get_file_storage_service() -> FileStorageService:
    """Dependency that provides the file storage service."""
    return FileStorageService()
