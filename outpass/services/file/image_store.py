"""
Profile image storage.

Accepts jpeg/png/gif images up to the configured size and writes them under
the upload directory with a unique sanitized name. The stored reference is
the bare filename, as kept on the student record.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from outpass.config.logging import get_logger
from outpass.config.settings import Settings, get_settings
from outpass.core.exceptions import ValidationError
from outpass.utils.file_handler import (
    FileHandlerError,
    generate_unique_filename,
    save_bytes_to_path,
    validate_file_size,
    validate_image_extension,
    validate_image_mime_type,
)

logger = get_logger(__name__)

ALLOWED_TYPES_MESSAGE = "Only image files (jpeg, jpg, png, gif) are allowed"


@dataclass(frozen=True)
class ImageUpload:
    """Raw uploaded image as received from the caller."""
    data: bytes
    filename: str
    content_type: Optional[str] = None


class ImageStore:
    """Validates and persists uploaded images."""

    def __init__(
        self,
        upload_dir: Optional[Path] = None,
        max_size: Optional[int] = None,
        allowed_extensions: Optional[Set[str]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.upload_dir = Path(upload_dir) if upload_dir is not None else settings.get_upload_path()
        self.max_size = max_size if max_size is not None else settings.MAX_IMAGE_SIZE
        self.allowed_extensions = set(allowed_extensions or settings.ALLOWED_IMAGE_EXTENSIONS)

    def validate(self, data: bytes, filename: str, content_type: Optional[str]) -> None:
        """
        Raises:
            ValidationError: Wrong type, mismatched MIME type, empty or too large
        """
        if not filename or not validate_image_extension(filename, self.allowed_extensions):
            raise ValidationError(ALLOWED_TYPES_MESSAGE, field="image")
        if not validate_image_mime_type(filename, content_type):
            raise ValidationError(ALLOWED_TYPES_MESSAGE, field="image")
        if not validate_file_size(len(data or b""), self.max_size):
            raise ValidationError(
                f"Image must be between 1 and {self.max_size} bytes",
                field="image",
                details={"size": len(data or b""), "max_size": self.max_size},
            )

    def store_image(self, data: bytes, filename: str, content_type: Optional[str]) -> str:
        """Validate and write an image, returning its stored filename."""
        self.validate(data, filename, content_type)
        try:
            stored_name = generate_unique_filename(filename, prefix="image")
            info = save_bytes_to_path(data, self.upload_dir / stored_name)
        except FileHandlerError as e:
            raise ValidationError(str(e), field="image") from e
        logger.debug(f"Stored image {info['filename']}")
        return info["filename"]

    def store_upload(self, upload: ImageUpload) -> str:
        return self.store_image(upload.data, upload.filename, upload.content_type)

    def discard(self, reference: str) -> None:
        """Remove a stored image, ignoring one that is already gone."""
        self.path_for(reference).unlink(missing_ok=True)

    def path_for(self, reference: str) -> Path:
        return self.upload_dir / reference


__all__ = ["ImageStore", "ImageUpload", "ALLOWED_TYPES_MESSAGE"]
