"""
File handling utilities:
- Filename sanitization and unique name generation.
- Extension, MIME type and size checks for uploaded images.
- Writing raw bytes to disk.
"""
from __future__ import annotations

import hashlib
import os
import secrets
from pathlib import Path
from typing import Iterable

from outpass.config.logging import get_logger

logger = get_logger(__name__)


class FileHandlerError(Exception):
    """Raised when a file cannot be validated or written."""
    pass


# Extension (without dot) to the MIME types accepted for it
IMAGE_MIME_TYPES = {
    "jpg": {"image/jpeg"},
    "jpeg": {"image/jpeg"},
    "png": {"image/png"},
    "gif": {"image/gif"},
}

DIR_PERMISSIONS = 0o755
FILE_PERMISSIONS = 0o644

_SAFE_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._- ")


def safe_filename(filename: str) -> str:
    """Strip directory components and unsafe characters from a filename."""
    if not filename or not isinstance(filename, str):
        raise FileHandlerError("Filename must be a non-empty string")

    # basename on both separators so "..\\x.png" cannot escape either
    name = os.path.basename(filename.replace("\\", "/"))
    name = "".join(ch for ch in name if ch in _SAFE_CHARS)
    name = name.lstrip(".-").replace(" ", "_")

    if not name:
        raise FileHandlerError("Filename contains no valid characters")

    if len(name) > 255:
        stem, ext = os.path.splitext(name)
        name = stem[: 255 - len(ext)] + ext
    return name


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot."""
    return os.path.splitext(filename)[1].lower().lstrip(".")


def generate_unique_filename(original_name: str, *, prefix: str | None = None) -> str:
    """Unique filename keeping the original extension."""
    stem, ext = os.path.splitext(safe_filename(original_name))
    token = secrets.token_hex(8)
    if prefix:
        return f"{prefix}_{stem}_{token}{ext.lower()}"
    return f"{stem}_{token}{ext.lower()}"


def validate_image_extension(filename: str, allowed: Iterable[str]) -> bool:
    return file_extension(filename) in {ext.lower().lstrip(".") for ext in allowed}


def validate_image_mime_type(filename: str, mime_type: str | None) -> bool:
    """The declared MIME type must match the file's extension."""
    if not mime_type:
        return False
    return mime_type.lower() in IMAGE_MIME_TYPES.get(file_extension(filename), set())


def validate_file_size(size: int, max_size: int) -> bool:
    return 0 < size <= max_size


def get_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def ensure_directory(path: str | Path) -> Path:
    path_obj = Path(path)
    try:
        path_obj.mkdir(parents=True, exist_ok=True, mode=DIR_PERMISSIONS)
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise FileHandlerError(f"Failed to create directory: {e}") from e
    return path_obj


def save_bytes_to_path(data: bytes, path: str | Path) -> dict[str, str]:
    """Write `data` to `path`, creating parent directories."""
    if not isinstance(data, bytes) or not data:
        raise FileHandlerError("Data must be non-empty bytes")

    path_obj = Path(path)
    ensure_directory(path_obj.parent)
    try:
        path_obj.write_bytes(data)
        path_obj.chmod(FILE_PERMISSIONS)
    except OSError as e:
        logger.error(f"Failed to save file {path_obj}: {e}")
        raise FileHandlerError(f"Failed to save file: {e}") from e

    file_hash = get_file_hash(data)
    logger.info(f"File saved: {path_obj} (hash: {file_hash[:8]}...)")
    return {"path": str(path_obj), "filename": path_obj.name, "hash": file_hash}


__all__ = [
    "FileHandlerError",
    "IMAGE_MIME_TYPES",
    "ensure_directory",
    "file_extension",
    "generate_unique_filename",
    "get_file_hash",
    "safe_filename",
    "save_bytes_to_path",
    "validate_file_size",
    "validate_image_extension",
    "validate_image_mime_type",
]
