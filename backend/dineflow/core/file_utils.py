"""File upload security utilities."""

import os
import re
import uuid
from pathlib import Path
from typing import Optional, Set

ALLOWED_IMAGE_EXTENSIONS: Set[str] = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

SAFE_FILENAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]")


def generate_secure_filename(original_filename: str, prefix: str = "") -> str:
    """
    Generate a UUID-based filename that keeps the original extension.

    Args:
        original_filename: Original filename from upload
        prefix: Optional prefix for organizing files

    Returns:
        UUID-based filename with original extension
    """
    ext = ""
    if original_filename:
        _, ext = os.path.splitext(original_filename)
        ext = ext.lower()
        if ext and not re.match(r"^\.[a-zA-Z0-9]+$", ext):
            ext = ""

    unique_id = uuid.uuid4().hex

    if prefix:
        prefix = SAFE_FILENAME_PATTERN.sub("_", prefix).strip("_.")
        return f"{prefix}_{unique_id}{ext}"

    return f"{unique_id}{ext}"


def validate_file_extension(
    filename: str,
    allowed_extensions: Set[str],
    error_message: Optional[str] = None
) -> bool:
    """
    Validate that a filename has an allowed extension.

    Raises:
        ValueError if extension is not allowed
    """
    if not filename:
        raise ValueError(error_message or "Filename is required")

    _, ext = os.path.splitext(filename.lower())

    if ext not in allowed_extensions:
        if error_message:
            raise ValueError(error_message)
        raise ValueError(
            f"File type '{ext}' is not allowed. "
            f"Allowed types: {', '.join(sorted(allowed_extensions))}"
        )

    return True


def is_safe_path(base_path: str, target_path: str) -> bool:
    """Check that target_path resolves inside base_path."""
    base = Path(base_path).resolve()
    target = Path(target_path).resolve()

    try:
        target.relative_to(base)
        return True
    except ValueError:
        return False
