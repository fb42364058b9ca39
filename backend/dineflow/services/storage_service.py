"""Image storage for menu items.

Files are written under ``settings.upload_dir`` (one directory per
business) and served by the app's static mount at ``/uploads``. The
returned URL is durable for as long as the file exists.
"""

import logging
from pathlib import Path

from dineflow.core.config import settings
from dineflow.core.exceptions import ValidationError
from dineflow.core.file_utils import (
    ALLOWED_IMAGE_EXTENSIONS,
    generate_secure_filename,
    is_safe_path,
    validate_file_extension,
)

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


class ImageStorage:
    def __init__(self, base_dir: str = None, public_base_url: str = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

    @property
    def max_bytes(self) -> int:
        return settings.max_upload_size_mb * 1024 * 1024

    def save_image(self, business_id: int, filename: str, content: bytes) -> str:
        """Store an uploaded image and return its public URL."""
        try:
            validate_file_extension(filename, ALLOWED_IMAGE_EXTENSIONS)
        except ValueError as e:
            raise ValidationError(str(e))
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"Image exceeds the {settings.max_upload_size_mb} MB upload limit"
            )

        folder = self.base_dir / f"business_{business_id}"
        folder.mkdir(parents=True, exist_ok=True)
        target = folder / generate_secure_filename(filename, prefix="menu")
        if not is_safe_path(str(self.base_dir), str(target)):
            raise ValidationError("Invalid file path")

        target.write_bytes(content)
        relative = target.relative_to(self.base_dir).as_posix()
        logger.info(f"Stored image {relative} ({len(content)} bytes)")
        return f"{self.public_base_url}{UPLOAD_URL_PREFIX}/{relative}"


def get_image_storage() -> ImageStorage:
    return ImageStorage()
