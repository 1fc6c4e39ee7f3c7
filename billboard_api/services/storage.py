"""
Local disk storage for uploaded billboard images.
"""

import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from billboard_api.core.config import settings
from billboard_api.core.exceptions import InvalidInput
from billboard_api.core.logging import get_logger

logger = get_logger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class ImageStorage:
    """Saves images under the upload directory and maps them to public URLs.

    Swapping an image is not atomic with the row update: a crash between
    the two leaves either an orphaned file or a dangling image URL.
    """

    def __init__(self, upload_dir: str = None, url_prefix: str = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    async def save(self, image: UploadFile) -> str:
        """Store an uploaded image and return its public URL."""
        suffix = _EXTENSIONS.get(image.content_type)
        if suffix is None or image.content_type not in settings.allowed_image_types:
            raise InvalidInput("Only image files are allowed")

        if image.size is not None and image.size > settings.max_upload_size:
            raise InvalidInput("Image file is too large")

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = f"billboard-{uuid.uuid4().hex}{suffix}"
        dest = self.upload_dir / filename

        def _write() -> None:
            with dest.open("wb") as f:
                shutil.copyfileobj(image.file, f)

        await run_in_threadpool(_write)
        logger.info("image_stored", filename=filename)
        return f"{self.url_prefix}/{filename}"

    async def delete(self, image_url: Optional[str]) -> None:
        """Remove a previously stored image; unknown URLs are ignored."""
        if not image_url or not image_url.startswith(self.url_prefix + "/"):
            return
        path = self.upload_dir / Path(image_url).name
        try:
            await run_in_threadpool(path.unlink, True)
            logger.info("image_deleted", filename=path.name)
        except OSError as e:
            logger.warning("image_delete_failed", filename=path.name, error=str(e))
