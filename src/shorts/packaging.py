"""ZIP packaging of a finished production."""

import base64
import io
import logging
import zipfile
from typing import Optional, Sequence

from .errors import PackagingError
from .models import Script

logger = logging.getLogger(__name__)


def package_filename(script: Script) -> str:
    """Download name for a script's archive."""
    return f"{script.slug}_bundle.zip"


def build_package(
    script: Script,
    audio: bytes,
    images: Sequence[Optional[str]],
    videos: Sequence[Optional[bytes]],
) -> bytes:
    """Bundle script, narration and scene assets into one ZIP archive.

    Everything lives under a folder named after the title::

        <title>/script.json
        <title>/narration.wav
        <title>/scene_<n>.png
        <title>/scene_<n>.mp4

    Scene numbers are 1-based and shared between images and videos. Empty
    slots are skipped.

    Raises:
        PackagingError: If an asset cannot be decoded or the archive cannot be written.
    """
    folder = script.slug
    buffer = io.BytesIO()

    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(f"{folder}/script.json", script.to_json())
            archive.writestr(f"{folder}/narration.wav", audio)

            for i, image in enumerate(images):
                if image:
                    archive.writestr(f"{folder}/scene_{i + 1}.png", base64.b64decode(image, validate=True))

            for i, video in enumerate(videos):
                if video:
                    archive.writestr(f"{folder}/scene_{i + 1}.mp4", video)
    except (ValueError, zipfile.BadZipFile, OSError) as e:
        logger.error(f"Packaging failed: {e}")
        raise PackagingError(f"Zipping failed: {e}") from e

    data = buffer.getvalue()
    logger.info(f"Packaged {folder} ({len(data)} bytes)")
    return data
