"""
On-demand image resizing with Pillow.
"""
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Extensions whose media subtype differs from the extension itself
MEDIA_SUBTYPES = {"jpg": "jpeg", "svg": "svg+xml", "tif": "tiff"}


class ImageError(Exception):
    """Source image could not be decoded or re-encoded."""


def media_type(name: str) -> str:
    ext = Path(name).suffix.lstrip(".").lower()
    return f"image/{MEDIA_SUBTYPES.get(ext, ext)}"


def resize(path: Path, width: int) -> bytes:
    """Scale the image at `path` to `width` pixels wide, keeping aspect ratio."""
    try:
        with Image.open(path) as img:
            fmt = img.format
            height = max(1, round(img.height * width / img.width))
            resized = img.resize((width, height), Image.Resampling.LANCZOS)
            buf = io.BytesIO()
            resized.save(buf, format=fmt)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageError(f"Failed to resize {path.name}: {e}") from e

    logger.debug(f"Resized {path.name} to {width}x{height}")
    return buf.getvalue()
