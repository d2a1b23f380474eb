"""
Screenshot encoding (PNG → WebP) with Pillow.
"""

import io

from PIL import Image

from site_spider.config import WEBP_MAX_DIMENSION, WEBP_QUALITY
from site_spider.errors import RenderError


def encode_webp(png_bytes: bytes, quality: int = WEBP_QUALITY) -> bytes:
    """Convert a captured PNG to WebP.

    Very long pages are scaled down to fit WebP's size limit.
    """
    try:
        with Image.open(io.BytesIO(png_bytes)) as image:
            image.load()
            if max(image.size) > WEBP_MAX_DIMENSION:
                image.thumbnail((WEBP_MAX_DIMENSION, WEBP_MAX_DIMENSION))
            buffer = io.BytesIO()
            image.save(buffer, format="WEBP", quality=quality)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise RenderError(f"cannot encode screenshot: {exc}") from exc
    return buffer.getvalue()
