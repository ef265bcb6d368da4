"""
    On-the-fly image transforms.

    Query params (width, height, quality) select a resize and re-encode of
    image assets. Output is always WebP; responses are expected to be cached
    upstream per URL, so each distinct transform only runs once.
"""
import logging
import re
from io import BytesIO
from typing import Mapping, Optional, Tuple

from PIL import Image, ImageOps

from app.asset_proxy.models import DEFAULT_QUALITY, TransformRequest

log = logging.getLogger(__name__)

OUTPUT_FORMAT = "WEBP"
OUTPUT_MIME_TYPE = "image/webp"
MAX_QUALITY = 100

_leading_int_re = re.compile(r"\s*([+-]?\d+)")


class TranscodingError(Exception):
    """Raised when image bytes cannot be decoded or re-encoded."""


def _query_value(query: Mapping[str, str], name: str) -> Optional[str]:
    # First occurrence wins for repeated params
    if hasattr(query, "getlist"):
        values = query.getlist(name)
        return values[0] if values else None
    return query.get(name)


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    """Leading integer of value ('12px' -> 12), None unless strictly positive."""
    if value is None:
        return None
    match = _leading_int_re.match(value)
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def parse_transform_params(query: Mapping[str, str]) -> Optional[TransformRequest]:
    """Returns None when no transform was requested."""
    width = _parse_positive_int(_query_value(query, "width"))
    height = _parse_positive_int(_query_value(query, "height"))
    quality = _parse_positive_int(_query_value(query, "quality"))

    if width is None and height is None and quality is None:
        return None

    return TransformRequest(
        width=width,
        height=height,
        quality=min(quality, MAX_QUALITY) if quality is not None else DEFAULT_QUALITY,
    )


def _target_size(source: Tuple[int, int], transform: TransformRequest) -> Tuple[int, int]:
    src_w, src_h = source
    if transform.width and transform.height:
        return min(transform.width, src_w), min(transform.height, src_h)
    if transform.width:
        w = min(transform.width, src_w)
        return w, max(1, round(src_h * w / src_w))
    h = min(transform.height, src_h)
    return max(1, round(src_w * h / src_h)), h


def _to_webp_mode(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    if "A" in img.getbands() or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def transcode_image(data: bytes, transform: TransformRequest) -> bytes:
    """
        Resize (cover fit, never enlarging) and re-encode image bytes as WebP.

        With both dimensions the image is scaled to fill the box and the
        overflow is cropped around the center. With a single dimension the
        other follows the source aspect ratio. Without dimensions only the
        quality changes.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
        img = _to_webp_mode(img)

        if transform.has_dimensions:
            size = _target_size(img.size, transform)
            if transform.width and transform.height:
                img = ImageOps.fit(img, size, method=Image.Resampling.LANCZOS)
            elif size != img.size:
                img = img.resize(size, Image.Resampling.LANCZOS)

        buf = BytesIO()
        img.save(buf, format=OUTPUT_FORMAT, quality=transform.quality)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise TranscodingError(f"Failed to transcode image: {e}") from e

    log.debug("Transcoded image to %sx%s at quality %s", img.width, img.height, transform.quality)
    return buf.getvalue()
