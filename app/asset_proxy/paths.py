"""
    Canonical proxy paths for assets.

    URL format: /{prefix}/{base62-token}/{seo-friendly-name}.{ext}

    The token is what the proxy looks assets up by; the name segment is
    cosmetic and derived from the asset's current slug or filename.
"""
import re
import unicodedata
from typing import Optional

from app.asset_proxy.codec import CodecError, uuid_to_base62
from app.asset_proxy.models import AssetRecord

DEFAULT_EXTENSION = "bin"

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/svg+xml": "svg",
    "video/mp4": "mp4",
    "video/mpeg": "mpeg",
    "video/webm": "webm",
    "video/ogg": "ogv",
    "video/quicktime": "mov",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "audio/webm": "weba",
    "audio/aac": "aac",
    "application/pdf": "pdf",
}

# Asset categories
IMAGES = "images"
VIDEOS = "videos"
AUDIO = "audio"
DOCUMENTS = "documents"

# Vector images are passed through untouched, Pillow cannot rasterize them
NON_RASTER_IMAGE_TYPES = {"image/svg+xml"}

DOCUMENT_TYPES = {"application/pdf"}

_non_slug_re = re.compile(r"[^a-z0-9]+")


def mime_to_extension(mime_type: Optional[str]) -> str:
    """Get file extension from MIME type for proxy URLs."""
    if not mime_type:
        return DEFAULT_EXTENSION
    ext = MIME_EXTENSIONS.get(mime_type)
    if ext:
        return ext
    return mime_type.split("/")[-1] or DEFAULT_EXTENSION


def is_asset_of_type(mime_type: Optional[str], category: str) -> bool:
    if not mime_type:
        return False
    mime_type = mime_type.lower()
    if category == IMAGES:
        return mime_type.startswith("image/") and mime_type not in NON_RASTER_IMAGE_TYPES
    if category == VIDEOS:
        return mime_type.startswith("video/")
    if category == AUDIO:
        return mime_type.startswith("audio/")
    if category == DOCUMENTS:
        return mime_type in DOCUMENT_TYPES
    raise ValueError(f"Unknown asset category: {category}")


def slugify_name(name: str, strip_extension: bool = True) -> str:
    """'My Photo (1).JPG' -> 'my-photo-1'"""
    if strip_extension:
        stem, dot, _ = name.rpartition(".")
        if dot and stem:
            name = stem
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _non_slug_re.sub("-", ascii_name.lower()).strip("-")


def get_asset_proxy_name(record: AssetRecord) -> Optional[str]:
    """Cosmetic name segment for an asset, None when nothing usable is on record."""
    for candidate, is_filename in ((record.slug, False), (record.filename, True)):
        if candidate:
            slug = slugify_name(candidate, strip_extension=is_filename)
            if slug:
                return f"{slug}.{mime_to_extension(record.mime_type)}"
    return None


def get_asset_proxy_url(record: AssetRecord, prefix: str) -> Optional[str]:
    name = get_asset_proxy_name(record)
    if name is None:
        return None
    try:
        token = uuid_to_base62(record.asset_id)
    except CodecError:
        return None
    return f"/{prefix.strip('/')}/{token}/{name}"


def is_canonical_name(requested_name: str, canonical_name: str) -> bool:
    return requested_name == canonical_name
