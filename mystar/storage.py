"""
Site asset uploads (logo, favicon) to Supabase Storage
"""

import logging
import time
from typing import Optional

from supabase import Client

from .errors import MyStarError, ValidationFailed

logger = logging.getLogger(__name__)

STORAGE_BUCKET = "site-assets"

MAX_LOGO_SIZE = 2 * 1024 * 1024
MAX_FAVICON_SIZE = 100 * 1024

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/svg+xml")
ALLOWED_FAVICON_TYPES = ("image/x-icon", "image/png", "image/svg+xml")

ASSET_RULES = {
    "logo": {
        "types": ALLOWED_IMAGE_TYPES,
        "max_size": MAX_LOGO_SIZE,
        "type_error": "Invalid file type. Please upload a JPG, PNG, or SVG file.",
        "size_error": "File too large. Maximum size is 2MB.",
    },
    "favicon": {
        "types": ALLOWED_FAVICON_TYPES,
        "max_size": MAX_FAVICON_SIZE,
        "type_error": "Invalid file type. Please upload an ICO, PNG, or SVG file.",
        "size_error": "File too large. Maximum size is 100KB.",
    },
}


def validate_asset(kind: str, content_type: Optional[str], size: int) -> None:
    rules = ASSET_RULES[kind]
    if content_type not in rules["types"]:
        raise ValidationFailed(rules["type_error"])
    if size > rules["max_size"]:
        raise ValidationFailed(rules["size_error"])


def ensure_bucket_exists(client: Client) -> None:
    """Create the public assets bucket on first use"""
    try:
        buckets = client.storage.list_buckets() or []
        if not any(getattr(bucket, "name", None) == STORAGE_BUCKET for bucket in buckets):
            client.storage.create_bucket(STORAGE_BUCKET, options={"public": True})
            logger.info(f"Created storage bucket {STORAGE_BUCKET}")
    except Exception as e:
        logger.error(f"Error checking/creating bucket: {e}")
        raise MyStarError("Unable to access storage. Please contact support.")


def asset_filename(kind: str, original_name: Optional[str]) -> str:
    extension = (original_name or "").rsplit(".", 1)[-1] if "." in (original_name or "") else "bin"
    return f"{kind}-{int(time.time() * 1000)}.{extension}"


def upload_site_asset(
    client: Client,
    kind: str,
    filename: Optional[str],
    content_type: Optional[str],
    content: bytes,
) -> str:
    """Validate and upload a logo or favicon, returning its public URL"""
    validate_asset(kind, content_type, len(content))
    ensure_bucket_exists(client)

    path = asset_filename(kind, filename)
    bucket = client.storage.from_(STORAGE_BUCKET)
    try:
        bucket.upload(path, content, {"content-type": content_type})
    except Exception as e:
        logger.error(f"Upload error for {path}: {e}")
        raise MyStarError(f"Failed to upload {kind}: {e}")

    return bucket.get_public_url(path)
