# src/utils/validators.py

import re
from typing import Any, Optional, Tuple

# ---------------------------------------------------------------------
# Configuration (tweakable)
# ---------------------------------------------------------------------

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp"
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Largest index or page accepted; keeps SQL OFFSET within a 32-bit range
MAX_POSITION = 2**31 - 1
MAX_PAGE = MAX_POSITION // 50  # 50 poems per page


# ---------------------------------------------------------------------
# Custom Errors (optional but clean)
# ---------------------------------------------------------------------

class ImageValidationError(ValueError):
    """Raised when image validation fails."""


# ---------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------

def parse_leading_int(value: Optional[str]) -> Optional[int]:
    """Integer prefix of ``value`` ("3", "3abc", " 7") or None."""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_index(value: Optional[str]) -> int:
    """
    Navigation index; missing, negative or non-numeric input becomes 0.

    Values above MAX_POSITION are clamped and resolve past the end.
    """
    index = parse_leading_int(value)
    if index is None or index < 0:
        return 0
    return min(index, MAX_POSITION)


def parse_page(value: Optional[str]) -> int:
    """1-based page number; anything below 1 or unparseable becomes 1, capped at MAX_PAGE."""
    page = parse_leading_int(value)
    if page is None or page < 1:
        return 1
    return min(page, MAX_PAGE)


def parse_flag(value: Optional[str]) -> bool:
    """Boolean query flag: only the string "true" enables it."""
    return value == "true"


def coerce_status(value: Any) -> bool:
    """
    Favourite status from a request body.

    True or "true" is True; anything else, null included, is False. Callers
    decide separately whether the field was sent at all.
    """
    return value is True or value == "true"


# ---------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------

def validate_image(contents: bytes, content_type: Optional[str], max_bytes: int) -> Tuple[bytes, str]:
    """
    Validate an uploaded image before handing it to the content provider.

    Args:
        contents: Raw image bytes
        content_type: MIME type as sent by the client (defaults to image/jpeg)
        max_bytes: Upper size limit

    Returns:
        (contents, mime_type)

    Raises:
        ImageValidationError
    """
    mime_type = (content_type or "image/jpeg").split(";")[0].strip().lower()

    if not contents:
        raise ImageValidationError("No image file provided")

    if mime_type not in ALLOWED_MIME_TYPES:
        raise ImageValidationError(f"Unsupported image type: {mime_type}")

    if len(contents) > max_bytes:
        raise ImageValidationError(
            f"Image too large (max {max_bytes // (1024 * 1024)}MB)"
        )

    return contents, mime_type
