import base64
import binascii
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps

import config

MAX_PIXELS = config.MAX_PIXELS
# process-wide Pillow guard
Image.MAX_IMAGE_PIXELS = MAX_PIXELS

INLINE_IMAGE_MIME = {
    "image/png": "PNG",
    "image/jpg": "JPEG",
    "image/jpeg": "JPEG",
}


def safe_open(raw: bytes, expected_format: Optional[str] = None) -> Image.Image:
    """Open an inlined image; guard size, normalize EXIF orientation, use first frame."""
    formats = (expected_format,) if expected_format else None
    img = Image.open(BytesIO(raw), formats=formats)
    if getattr(img, "is_animated", False):
        img.seek(0)
    img.load()
    return ImageOps.exif_transpose(img)


def split_data_uri(uri: str) -> Optional[Tuple[str, bytes]]:
    """
    'data:image/png;base64,....' -> ('image/png', b'...').
    Returns None for anything that isn't a base64 data URI. Padding is optional.
    """
    if not uri.startswith("data:") or "," not in uri:
        return None
    header, payload = uri[5:].split(",", 1)
    parts = [p.strip().lower() for p in header.split(";")]
    if "base64" not in parts[1:]:
        return None
    payload = "".join(payload.split())
    payload += "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    return parts[0], data


def to_data_uri(raw: bytes, mime: str = config.AVATAR_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def encode_png(img: Image.Image, *, compress_level: int = config.PNG_COMPRESS_LEVEL) -> bytes:
    out = BytesIO()
    img.save(out, format="PNG", compress_level=compress_level)
    return out.getvalue()
