# rankcard/vector.py
"""
SVG documents to RGBA pixels, through CairoSVG.

Image references are settled before cairo sees the document. Inline PNG and
JPEG data URIs are decoded and re-inlined as PNG, toy sprite filenames are
inlined from the asset registry, and any other reference is removed together
with its <image> element. Cairo is never asked to fetch anything.
"""
import math
import os
from io import BytesIO
from typing import Optional
from xml.etree import ElementTree

import config

# fontconfig reads this once, when cairo lays out its first text
os.environ["FONTCONFIG_FILE"] = str(config.FONTCONFIG_FILE)

# pylint: disable=wrong-import-position
import cairocffi
import cairosvg
from PIL import Image, UnidentifiedImageError

from helpers.logging_helper import get_logger
from rankcard.assets import AssetRegistry, Toy
from rankcard.errors import BufferAllocationError, VectorError
from utility.image_utils import (
    INLINE_IMAGE_MIME,
    encode_png,
    safe_open,
    split_data_uri,
    to_data_uri,
)

# pylint: enable=wrong-import-position

log = get_logger("rankcard.vector")

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XLINK_HREF = f"{{{XLINK_NS}}}href"

ElementTree.register_namespace("", SVG_NS)
ElementTree.register_namespace("xlink", XLINK_NS)

_SIZE_STATUSES = (cairocffi.STATUS_NO_MEMORY, cairocffi.STATUS_INVALID_SIZE)


def rasterize(document: str, assets: AssetRegistry) -> Image.Image:
    """Draw a filled card template at its intrinsic size."""
    root = parse(document)
    width, height = intrinsic_size(root)
    check_buffer(width, height)
    inline_images(root, assets)

    svg = ElementTree.tostring(root, encoding="utf-8")
    try:
        png = cairosvg.svg2png(bytestring=svg, output_width=width, output_height=height)
    except MemoryError as exc:
        raise BufferAllocationError(f"No memory for a {width}x{height} card") from exc
    except cairocffi.CairoError as exc:
        if getattr(exc, "status", None) in _SIZE_STATUSES:
            raise BufferAllocationError(
                f"Could not allocate a {width}x{height} surface: {exc}"
            ) from exc
        raise VectorError(f"Cairo could not draw the card: {exc}") from exc
    except (ElementTree.ParseError, ValueError, TypeError, LookupError, ArithmeticError) as exc:
        raise VectorError(f"Could not draw card SVG: {exc}") from exc

    return Image.open(BytesIO(png)).convert("RGBA")


def parse(document: str) -> ElementTree.Element:
    try:
        root = ElementTree.fromstring(document)
    except ElementTree.ParseError as exc:
        raise VectorError(f"Malformed SVG document: {exc}") from exc
    if _local(root.tag) != "svg":
        raise VectorError(f"Expected an <svg> root element, got <{_local(root.tag)}>")
    return root


def intrinsic_size(root: ElementTree.Element) -> tuple[int, int]:
    """Pixel size from width/height, falling back to the viewBox."""
    width, height = root.get("width"), root.get("height")
    if width is None or height is None:
        view_box = (root.get("viewBox") or "").replace(",", " ").split()
        if len(view_box) != 4:
            raise VectorError("SVG root has neither width/height nor a viewBox")
        width = width if width is not None else view_box[2]
        height = height if height is not None else view_box[3]
    return math.ceil(_length(width)), math.ceil(_length(height))


def check_buffer(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise BufferAllocationError(f"Cannot draw a {width}x{height} card")
    if width * height > config.MAX_PIXELS:
        raise BufferAllocationError(
            f"{width}x{height} card exceeds the {config.MAX_PIXELS} pixel limit"
        )


def inline_images(root: ElementTree.Element, assets: AssetRegistry) -> int:
    """Rewrite every <image> href to a PNG data URI; drop the unresolved ones."""
    parents = {child: parent for parent in root.iter() for child in parent}
    dropped = 0
    for element in [e for e in root.iter() if _local(e.tag) == "image"]:
        key = XLINK_HREF if element.get(XLINK_HREF) is not None else "href"
        href = (element.get(key) or "").strip()
        uri = resolve_href(href, assets) if href else None
        if uri is None:
            parents[element].remove(element)
            dropped += 1
        else:
            element.set(key, uri)
    if dropped:
        log.debug("Dropped %d unresolved <image> element(s)", dropped)
    return dropped


def resolve_href(href: str, assets: AssetRegistry) -> Optional[str]:
    """An image reference as a PNG data URI, or None when it cannot be resolved."""
    if not href.startswith("data:"):
        toy = Toy.from_filename(href)
        if toy is None:
            log.debug("Unknown image reference %r", href[:64])
            return None
        return to_data_uri(assets.toy_bytes(toy), "image/png")

    parsed = split_data_uri(href)
    if parsed is None:
        log.debug("Unparseable data URI")
        return None
    mime, data = parsed
    fmt = INLINE_IMAGE_MIME.get(mime)
    if fmt is None:
        log.debug("Unsupported inline image type %s", mime)
        return None
    try:
        img = safe_open(data, fmt).convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        log.warning("Could not decode %s image (%d bytes)", fmt, len(data))
        return None
    return to_data_uri(encode_png(img), "image/png")


def _local(tag) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _length(value: str) -> float:
    raw = value.strip().removesuffix("px")
    try:
        num = float(raw)
    except ValueError as exc:
        raise VectorError(f"Unsupported length {value!r}") from exc
    if not math.isfinite(num):
        raise VectorError(f"Unsupported length {value!r}")
    return num
