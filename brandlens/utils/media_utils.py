"""Helpers for embedding media payloads and reading their dimensions."""

import base64
import logging
import re
from io import BytesIO

from lxml import etree
from PIL import Image

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "emf": "image/x-emf",
    "wmf": "image/x-wmf",
    "ttf": "font/ttf",
    "otf": "font/otf",
    "woff": "font/woff",
    "woff2": "font/woff2",
}

DEFAULT_SVG_SIZE = (100.0, 100.0)

_SVG_LENGTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def mime_type_for(extension: str) -> str:
    return MIME_TYPES.get(extension.lower().lstrip("."), "application/octet-stream")


def to_data_url(data: bytes, extension: str) -> str:
    """Encode raw bytes as a base64 ``data:`` URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type_for(extension)};base64,{encoded}"


def looks_like_svg(data: bytes) -> bool:
    head = data[:1024].lstrip().lower()
    return b"<svg" in head or head.startswith(b"<?xml")


def _svg_length(value) -> float | None:
    if not value:
        return None
    match = _SVG_LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


def svg_dimensions(data: bytes) -> tuple[float, float]:
    """Width/height of an SVG from its attributes or viewBox; 100x100 if unknown."""
    try:
        root = etree.fromstring(data, parser=etree.XMLParser(resolve_entities=False, recover=True))
    except etree.XMLSyntaxError as e:
        logger.debug(f"Unparseable SVG: {e}")
        return DEFAULT_SVG_SIZE
    if root is None:
        return DEFAULT_SVG_SIZE

    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    if width and height:
        return width, height

    view_box = (root.get("viewBox") or "").replace(",", " ").split()
    if len(view_box) == 4:
        try:
            return float(view_box[2]), float(view_box[3])
        except ValueError:
            pass
    return DEFAULT_SVG_SIZE


def raster_dimensions(data: bytes) -> tuple[int, int]:
    """Pixel size of a raster image; (0, 0) when Pillow cannot read it."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return 0, 0
