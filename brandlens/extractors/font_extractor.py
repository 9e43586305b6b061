"""Extract metadata from uploaded font files."""

import logging
import re
import struct
from pathlib import Path
from typing import Optional

from brandlens.schemas.analysis import FontRecord
from brandlens.utils.media_utils import to_data_url

logger = logging.getLogger(__name__)

FONT_FORMATS = {
    "ttf": "TrueType",
    "otf": "OpenType",
    "woff": "Web Open Font Format",
    "woff2": "Web Open Font Format 2",
}

# sfnt version tags: TrueType 1.0, Apple 'true', CFF 'OTTO'
_SFNT_SIGNATURES = {0x00010000, 0x74727565, 0x4F54544F}
_WINDOWS_PLATFORM = 3
_FULL_NAME_ID = 4
_FAMILY_NAME_ID = 1

_EXTENSION_RE = re.compile(r"\.(ttf|otf|woff2?)", re.IGNORECASE)
_WEIGHT_SUFFIX_RE = re.compile(
    r"[-_](Regular|Bold|Italic|Light|Medium|SemiBold|ExtraBold|Black|Thin|Heavy)",
    re.IGNORECASE,
)


def font_name_from_filename(filename: str) -> str:
    """``open-sans_Bold.ttf`` -> ``Open Sans``."""
    name = _EXTENSION_RE.sub("", filename)
    name = _WEIGHT_SUFFIX_RE.sub("", name)
    name = re.sub(r"[-_]", " ", name)
    name = re.sub(r"\b\w", lambda m: m.group(0).upper(), name)
    return name.strip()


def read_sfnt_name(data: bytes) -> Optional[str]:
    """Read the full or family name from the ``name`` table of a TTF/OTF file.

    Only Windows-platform (UTF-16BE) records are considered; the first one
    carrying name ID 4 or 1 wins. Returns None for anything unparseable.
    """
    try:
        signature, num_tables = struct.unpack_from(">IH", data, 0)
        if signature not in _SFNT_SIGNATURES:
            return None

        table_offset = None
        for i in range(num_tables):
            tag, _, offset, _ = struct.unpack_from(">4sIII", data, 12 + i * 16)
            if tag == b"name":
                table_offset = offset
                break
        if not table_offset:
            return None

        _, count, string_offset = struct.unpack_from(">HHH", data, table_offset)
        for i in range(count):
            platform_id, _, _, name_id, length, offset = struct.unpack_from(
                ">HHHHHH", data, table_offset + 6 + i * 12
            )
            if platform_id != _WINDOWS_PLATFORM or name_id not in (_FULL_NAME_ID, _FAMILY_NAME_ID):
                continue
            start = table_offset + string_offset + offset
            raw = data[start:start + length]
            name = raw.decode("utf-16-be", errors="ignore").replace("\x00", "").strip()
            if name:
                return name
    except struct.error as e:
        logger.debug(f"Truncated font data: {e}")
    return None


def extract_font(path: str | Path) -> FontRecord:
    """Describe an uploaded font file.

    The family name is taken from the file's name table when it can be
    read, otherwise derived from the filename.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    ext = path.suffix.lower().lstrip(".")
    data = path.read_bytes()

    name = font_name_from_filename(path.name)
    if ext in ("ttf", "otf"):
        name = read_sfnt_name(data) or name

    logger.debug(f"{path.name}: font '{name}' ({ext})")
    return FontRecord(
        source=path.name,
        name=name,
        format=FONT_FORMATS.get(ext, "Unknown"),
        size=len(data),
        data_url=to_data_url(data, ext),
    )
