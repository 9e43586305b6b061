"""Parse design-token JSON files.

Four layouts are recognized:

- Tokens Studio / Figma Tokens: nested groups whose leaves carry
  ``$value``/``value`` and ``$type``/``type``.
- Figma Variables export: a top-level ``variables`` list.
- Style Dictionary: top-level ``color`` / ``size`` / ``font`` categories.
- Anything else is walked generically and classified by value shape.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from brandlens.schemas.analysis import TokenEntry, TokensRecord
from brandlens.utils.color_utils import css_color_to_hex, rgb_to_hex

logger = logging.getLogger(__name__)

_COLOR_VALUE_RE = re.compile(r"^(#[0-9a-fA-F]{3,8}|rgba?\(.+\)|hsla?\(.+\))$", re.IGNORECASE)

# Tokens Studio $type -> record section
_STUDIO_TYPES = {
    "fontFamily": "fonts",
    "fontFamilies": "fonts",
    "spacing": "spacing",
    "dimension": "spacing",
    "borderRadius": "radii",
    "boxShadow": "shadows",
}

# Style Dictionary top-level category -> record section
_STYLE_DICTIONARY_CATEGORIES = {
    "color": "colors",
    "font": "fonts",
    "size": "spacing",
    "spacing": "spacing",
}


def is_color_value(value) -> bool:
    return isinstance(value, str) and bool(_COLOR_VALUE_RE.match(value))


def normalize_color(value):
    """Hex and rgb() colors become ``#rrggbb``; anything else is returned as-is."""
    if isinstance(value, dict) and {"r", "g", "b"} <= value.keys():
        # Figma variables store channels as 0-1 floats
        try:
            return rgb_to_hex(*(float(value[c]) * 255 for c in "rgb"))
        except (TypeError, ValueError):
            return value
    if not isinstance(value, str):
        return value
    return css_color_to_hex(value) or value


def _is_token_node(node) -> bool:
    return isinstance(node, dict) and ("$value" in node or "value" in node)


def has_nested_tokens(data) -> bool:
    if not isinstance(data, dict):
        return False
    return any(
        _is_token_node(value) or has_nested_tokens(value)
        for value in data.values()
        if isinstance(value, dict)
    )


def has_typed_tokens(data) -> bool:
    """True if any token leaf declares a type or uses ``$value``."""
    if not isinstance(data, dict):
        return False
    for value in data.values():
        if not isinstance(value, dict):
            continue
        if _is_token_node(value) and ({"$type", "type", "$value"} & value.keys()):
            return True
        if has_typed_tokens(value):
            return True
    return False


def detect_token_format(data) -> str:
    if not isinstance(data, dict):
        return "generic"
    if "$themes" in data or "$metadata" in data:
        return "tokens-studio"
    if data.get("variables") or data.get("variableCollections"):
        return "figma-variables"
    # Style Dictionary leaves carry a bare ``value``
    if (data.get("color") or data.get("size") or data.get("font")) and not has_typed_tokens(data):
        return "style-dictionary"
    if has_nested_tokens(data):
        return "tokens-studio"
    return "generic"


# -----------------------------------------------------------------------
# Format parsers
# -----------------------------------------------------------------------

def _parse_tokens_studio(data: dict, record: TokensRecord, path: tuple[str, ...] = ()) -> None:
    for key, node in data.items():
        if key.startswith("$") or not isinstance(node, dict):
            continue
        current = (*path, key)

        if not _is_token_node(node):
            _parse_tokens_studio(node, record, current)
            continue

        value = node["$value"] if "$value" in node else node.get("value")
        token_type = node.get("$type", node.get("type"))
        name = ".".join(current)
        description = node.get("$description", node.get("description"))

        if token_type == "color" or is_color_value(value):
            record.colors.append(TokenEntry(name=name, value=normalize_color(value), description=description))
            continue
        section = _STUDIO_TYPES.get(token_type)
        if section:
            getattr(record, section).append(TokenEntry(name=name, value=value, description=description))


def _parse_style_dictionary(data: dict, record: TokensRecord) -> None:
    def _walk(section: str | None, node: dict, path: tuple[str, ...]) -> None:
        for key, child in node.items():
            if not isinstance(child, dict):
                continue
            current = (*path, key)
            if "value" not in child:
                _walk(section, child, current)
                continue
            if section is None:
                continue
            value = child["value"]
            if section == "colors":
                value = normalize_color(value)
            getattr(record, section).append(TokenEntry(name=".".join(current), value=value))

    for category, node in data.items():
        if isinstance(node, dict):
            _walk(_STYLE_DICTIONARY_CATEGORIES.get(category), node, (category,))


def _parse_figma_variables(data: dict, record: TokensRecord) -> None:
    for variable in data.get("variables") or []:
        if not isinstance(variable, dict):
            continue
        name = variable.get("name") or variable.get("key")
        value = variable.get("value") or variable.get("resolvedValue")
        if not name or value is None:
            continue

        if variable.get("resolvedType") == "COLOR" or is_color_value(value):
            record.colors.append(TokenEntry(name=name, value=normalize_color(value)))
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            record.spacing.append(TokenEntry(name=name, value=f"{value:g}px"))
        elif isinstance(value, str) and "font" in name.lower():
            record.fonts.append(TokenEntry(name=name, value=value))


def _parse_generic(data: dict, record: TokensRecord, path: tuple[str, ...] = ()) -> None:
    for key, value in data.items():
        current = (*path, str(key))
        if isinstance(value, dict):
            _parse_generic(value, record, current)
            continue

        name = ".".join(current)
        lowered = str(key).lower()
        if is_color_value(value):
            record.colors.append(TokenEntry(name=name, value=normalize_color(value)))
        elif isinstance(value, str) and ("font" in lowered or "family" in lowered):
            record.fonts.append(TokenEntry(name=name, value=value))
        elif isinstance(value, str) and value.endswith(("px", "rem", "em")):
            record.spacing.append(TokenEntry(name=name, value=value))


_FORMAT_PARSERS = {
    "tokens-studio": _parse_tokens_studio,
    "style-dictionary": _parse_style_dictionary,
    "figma-variables": _parse_figma_variables,
    "generic": _parse_generic,
}


def parse_tokens(data: Any, source: str) -> TokensRecord:
    """Classify already-decoded token JSON into a TokensRecord."""
    token_format = detect_token_format(data)
    record = TokensRecord(source=source, format=token_format)
    if isinstance(data, dict):
        _FORMAT_PARSERS[token_format](data, record)
    return record


def extract_tokens(path: str | Path) -> TokensRecord:
    """Read a design-token file.

    Invalid JSON does not raise: the record comes back with
    ``valid=False`` and an error message.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"{path.name}: invalid token JSON: {e}")
        return TokensRecord(source=path.name, valid=False, error="Invalid JSON")

    record = parse_tokens(data, path.name)
    logger.debug(
        f"{path.name}: {record.format} tokens - {len(record.colors)} colors, "
        f"{len(record.fonts)} fonts, {len(record.spacing)} spacing"
    )
    return record
