"""Extract brand patterns from .pptx / .potx packages.

The package is read as a plain OOXML zip so that templates (.potx), which
python-pptx refuses to open, go through the same path as presentations.
Every part is parsed with lxml; missing or malformed parts are skipped and
simply leave the corresponding record section empty.

Collected per file: slide size, theme colors and fonts, slide-master text
styles, font sizes, logo placements, layout margins, slide color usage,
spacing observations, rounded shapes and buttons, and all embedded media.
"""

import logging
import posixpath
import re
import zipfile
from collections import Counter
from pathlib import Path

from lxml import etree
from pptx.util import Emu

from brandlens.schemas.analysis import (
    Box,
    ButtonShape,
    ColorUsage,
    FontReference,
    LogoPlacement,
    PptxRecord,
    RoundedShape,
    SlideSize,
    TextStyle,
    ThemeColor,
)
from brandlens.schemas.rules import AssetEntry, Dimensions, Point
from brandlens.utils.color_utils import (
    is_near_white_or_black,
    normalize_hex,
    round_half_up,
    round_to_step,
)
from brandlens.utils.media_utils import (
    looks_like_svg,
    raster_dimensions,
    svg_dimensions,
    to_data_url,
)

logger = logging.getLogger(__name__)

_NS = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
    "asvg": "http://schemas.microsoft.com/office/drawing/2016/SVG/main",
}

_PARSER = etree.XMLParser(resolve_entities=False, remove_blank_text=True)

SCHEME_COLORS = (
    ("dk1", "dark", "Dark 1"),
    ("lt1", "light", "Light 1"),
    ("dk2", "dark", "Dark 2"),
    ("lt2", "light", "Light 2"),
    ("accent1", "accent", "Accent 1"),
    ("accent2", "accent", "Accent 2"),
    ("accent3", "accent", "Accent 3"),
    ("accent4", "accent", "Accent 4"),
    ("accent5", "accent", "Accent 5"),
    ("accent6", "accent", "Accent 6"),
    ("hlink", "link", "Hyperlink"),
    ("folHlink", "link", "Followed Link"),
)

MEDIA_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "svg", "webp", "emf", "wmf"}
VECTOR_EXTENSIONS = {"svg", "emf", "wmf"}

GRID_CANDIDATES = (4, 8, 10, 12, 16, 20, 24)
DEFAULT_GRID_BASE = 8
DEFAULT_SLIDE_SIZE = (960, 540)
PX_PER_INCH = 96

MIN_FONT_PT, MAX_FONT_PT = 6, 200
MIN_MARGIN_PX = 10
MAX_GRID_VALUE_PX = 300
MIN_GAP_PX, MAX_GAP_PX = 5, 200
SPACING_BIN = 4
MIN_SPACING_COUNT = 3
MAX_COMMON_SPACINGS = 8

# Small filled shapes with text are treated as buttons
BUTTON_MAX_WIDTH_PX = 400
BUTTON_MAX_HEIGHT_PX = 120
DEFAULT_ROUND_RECT_ADJ = 16667

MASTER_ASSET_CONFIDENCE = 0.9
LAYOUT_ASSET_CONFIDENCE = 0.85
MASTER_BACKGROUND_CONFIDENCE = 0.95
SVG_BLIP_CONFIDENCE = 0.9
EMBEDDED_SVG_CONFIDENCE = 0.85


def emu_to_px(emu) -> int:
    """Convert English Metric Units to pixels at 96 dpi."""
    return round_half_up(Emu(int(emu)).inches * PX_PER_INCH)


def best_grid_base(spacings: list[int]) -> int:
    """Candidate base dividing the most spacings; the first best wins."""
    best, best_score = DEFAULT_GRID_BASE, 0
    for base in GRID_CANDIDATES:
        score = sum(1 for s in spacings if s % base == 0)
        if score > best_score:
            best, best_score = base, score
    return best


def position_category(x: float, y: float, width: float, height: float, right: float = 0.5) -> str:
    """Bucket a point into a slide corner or ``center``.

    Left/top/bottom use the outer 30% bands; ``right`` is the fraction of
    the width past which a point counts as right-aligned.
    """
    is_left = x < width * 0.3
    is_right = x > width * right
    is_top = y < height * 0.3
    is_bottom = y > height * 0.7
    if is_left and is_top:
        return "top-left"
    if is_right and is_top:
        return "top-right"
    if is_left and is_bottom:
        return "bottom-left"
    if is_right and is_bottom:
        return "bottom-right"
    return "center"


def classify_image(filename: str, size: int, width: float, height: float) -> str:
    """Guess whether a media file is a logo, icon, background or plain image."""
    name = filename.lower()
    aspect_ratio = width / height if width and height else 1

    if any(hint in name for hint in ("logo", "brand", "mark")):
        return "logo"
    if "icon" in name or "symbol" in name:
        return "icon"
    if width and height and width < 150 and height < 150:
        return "icon"
    if "background" in name or "bg" in name:
        return "background"
    if width and height and width > 1000 and height > 600:
        return "background"
    if size < 100_000 and 0.5 < aspect_ratio < 2:
        return "logo"
    return "image"


def asset_confidence(filename: str, size: int, width: float, asset_type: str) -> float:
    confidence = 0.5
    name = filename.lower()
    if asset_type == "logo":
        if "logo" in name:
            confidence += 0.3
        if "brand" in name:
            confidence += 0.2
        if size < 50_000:
            confidence += 0.1
        if width and width < 500:
            confidence += 0.1
    return round(min(confidence, 1.0), 2)


# -----------------------------------------------------------------------
# Package access
# -----------------------------------------------------------------------

def _part_number(name: str) -> tuple[int, str]:
    match = re.search(r"(\d+)\.\w+$", name)
    return (int(match.group(1)) if match else 0, name)


class _Package:
    """Read-only view of the parts inside an OOXML zip."""

    def __init__(self, archive: zipfile.ZipFile):
        self.archive = archive
        self.names = archive.namelist()
        self._xml_cache: dict[str, etree._Element | None] = {}

    def parts(self, pattern: str) -> list[str]:
        """Part names fully matching ``pattern``, in numeric order."""
        regex = re.compile(pattern, re.IGNORECASE)
        return sorted((n for n in self.names if regex.fullmatch(n)), key=_part_number)

    def read(self, name: str) -> bytes | None:
        try:
            return self.archive.read(name)
        except KeyError:
            return None

    def xml(self, name: str):
        if name in self._xml_cache:
            return self._xml_cache[name]
        data = self.read(name)
        root = None
        if data is not None:
            try:
                root = etree.fromstring(data, parser=_PARSER)
            except etree.XMLSyntaxError as e:
                logger.debug(f"Skipping malformed part {name}: {e}")
        self._xml_cache[name] = root
        return root

    def rels(self, part_name: str) -> dict[str, str]:
        """Map relationship IDs of a part to absolute part names."""
        folder, filename = posixpath.split(part_name)
        root = self.xml(f"{folder}/_rels/{filename}.rels")
        if root is None:
            return {}
        targets = {}
        for rel in root.iterfind("rel:Relationship", _NS):
            if rel.get("TargetMode") == "External":
                continue
            target = rel.get("Target", "")
            resolved = posixpath.normpath(posixpath.join(folder, target))
            targets[rel.get("Id")] = resolved.lstrip("/")
        return targets


def _first_attr(elem, xpath: str) -> str | None:
    values = elem.xpath(xpath, namespaces=_NS)
    return str(values[0]) if values else None


def _first_int(elem, xpath: str) -> int | None:
    value = _first_attr(elem, xpath)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _extension(name: str) -> str:
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def _slide_dims(record: PptxRecord) -> tuple[int, int] | None:
    size = record.layouts.slide_size
    if size and size.width > 0 and size.height > 0:
        return size.width, size.height
    return None


def _known_asset_names(record: PptxRecord) -> set[str]:
    assets = record.extracted_assets
    return {
        a.name
        for group in (assets.logos, assets.images, assets.icons, assets.backgrounds)
        for a in group
    }


def _add_font(record: PptxRecord, name: str, usage: str) -> None:
    fonts = record.theme.fonts.all
    if not any(ref.name == name for ref in fonts):
        fonts.append(FontReference(name=name, usage=usage))


def _shape_box(sp) -> Box | None:
    off = sp.find("p:spPr/a:xfrm/a:off", _NS)
    ext = sp.find("p:spPr/a:xfrm/a:ext", _NS)
    if off is None or ext is None:
        return None
    try:
        return Box(
            x=emu_to_px(off.get("x", 0)),
            y=emu_to_px(off.get("y", 0)),
            width=emu_to_px(ext.get("cx", 0)),
            height=emu_to_px(ext.get("cy", 0)),
        )
    except ValueError:
        return None


# -----------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------

def extract_pptx(path: str | Path) -> PptxRecord:
    """Analyze a presentation or template and return its PptxRecord.

    Raises:
        FileNotFoundError: If the file does not exist.
        zipfile.BadZipFile: If the file is not an OOXML package.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    record = PptxRecord(
        source=path.name,
        type="potx" if path.suffix.lower() == ".potx" else "pptx",
    )

    with zipfile.ZipFile(path) as archive:
        package = _Package(archive)
        _parse_presentation(package, record)
        _parse_themes(package, record)
        _parse_masters(package, record)
        _parse_layouts(package, record)
        _parse_slides(package, record)
        _extract_media(package, record)
        _locate_slide_logos(package, record)

    _finalize(record)
    logger.debug(
        f"{path.name}: {len(record.theme.colors)} theme colors, "
        f"{record.slide_count} slides, {len(record.extracted_assets.logos)} logos, "
        f"confidence={record.confidence}"
    )
    return record


# -----------------------------------------------------------------------
# Presentation and theme
# -----------------------------------------------------------------------

def _parse_presentation(package: _Package, record: PptxRecord) -> None:
    root = package.xml("ppt/presentation.xml")
    if root is None:
        return
    size = root.find("p:sldSz", _NS)
    if size is None:
        return
    try:
        cx, cy = int(size.get("cx", 0)), int(size.get("cy", 0))
    except ValueError:
        logger.debug("Unreadable slide size")
        return
    record.layouts.slide_size = SlideSize(
        width=emu_to_px(cx),
        height=emu_to_px(cy),
        width_emu=cx,
        height_emu=cy,
    )


def _scheme_color(slot) -> str | None:
    if slot is None:
        return None
    srgb = slot.find("a:srgbClr", _NS)
    if srgb is not None:
        return normalize_hex(srgb.get("val"))
    sys_clr = slot.find("a:sysClr", _NS)
    if sys_clr is not None:
        return normalize_hex(sys_clr.get("lastClr"))
    return None


def _parse_themes(package: _Package, record: PptxRecord) -> None:
    fonts = record.theme.fonts
    for name in package.parts(r"ppt/theme/theme\d*\.xml"):
        root = package.xml(name)
        if root is None:
            continue

        scheme = root.find(".//a:clrScheme", _NS)
        if scheme is not None:
            for slot, color_type, label in SCHEME_COLORS:
                value = _scheme_color(scheme.find(f"a:{slot}", _NS))
                if value:
                    record.theme.colors.append(
                        ThemeColor(name=slot, type=color_type, label=label, value=value)
                    )

        major = _first_attr(root, ".//a:fontScheme/a:majorFont/a:latin/@typeface")
        minor = _first_attr(root, ".//a:fontScheme/a:minorFont/a:latin/@typeface")
        if major and not major.startswith("+"):
            fonts.major = fonts.major or major
            _add_font(record, major, "heading")
        if minor and not minor.startswith("+"):
            fonts.minor = fonts.minor or minor
            _add_font(record, minor, "body")

        for typeface in root.xpath(".//@typeface"):
            if len(typeface) > 1 and not typeface.startswith("+"):
                _add_font(record, str(typeface), "other")


# -----------------------------------------------------------------------
# Slide masters and layouts
# -----------------------------------------------------------------------

def _parse_text_style(style) -> TextStyle:
    """Read the level-1 properties of a master title/body style."""
    size = _first_int(style, ".//a:defRPr/@sz")
    spacing = _first_int(style, ".//a:defRPr/@spc")
    line = _first_int(style, ".//a:lnSpc/a:spcPct/@val")
    return TextStyle(
        font_size=size / 100 if size else None,
        font_weight="bold" if style.xpath(".//a:defRPr[@b='1']", namespaces=_NS) else "normal",
        text_transform="uppercase" if style.xpath(".//a:defRPr[@cap='all']", namespaces=_NS) else "none",
        letter_spacing=spacing / 100 if spacing else None,
        line_height=line / 100000 if line else None,
    )


def _has_run_property(root, attr: str, value: str) -> bool:
    xpath = f".//a:rPr[@{attr}='{value}'] | .//a:defRPr[@{attr}='{value}']"
    return bool(root.xpath(xpath, namespaces=_NS))


def _collect_text_patterns(root, record: PptxRecord) -> None:
    patterns = record.patterns.typography_patterns
    typography = record.typography
    if _has_run_property(root, "b", "1"):
        patterns.uses_bold = True
        if "bold" not in typography.font_weights:
            typography.font_weights.append("bold")
    if _has_run_property(root, "i", "1"):
        patterns.uses_italic = True
    if _has_run_property(root, "cap", "all"):
        patterns.uses_uppercase = True
        if "uppercase" not in typography.text_transforms:
            typography.text_transforms.append("uppercase")


def _media_asset(
    package: _Package,
    media_path: str,
    asset_type: str,
    source: str,
    confidence: float,
) -> AssetEntry | None:
    filename = posixpath.basename(media_path)
    ext = _extension(filename)
    if ext not in MEDIA_EXTENSIONS:
        return None
    data = package.read(media_path)
    if data is None:
        return None

    width, height = svg_dimensions(data) if ext == "svg" else raster_dimensions(data)
    return AssetEntry(
        name=filename,
        data=to_data_url(data, ext),
        size=len(data),
        type=asset_type,
        source=source,
        format=ext,
        dimensions=Dimensions(width=width, height=height) if width and height else None,
        is_vector=ext in VECTOR_EXTENSIONS,
        confidence=confidence,
    )


def _collect_pictures(
    package: _Package,
    root,
    rels: dict[str, str],
    record: PptxRecord,
    source: str,
    placement_source: str,
    confidence: float,
) -> None:
    """Pictures on masters and layouts are brand elements, usually logos."""
    for pic in root.iterfind(".//p:pic", _NS):
        embed = _first_attr(pic, ".//a:blip/@r:embed")
        media_path = rels.get(embed) if embed else None
        if not media_path or "/media/" not in media_path:
            continue
        filename = posixpath.basename(media_path)
        if any(a.name == filename for a in record.extracted_assets.logos):
            continue

        asset = _media_asset(package, media_path, "logo", source, confidence)
        if asset is None:
            continue

        off = pic.find("p:spPr/a:xfrm/a:off", _NS)
        ext = pic.find("p:spPr/a:xfrm/a:ext", _NS)
        if off is not None:
            asset.position = Point(x=emu_to_px(off.get("x", 0)), y=emu_to_px(off.get("y", 0)))
        if asset.dimensions is None and ext is not None:
            asset.dimensions = Dimensions(
                width=emu_to_px(ext.get("cx", 0)),
                height=emu_to_px(ext.get("cy", 0)),
            )

        slide = _slide_dims(record)
        if asset.position is not None and slide:
            category = position_category(asset.position.x, asset.position.y, *slide)
            asset.position_category = category
            record.layouts.logo_positions.append(LogoPlacement(
                name=filename,
                position=category,
                x=asset.position.x,
                y=asset.position.y,
                source=placement_source,
            ))

        record.extracted_assets.logos.append(asset)


def _collect_backgrounds(package: _Package, root, rels: dict[str, str], record: PptxRecord) -> None:
    backgrounds = record.extracted_assets.backgrounds
    for embed in root.xpath(".//p:bg//a:blip/@r:embed", namespaces=_NS):
        media_path = rels.get(str(embed))
        if not media_path:
            continue
        if any(b.name == posixpath.basename(media_path) for b in backgrounds):
            continue
        asset = _media_asset(
            package, media_path, "background", "slideMaster", MASTER_BACKGROUND_CONFIDENCE,
        )
        if asset is not None:
            backgrounds.append(asset)


def _parse_masters(package: _Package, record: PptxRecord) -> None:
    typography = record.typography
    for name in package.parts(r"ppt/slideMasters/slideMaster\d+\.xml"):
        root = package.xml(name)
        if root is None:
            continue

        title = root.find("p:txStyles/p:titleStyle", _NS)
        if title is not None:
            typography.heading_styles.append(_parse_text_style(title))
        body = root.find("p:txStyles/p:bodyStyle", _NS)
        if body is not None:
            typography.body_styles.append(_parse_text_style(body))

        _collect_text_patterns(root, record)

        for typeface in root.xpath(".//@typeface"):
            if typeface and not typeface.startswith("+"):
                _add_font(record, str(typeface), "slide")

        for raw_size in root.xpath(".//@sz"):
            try:
                size_pt = int(raw_size) / 100
            except ValueError:
                continue
            if MIN_FONT_PT < size_pt < MAX_FONT_PT:
                typography.font_sizes.append(size_pt)

        rels = package.rels(name)
        _collect_pictures(
            package, root, rels, record,
            source="slideMaster",
            placement_source="master",
            confidence=MASTER_ASSET_CONFIDENCE,
        )
        _collect_backgrounds(package, root, rels, record)


def _parse_layouts(package: _Package, record: PptxRecord) -> None:
    slide = _slide_dims(record)
    for name in package.parts(r"ppt/slideLayouts/slideLayout\d+\.xml"):
        root = package.xml(name)
        if root is None:
            continue

        for sp in root.iterfind(".//p:sp", _NS):
            box = _shape_box(sp)
            if box is None:
                continue
            record.layouts.content_areas.append(box)
            if slide:
                slide_w, slide_h = slide
                edges = (
                    box.x,
                    slide_w - box.x - box.width,
                    box.y,
                    slide_h - box.y - box.height,
                )
                record.spacing.margins.extend(m for m in edges if m > MIN_MARGIN_PX)

        _collect_pictures(
            package, root, package.rels(name), record,
            source="slideLayout",
            placement_source="layout",
            confidence=LAYOUT_ASSET_CONFIDENCE,
        )


# -----------------------------------------------------------------------
# Slides
# -----------------------------------------------------------------------

def _color_context(elem) -> str | None:
    ancestors = {etree.QName(a).localname for a in elem.iterancestors()}
    if "ln" in ancestors or "lnRef" in ancestors:
        return "border"
    if ancestors & {"rPr", "defRPr", "endParaRPr"}:
        return "text"
    parent = elem.getparent()
    if ancestors & {"spPr", "bgPr"} and parent is not None and etree.QName(parent).localname == "solidFill":
        return "background"
    return None


def _collect_color_usage(root, record: PptxRecord) -> None:
    ns_a = _NS["a"]
    usage_map = record.patterns.color_usage
    for elem in root.iter(f"{{{ns_a}}}srgbClr", f"{{{ns_a}}}sysClr"):
        raw = elem.get("val") if etree.QName(elem).localname == "srgbClr" else elem.get("lastClr")
        hex_color = normalize_hex(raw)
        if hex_color is None or is_near_white_or_black(hex_color):
            continue
        usage = usage_map.setdefault(hex_color, ColorUsage())
        usage.frequency += 1
        context = _color_context(elem)
        if context and context not in usage.contexts:
            usage.contexts.append(context)


def _collect_slide_spacing(root, record: PptxRecord) -> None:
    xpath = ".//a:off/@x | .//a:off/@y | .//a:ext/@cx | .//a:ext/@cy"
    for raw in root.xpath(xpath, namespaces=_NS):
        try:
            px = emu_to_px(raw)
        except ValueError:
            continue
        if 0 < px < MAX_GRID_VALUE_PX:
            record.spacing.grid_values.append(px)

    offsets = []
    for off in root.iterfind(".//a:off", _NS):
        try:
            offsets.append(emu_to_px(off.get("y", 0)))
        except ValueError:
            continue
    for prev_y, curr_y in zip(offsets, offsets[1:]):
        gap = abs(curr_y - prev_y)
        if MIN_GAP_PX < gap < MAX_GAP_PX:
            record.spacing.gaps.append(gap)


def _round_rect_radius(geom, box: Box) -> float:
    adj = _first_attr(geom, "a:avLst/a:gd[@name='adj']/@fmla")
    ratio = DEFAULT_ROUND_RECT_ADJ
    if adj and adj.startswith("val "):
        try:
            ratio = int(adj[4:])
        except ValueError:
            pass
    return round(min(box.width, box.height) * ratio / 100000, 1)


def _collect_shapes(root, record: PptxRecord) -> None:
    for sp in root.iterfind(".//p:sp", _NS):
        box = _shape_box(sp)
        if box is None:
            continue

        radius = None
        geom = sp.find("p:spPr/a:prstGeom", _NS)
        if geom is not None and geom.get("prst") == "roundRect":
            radius = _round_rect_radius(geom, box)
            if radius > 0:
                record.shapes.rounded_rectangles.append(RoundedShape(corner_radius=radius))

        fill = normalize_hex(_first_attr(sp, "p:spPr/a:solidFill/a:srgbClr/@val"))
        text = "".join(sp.xpath(".//a:t/text()", namespaces=_NS)).strip()
        if (
            fill
            and text
            and box.width <= BUTTON_MAX_WIDTH_PX
            and box.height <= BUTTON_MAX_HEIGHT_PX
        ):
            record.shapes.buttons.append(ButtonShape(fill_color=fill, corner_radius=radius))


def _parse_slides(package: _Package, record: PptxRecord) -> None:
    slides = package.parts(r"ppt/slides/slide\d+\.xml")
    record.slide_count = len(slides)
    for name in slides:
        root = package.xml(name)
        if root is None:
            continue
        _collect_color_usage(root, record)
        _collect_slide_spacing(root, record)
        _collect_shapes(root, record)


# -----------------------------------------------------------------------
# Media
# -----------------------------------------------------------------------

def _extract_media(package: _Package, record: PptxRecord) -> None:
    """Collect SVG logos first, then classify the remaining media files."""
    assets = record.extracted_assets
    known = _known_asset_names(record)

    # SVGs referenced through svgBlip (Office 2019+ vector embedding)
    for name in package.parts(r"ppt/slides/slide\d+\.xml"):
        root = package.xml(name)
        if root is None:
            continue
        rels = package.rels(name)
        for embed in root.xpath(".//asvg:svgBlip/@r:embed", namespaces=_NS):
            media_path = rels.get(str(embed))
            if not media_path or posixpath.basename(media_path) in known:
                continue
            asset = _media_asset(package, media_path, "logo", "svgBlip", SVG_BLIP_CONFIDENCE)
            if asset is not None:
                assets.logos.append(asset)
                known.add(asset.name)

    # Loose SVG parts outside the media folder
    for media_path in package.parts(r"(ppt/embeddings|docProps)/.+\.svg"):
        filename = posixpath.basename(media_path)
        data = package.read(media_path)
        if filename in known or data is None or not looks_like_svg(data):
            continue
        source = "embedded" if "embeddings" in media_path else "media"
        asset = _media_asset(package, media_path, "logo", source, EMBEDDED_SVG_CONFIDENCE)
        if asset is not None:
            assets.logos.append(asset)
            known.add(filename)

    groups = {
        "logo": assets.logos,
        "icon": assets.icons,
        "background": assets.backgrounds,
        "image": assets.images,
    }
    for media_path in package.parts(r"ppt/media/.+"):
        filename = posixpath.basename(media_path)
        if filename in known:
            continue
        asset = _media_asset(package, media_path, "image", "slides", 0.5)
        if asset is None:
            continue
        width = asset.dimensions.width if asset.dimensions else 0
        height = asset.dimensions.height if asset.dimensions else 0
        asset.type = classify_image(filename, asset.size, width, height)
        asset.confidence = asset_confidence(filename, asset.size, width, asset.type)
        groups[asset.type].append(asset)
        known.add(filename)


def _locate_slide_logos(package: _Package, record: PptxRecord) -> None:
    """Record where known logos are placed on individual slides."""
    logos = {}
    for logo in record.extracted_assets.logos:
        logos.setdefault(logo.name, logo)
    if not logos:
        return

    slide_w, slide_h = _slide_dims(record) or DEFAULT_SLIDE_SIZE
    for name in package.parts(r"ppt/slides/slide\d+\.xml"):
        root = package.xml(name)
        if root is None:
            continue
        rels = package.rels(name)
        slide_number = _part_number(name)[0]

        for pic in root.iterfind(".//p:pic", _NS):
            embed = _first_attr(pic, ".//a:blip/@r:embed")
            target = rels.get(embed) if embed else None
            logo = logos.get(posixpath.basename(target)) if target else None
            off = pic.find("p:spPr/a:xfrm/a:off", _NS)
            if logo is None or off is None:
                continue

            x, y = emu_to_px(off.get("x", 0)), emu_to_px(off.get("y", 0))
            category = position_category(x, y, slide_w, slide_h, right=0.7)
            logo.position = Point(x=x, y=y, slide=slide_number)
            logo.position_category = category
            record.layouts.logo_positions.append(LogoPlacement(
                name=logo.name, position=category, x=x, y=y, source="slide",
            ))


# -----------------------------------------------------------------------
# Finalization
# -----------------------------------------------------------------------

def _finalize(record: PptxRecord) -> None:
    spacing = record.spacing
    counts = Counter(
        round_to_step(v, SPACING_BIN)
        for v in [*spacing.margins, *spacing.gaps, *spacing.grid_values]
    )
    frequent = sorted(
        ((value, n) for value, n in counts.items() if n >= MIN_SPACING_COUNT),
        key=lambda item: (-item[1], item[0]),
    )
    spacing.common_spacings = [value for value, _ in frequent[:MAX_COMMON_SPACINGS]]
    record.patterns.detected_grid_values = list(spacing.common_spacings)
    record.patterns.grid_base = best_grid_base(spacing.common_spacings)

    record.typography.font_sizes = sorted(
        {s for s in record.typography.font_sizes if MIN_FONT_PT < s < MAX_FONT_PT}
    )

    assets = record.extracted_assets
    assets.logos.sort(key=lambda a: a.confidence, reverse=True)
    assets.images.sort(key=lambda a: a.confidence, reverse=True)

    score = 0.0
    if record.theme.colors:
        score += 0.2
    if record.theme.fonts.major:
        score += 0.15
    if record.theme.fonts.minor:
        score += 0.1
    if assets.logos:
        score += 0.2
    if len(spacing.common_spacings) > 3:
        score += 0.15
    if len(record.typography.font_sizes) > 2:
        score += 0.1
    if record.slide_count > 0:
        score += 0.1
    record.confidence = round(min(score, 1.0), 2)
