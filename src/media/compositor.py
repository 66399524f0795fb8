from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

from src.media.canvas import CanvasSurface, RGBA, Shadow, TRANSPARENT, parse_hex_color
from src.media.fonts import BOLD, get_font, measure_text
from src.specs.common.enums import MissionType
from src.specs.models.artwork import ArtworkRequest

WHITE: RGBA = (255, 255, 255, 255)
BLACK: RGBA = (0, 0, 0, 255)

EDGE_WIDTH = 300
HEADLINE_SIZE = 45
TITLE_MIN_SIZE = 130
TITLE_MAX_SIZE = 160
FIT_STEP = 5
LINE1_OFFSET = 50
LINE2_GAP = 100
LINE3_GAP = 80

ICON_SIZE = 120
ICON_INSET = 150
LOGO_SIZE = 100
LOGO_LIFT = 10
FOOTER_OFFSET = 120

WORDMARK = "Trexx"
BADGE_LABEL = "CLUB"
WORDMARK_SIZE = 32
BADGE_LABEL_SIZE = 16
BADGE_WIDTH = 60
BADGE_HEIGHT = 32
BADGE_RADIUS = 4
BADGE_GAP = 10

TEXT_SHADOW = Shadow(offset_x=6, offset_y=6, blur=12, color=(0, 0, 0, 204))
ICON_SHADOW = Shadow(offset_x=0, offset_y=8, blur=20, color=(0, 0, 0, 102))

Measure = Callable[[str, int], float]


@dataclass(frozen=True)
class LayoutMargins:
    horizontal: int = 50
    vertical: int = 70


@dataclass(frozen=True)
class RenderAssets:
    """Images already decoded for a render. ``None`` means not (yet) loaded."""

    logo: Optional[Image.Image] = None
    icon: Optional[Image.Image] = None


@dataclass(frozen=True)
class HeadlineLayout:
    lines: Tuple[str, str, str]
    title_size: int
    tops: Tuple[int, int, int]


def fit_text_to_width(
    text: str,
    max_width: float,
    min_size: int,
    max_size: int,
    measure: Measure = measure_text,
) -> int:
    """Largest size from ``max_size`` down in steps of 5 whose width fits.

    Falls back to ``min_size`` when nothing fits; the text may then overflow.
    """
    size = max_size
    while size >= min_size:
        if measure(text, size) <= max_width:
            return size
        size -= FIT_STEP
    return min_size


def headline_lines(request: ArtworkRequest) -> Tuple[str, str, str]:
    if request.mission_type == MissionType.CHOOSE_PROPLAYER:
        return "ESCOLHA O SEU", "PRO PLAYER", "FAVORITO"
    return "SIGA O", request.company_name.upper() or "TIME", "NO INSTAGRAM"


def layout_headline(request: ArtworkRequest, width: int, measure: Measure = measure_text) -> HeadlineLayout:
    margins = LayoutMargins()
    safe_width = width - margins.horizontal * 2
    lines = headline_lines(request)
    title_size = fit_text_to_width(lines[1], safe_width, TITLE_MIN_SIZE, TITLE_MAX_SIZE, measure)
    line1_top = margins.vertical + LINE1_OFFSET
    line2_top = line1_top + LINE2_GAP
    line3_top = line2_top + title_size + LINE3_GAP
    return HeadlineLayout(lines=lines, title_size=title_size, tops=(line1_top, line2_top, line3_top))


def vignette_stops(primary_color: str) -> Tuple[Tuple[Tuple[float, RGBA], ...], Tuple[Tuple[float, RGBA], ...]]:
    """(left, right) gradient stops for the colored edge smudge."""
    strong = parse_hex_color(primary_color, 0x80)
    soft = parse_hex_color(primary_color, 0x40)
    left = ((0.0, strong), (0.5, soft), (1.0, TRANSPARENT))
    right = ((0.0, TRANSPARENT), (0.5, soft), (1.0, strong))
    return left, right


def corner_icon_centers(width: int, height: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    return (ICON_INSET, ICON_INSET), (width - ICON_INSET, height - ICON_INSET)


def footer_anchor(width: int, height: int) -> Tuple[int, int]:
    return width // 2, height - FOOTER_OFFSET


def logo_box(width: int, height: int) -> Tuple[int, int, int, int]:
    x, y = footer_anchor(width, height)
    return x - LOGO_SIZE // 2, y - LOGO_SIZE // 2 - LOGO_LIFT, LOGO_SIZE, LOGO_SIZE


def wordmark_geometry(width: int, height: int) -> Dict[str, Tuple[int, int, int, int]]:
    """Boxes (x, y, w, h) for the fallback wordmark and its badge."""
    x, y = footer_anchor(width, height)
    wordmark_width = measure_text(WORDMARK, WORDMARK_SIZE, BOLD)
    start_x = int(round(x - (wordmark_width + 80) / 2))
    badge_x = int(round(start_x + wordmark_width + BADGE_GAP))
    return {
        "wordmark": (start_x, y, int(round(wordmark_width)), WORDMARK_SIZE),
        "badge": (badge_x, y - BADGE_HEIGHT // 2, BADGE_WIDTH, BADGE_HEIGHT),
    }


def draw_background(surface: CanvasSurface, primary_color: str) -> None:
    surface.fill_rect((0, 0, surface.width, surface.height), BLACK)
    left, right = vignette_stops(primary_color)
    surface.fill_linear_gradient((0, 0, EDGE_WIDTH, surface.height), left)
    surface.fill_linear_gradient((surface.width - EDGE_WIDTH, 0, EDGE_WIDTH, surface.height), right)


def draw_headline(surface: CanvasSurface, request: ArtworkRequest) -> HeadlineLayout:
    layout = layout_headline(request, surface.width)
    center_x = surface.width / 2
    line1, line2, line3 = layout.lines
    top1, top2, top3 = layout.tops
    surface.draw_text(line1, center_x, top1, get_font(HEADLINE_SIZE), WHITE, shadow=TEXT_SHADOW)
    surface.draw_text(
        line2, center_x, top2, get_font(layout.title_size), parse_hex_color(request.primary_color), shadow=TEXT_SHADOW
    )
    surface.draw_text(line3, center_x, top3, get_font(HEADLINE_SIZE), WHITE, shadow=TEXT_SHADOW)
    return layout


def draw_corner_icons(surface: CanvasSurface, icon: Image.Image) -> None:
    half = ICON_SIZE // 2
    for cx, cy in corner_icon_centers(surface.width, surface.height):
        surface.blit(icon, (cx - half, cy - half, ICON_SIZE, ICON_SIZE), shadow=ICON_SHADOW)


def draw_footer_logo(surface: CanvasSurface, logo: Image.Image) -> None:
    surface.blit(logo, logo_box(surface.width, surface.height))


def draw_footer_wordmark(surface: CanvasSurface, primary_color: str) -> None:
    geometry = wordmark_geometry(surface.width, surface.height)
    wx, wy, _, _ = geometry["wordmark"]
    bx, by, bw, bh = geometry["badge"]
    surface.draw_text(WORDMARK, wx, wy, get_font(WORDMARK_SIZE, BOLD), WHITE, align="left")
    surface.fill_rounded_rect(geometry["badge"], BADGE_RADIUS, parse_hex_color(primary_color))
    surface.draw_text(BADGE_LABEL, bx + bw / 2, by + bh // 2 - 2, get_font(BADGE_LABEL_SIZE, BOLD), BLACK)


def render(surface: CanvasSurface, request: ArtworkRequest, assets: Optional[RenderAssets] = None) -> None:
    """Compose the full artwork for ``request`` onto ``surface``.

    Images in ``assets`` that are still ``None`` are skipped; callers that load
    them later draw them with ``draw_corner_icons`` / ``draw_footer_logo``.
    """
    assets = assets or RenderAssets()
    surface.clear()
    draw_background(surface, request.primary_color)
    draw_headline(surface, request)

    if request.mission_type == MissionType.FOLLOW_INSTAGRAM and assets.icon is not None:
        draw_corner_icons(surface, assets.icon)

    if request.logo_path:
        if assets.logo is not None:
            draw_footer_logo(surface, assets.logo)
    else:
        draw_footer_wordmark(surface, request.primary_color)


def render_png(request: ArtworkRequest, assets: Optional[RenderAssets] = None) -> Tuple[bytes, Dict]:
    """Render onto a fresh surface and encode it.

    Returns (png_bytes, metadata)
    """
    surface = CanvasSurface()
    render(surface, request, assets)
    meta = {
        "width": surface.width,
        "height": surface.height,
        "missionType": request.mission_type.value,
        "hasLogo": bool(request.logo_path),
    }
    return surface.to_png(), meta
