from functools import lru_cache
from typing import Optional, Tuple, Union

from PIL import ImageFont

from src.shared.config import get_settings

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

HEAVY = "heavy"
BOLD = "bold"

# Display faces first, then common system fallbacks. Anton/Impact are the
# intended headline family; DejaVu/Liberation keep Linux hosts working.
_HEAVY_CANDIDATES: Tuple[str, ...] = (
    "Anton-Regular.ttf",
    "/usr/share/fonts/truetype/anton/Anton-Regular.ttf",
    "Impact.ttf",
    "impact.ttf",
    "/System/Library/Fonts/Supplemental/Impact.ttf",
    "/Library/Fonts/Impact.ttf",
    "/usr/share/fonts/truetype/msttcorefonts/Impact.ttf",
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
)

_BOLD_CANDIDATES: Tuple[str, ...] = (
    "Anton-Regular.ttf",
    "/usr/share/fonts/truetype/anton/Anton-Regular.ttf",
    "arialbd.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
)


def _candidates(weight: str) -> Tuple[str, ...]:
    settings = get_settings()
    override: Optional[str] = settings.font_path if weight == HEAVY else (settings.font_bold_path or settings.font_path)
    base = _HEAVY_CANDIDATES if weight == HEAVY else _BOLD_CANDIDATES
    return ((override,) if override else ()) + base


@lru_cache(maxsize=128)
def _load_font(size: int, candidates: Tuple[str, ...]) -> FontType:
    for name in candidates:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def get_font(size: int, weight: str = HEAVY) -> FontType:
    """Return the first available face of the display family at ``size`` px.

    Cached per candidate list, so a changed font override takes effect once
    settings are reloaded.
    """
    return _load_font(size, _candidates(weight))


def measure_text(text: str, size: int, weight: str = HEAVY) -> float:
    """Rendered advance width of ``text`` in the display family."""
    if not text:
        return 0.0
    return float(get_font(size, weight).getlength(text))
