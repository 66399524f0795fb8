"""Raster drawing surface used by the artwork compositor.

Wraps a Pillow RGBA image and exposes the handful of 2D primitives the
compositor needs: clear, solid fill, linear gradient fill, text with a drop
shadow, image blit and rounded rectangles. Every primitive paints on its own
transparent layer and is alpha-composited so translucent colors blend the way
they would on an HTML canvas.
"""
import io
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFilter

from src.media.fonts import FontType

RGBA = Tuple[int, int, int, int]
Box = Tuple[int, int, int, int]  # x, y, width, height

CANVAS_SIZE = 1080
TRANSPARENT: RGBA = (0, 0, 0, 0)


@dataclass(frozen=True)
class Shadow:
    offset_x: int
    offset_y: int
    blur: float
    color: RGBA


def parse_hex_color(value: str, alpha: int = 255) -> RGBA:
    """``#RRGGBB`` -> (r, g, b, alpha). The value is assumed to be validated."""
    raw = value.lstrip("#")
    return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16), alpha


def _premultiplied_lerp(a: RGBA, b: RGBA, t: float) -> RGBA:
    alpha = a[3] + (b[3] - a[3]) * t
    if alpha <= 0:
        return TRANSPARENT
    channels = []
    for i in range(3):
        pa = a[i] * a[3]
        pb = b[i] * b[3]
        channels.append(int(round((pa + (pb - pa) * t) / alpha)))
    return channels[0], channels[1], channels[2], int(round(alpha))


def gradient_color_at(stops: Sequence[Tuple[float, RGBA]], t: float) -> RGBA:
    """Color of a multi-stop gradient at position ``t`` in [0, 1].

    Interpolation happens on premultiplied values, so a stop fading to
    transparent keeps the hue of its neighbour instead of darkening.
    """
    if t <= stops[0][0]:
        return stops[0][1]
    for (p0, c0), (p1, c1) in zip(stops, stops[1:]):
        if t <= p1:
            span = p1 - p0
            return _premultiplied_lerp(c0, c1, (t - p0) / span if span else 1.0)
    return stops[-1][1]


class CanvasSurface:
    def __init__(self, width: int = CANVAS_SIZE, height: int = CANVAS_SIZE):
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), TRANSPARENT)

    def _layer(self) -> Image.Image:
        return Image.new("RGBA", (self.width, self.height), TRANSPARENT)

    def _composite(self, layer: Image.Image, shadow: Optional[Shadow] = None) -> None:
        if shadow is not None:
            self.image.alpha_composite(_shadow_of(layer, shadow))
        self.image.alpha_composite(layer)

    def clear(self) -> None:
        self.image.paste(TRANSPARENT, (0, 0, self.width, self.height))

    def fill_rect(self, box: Box, color: RGBA) -> None:
        x, y, w, h = box
        layer = self._layer()
        ImageDraw.Draw(layer).rectangle((x, y, x + w - 1, y + h - 1), fill=color)
        self._composite(layer)

    def fill_linear_gradient(self, box: Box, stops: Sequence[Tuple[float, RGBA]]) -> None:
        """Fill ``box`` with a left-to-right gradient spanning its width."""
        self._composite(self._gradient_layer(box, stops))

    def _gradient_layer(self, box: Box, stops: Sequence[Tuple[float, RGBA]]) -> Image.Image:
        x, y, w, h = box
        strip = Image.new("RGBA", (w, 1), TRANSPARENT)
        strip.putdata([gradient_color_at(stops, (i + 0.5) / w) for i in range(w)])
        layer = self._layer()
        layer.paste(strip.resize((w, h), Image.Resampling.NEAREST), (x, y))
        return layer

    def measure(self, text: str, font: FontType) -> float:
        return float(font.getlength(text)) if text else 0.0

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        font: FontType,
        fill: RGBA,
        *,
        align: str = "center",
        shadow: Optional[Shadow] = None,
    ) -> None:
        """Draw ``text`` with its top edge at ``y``.

        ``align="center"`` centers the text on ``x``; ``"left"`` starts at ``x``.
        """
        if not text:
            return
        left = x - self.measure(text, font) / 2 if align == "center" else x
        layer = self._layer()
        ImageDraw.Draw(layer).text((round(left), round(y)), text, font=font, fill=fill)
        self._composite(layer, shadow)

    def blit(self, image: Image.Image, box: Box, *, shadow: Optional[Shadow] = None) -> None:
        x, y, w, h = box
        src = image.convert("RGBA")
        if src.size != (w, h):
            src = src.resize((w, h), Image.Resampling.LANCZOS)
        layer = self._layer()
        layer.paste(src, (x, y))
        self._composite(layer, shadow)

    def fill_rounded_rect(self, box: Box, radius: int, color: RGBA) -> None:
        x, y, w, h = box
        layer = self._layer()
        ImageDraw.Draw(layer).rounded_rectangle((x, y, x + w - 1, y + h - 1), radius=radius, fill=color)
        self._composite(layer)

    def snapshot(self) -> Image.Image:
        return self.image.copy()

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


def _shadow_of(layer: Image.Image, shadow: Shadow) -> Image.Image:
    # HTML canvas shadowBlur is roughly twice the gaussian standard deviation.
    alpha = layer.getchannel("A")
    if shadow.color[3] < 255:
        alpha = alpha.point(lambda p: p * shadow.color[3] // 255)
    tinted = Image.new("RGBA", layer.size, shadow.color[:3] + (0,))
    tinted.putalpha(alpha)
    moved = Image.new("RGBA", layer.size, TRANSPARENT)
    moved.paste(tinted, (shadow.offset_x, shadow.offset_y))
    if shadow.blur > 0:
        moved = moved.filter(ImageFilter.GaussianBlur(shadow.blur / 2))
    return moved
