from functools import lru_cache

from PIL import Image, ImageDraw

from src.media.canvas import gradient_color_at

# Instagram brand gradient, bottom-left to top-right.
_GLYPH_STOPS = (
    (0.0, (254, 218, 117, 255)),
    (0.25, (250, 126, 30, 255)),
    (0.5, (214, 41, 118, 255)),
    (0.75, (150, 47, 191, 255)),
    (1.0, (79, 91, 213, 255)),
)


@lru_cache(maxsize=4)
def instagram_glyph(size: int = 240) -> Image.Image:
    """Camera glyph on the brand gradient, drawn at ``size`` px square."""
    tile = Image.new("RGBA", (size, size))
    pixels = tile.load()
    for y in range(size):
        for x in range(size):
            t = (x + (size - 1 - y)) / (2 * (size - 1))
            pixels[x, y] = gradient_color_at(_GLYPH_STOPS, t)

    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, size - 1, size - 1), radius=size // 4, fill=255)
    glyph = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    glyph.paste(tile, (0, 0), mask)

    draw = ImageDraw.Draw(glyph)
    stroke = max(2, size // 14)
    inset = size // 5
    draw.rounded_rectangle(
        (inset, inset, size - inset, size - inset),
        radius=size // 6,
        outline=(255, 255, 255, 255),
        width=stroke,
    )
    r = size // 7
    c = size // 2
    draw.ellipse((c - r, c - r, c + r, c + r), outline=(255, 255, 255, 255), width=stroke)
    dot = max(2, size // 24)
    dx, dy = size - inset - size // 7, inset + size // 7
    draw.ellipse((dx - dot, dy - dot, dx + dot, dy + dot), fill=(255, 255, 255, 255))
    return glyph
