import io
import secrets
import string
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from src.shared.config import get_settings
from src.specs.common.datetime_utils import epoch_ms, utc_now
from src.specs.common.errors import LogoRejectedError

PNG_MIMETYPE = "image/png"
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class NormalizedLogo:
    data: bytes
    file_name: str
    original_width: int
    original_height: int

    @property
    def dimensions(self) -> str:
        return f"{self.original_width}x{self.original_height}"


def logo_file_name() -> str:
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"logo-{epoch_ms(utc_now())}-{suffix}.png"


def contain(image: Image.Image, target: int) -> Image.Image:
    """Scale ``image`` to fit a ``target`` square, centered on transparency."""
    src = image.convert("RGBA")
    scale = min(target / src.width, target / src.height)
    size = (max(1, round(src.width * scale)), max(1, round(src.height * scale)))
    resized = src.resize(size, Image.Resampling.LANCZOS)
    canvas = Image.new("RGBA", (target, target), (0, 0, 0, 0))
    canvas.paste(resized, ((target - size[0]) // 2, (target - size[1]) // 2))
    return canvas


def normalize_logo(data: bytes, mimetype: Optional[str]) -> NormalizedLogo:
    """Validate an uploaded logo and re-encode it as a square PNG.

    Raises LogoRejectedError for non-PNG uploads, files over the size limit,
    undecodable bytes and images smaller than the minimum edge.
    """
    settings = get_settings()
    if not data:
        raise LogoRejectedError("No file uploaded")
    if (mimetype or "").split(";")[0].strip().lower() != PNG_MIMETYPE:
        raise LogoRejectedError("Only PNG files are allowed", details={"mimetype": mimetype})
    if len(data) > settings.max_logo_bytes:
        raise LogoRejectedError(
            "File too large",
            status_code=413,
            details={"size": len(data), "limit": settings.max_logo_bytes},
        )
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise LogoRejectedError("Invalid image file", details={"error": str(exc)}) from exc
    if image.format != "PNG":
        raise LogoRejectedError("Only PNG files are allowed", details={"format": image.format})

    width, height = image.size
    if width < settings.min_logo_size or height < settings.min_logo_size:
        raise LogoRejectedError(
            f"Image must be at least {settings.min_logo_size}x{settings.min_logo_size} pixels",
            details={"dimensions": f"{width}x{height}"},
        )

    buf = io.BytesIO()
    contain(image, settings.logo_target_size).save(buf, format="PNG")
    return NormalizedLogo(
        data=buf.getvalue(),
        file_name=logo_file_name(),
        original_width=width,
        original_height=height,
    )
