import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from src.specs.common.errors import ConfigurationError

BUILTIN_ICON = "builtin:instagram"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer", details={"value": raw}) from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number", details={"value": raw}) from exc


@dataclass(frozen=True)
class Settings:
    uploads_dir: Path
    max_logo_bytes: int
    min_logo_size: int
    logo_target_size: int
    recent_artworks_limit: int
    font_path: Optional[str]
    font_bold_path: Optional[str]
    icon_path: str
    asset_fetch_timeout: float
    asset_loader_workers: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings from the environment once per process.

    Call ``get_settings.cache_clear()`` after changing environment variables.
    """
    return Settings(
        uploads_dir=Path(os.getenv("UPLOADS_DIR", "uploads")),
        max_logo_bytes=_int_env("MAX_LOGO_BYTES", 10 * 1024 * 1024),
        min_logo_size=_int_env("MIN_LOGO_SIZE", 500),
        logo_target_size=_int_env("LOGO_TARGET_SIZE", 500),
        recent_artworks_limit=_int_env("RECENT_ARTWORKS_LIMIT", 8),
        font_path=os.getenv("ARTGEN_FONT_PATH") or None,
        font_bold_path=os.getenv("ARTGEN_FONT_BOLD_PATH") or None,
        icon_path=os.getenv("ARTGEN_ICON_PATH") or BUILTIN_ICON,
        asset_fetch_timeout=_float_env("ASSET_FETCH_TIMEOUT", 15.0),
        asset_loader_workers=_int_env("ASSET_LOADER_WORKERS", 4),
    )
