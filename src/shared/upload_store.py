from pathlib import Path
from typing import Optional

from src.shared.config import get_settings

PUBLIC_PREFIX = "/uploads"


def _uploads_dir(base: Optional[Path] = None) -> Path:
    return Path(base) if base is not None else get_settings().uploads_dir


def is_safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and Path(name).name == name and "\\" not in name


def is_public_path(path: str) -> bool:
    """True for ``/uploads/<name>`` references that stay inside the uploads directory."""
    prefix = PUBLIC_PREFIX + "/"
    return path.startswith(prefix) and is_safe_name(path[len(prefix):])


def save_bytes(*, file_name: str, data: bytes, base: Optional[Path] = None) -> str:
    """Write ``data`` under the uploads directory, return its public path.

    Creates the directory if missing.
    """
    if not is_safe_name(file_name):
        raise ValueError(f"invalid upload name: {file_name!r}")
    directory = _uploads_dir(base)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / file_name).write_bytes(data)
    return f"{PUBLIC_PREFIX}/{file_name}"


def read_bytes(file_name: str, base: Optional[Path] = None) -> Optional[bytes]:
    if not is_safe_name(file_name):
        return None
    path = _uploads_dir(base) / file_name
    if not path.is_file():
        return None
    return path.read_bytes()
