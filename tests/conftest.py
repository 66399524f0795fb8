"""
Test configuration for the art generator.

Points the uploads directory at a per-test temp folder and provides image
and HTTP request factories.
"""

import io
import json
from typing import Any, Callable, Dict, Optional, Tuple

import azure.functions as func
import pytest
from PIL import Image

from src.function_blueprints.artworks_blueprint import default_loader
from src.shared.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Fresh settings per test with uploads written under tmp_path."""
    uploads = tmp_path / "uploads"
    monkeypatch.setenv("UPLOADS_DIR", str(uploads))
    get_settings.cache_clear()
    default_loader.cache_clear()
    yield uploads
    get_settings.cache_clear()
    default_loader.cache_clear()


@pytest.fixture
def uploads_dir(isolated_settings):
    return isolated_settings


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Encode a solid-color image as PNG bytes."""

    def _make(size: Tuple[int, int] = (600, 600), color: Tuple[int, ...] = (255, 0, 0, 255), fmt: str = "PNG") -> bytes:
        mode = "RGBA" if fmt == "PNG" else "RGB"
        img = Image.new(mode, size, color[: len(mode)])
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def make_request() -> Callable[..., func.HttpRequest]:
    """Build an azure.functions.HttpRequest for handler tests."""

    def _make(
        method: str = "GET",
        url: str = "/api/artworks",
        *,
        json_body: Optional[Any] = None,
        body: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        route_params: Optional[Dict[str, str]] = None,
    ) -> func.HttpRequest:
        hdrs = dict(headers or {})
        if json_body is not None:
            body = json.dumps(json_body).encode("utf-8")
            hdrs.setdefault("Content-Type", "application/json")
        return func.HttpRequest(
            method=method,
            url=url,
            headers=hdrs,
            params=params or {},
            route_params=route_params or {},
            body=body,
        )

    return _make


@pytest.fixture
def form_payload() -> Dict[str, Any]:
    return {
        "companyName": "NIKE",
        "primaryColor": "#22C55E",
        "missionType": "follow-instagram",
    }
