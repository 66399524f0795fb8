"""
Tests for the live preview session.

Image loads are driven by hand through a fake loader so the ordering of
late-arriving images is deterministic.
"""

from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Dict, List, Tuple

import pytest
from PIL import Image

from src.media.compositor import corner_icon_centers, logo_box, wordmark_geometry
from src.media.preview import PreviewSession, download_filename
from src.specs.common.enums import MissionType
from src.specs.models.artwork import ArtworkRequest

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
ICON_REF = "icon-ref"


class ManualLoader:
    """Hands out futures that tests resolve explicitly."""

    def __init__(self) -> None:
        self.futures: Dict[str, List[Future]] = {}

    def load_async(self, reference: str) -> Future:
        fut: Future = Future()
        fut.set_running_or_notify_cancel()
        self.futures.setdefault(reference, []).append(fut)
        return fut

    def resolve(self, reference: str, image, index: int = -1) -> None:
        self.futures[reference][index].set_result(image)


def _request(logo=None, mission=MissionType.FOLLOW_INSTAGRAM, name="NIKE") -> ArtworkRequest:
    return ArtworkRequest(company_name=name, primary_color="#22C55E", mission_type=mission, logo_path=logo)


def _logo_center() -> Tuple[int, int]:
    x, y, w, h = logo_box(1080, 1080)
    return x + w // 2, y + h // 2


@pytest.fixture
def downloads() -> List[Tuple[str, bytes]]:
    return []


@pytest.fixture
def session(downloads):
    loader = ManualLoader()
    return PreviewSession(loader, lambda name, data: downloads.append((name, data)), icon_reference=ICON_REF)


def test_update_renders_immediately_without_images(session) -> None:
    generation = session.update(_request())
    assert generation == 1
    frame = session.snapshot()
    assert frame.size == (1080, 1080)
    assert frame.getpixel(corner_icon_centers(1080, 1080)[0]) != BLUE


def test_loaded_images_are_drawn_for_current_request(session) -> None:
    session.update(_request(logo="/uploads/a.png"))
    session.loader.resolve(ICON_REF, Image.new("RGBA", (120, 120), BLUE))
    session.loader.resolve("/uploads/a.png", Image.new("RGBA", (500, 500), RED))
    assert session.wait(timeout=5)
    frame = session.snapshot()
    assert frame.getpixel(corner_icon_centers(1080, 1080)[1]) == BLUE
    assert frame.getpixel(_logo_center()) == RED


def test_superseded_logo_never_paints_newer_request(session) -> None:
    session.update(_request(logo="/uploads/old.png"))
    session.update(_request(logo=None, mission=MissionType.CHOOSE_PROPLAYER))
    session.loader.resolve("/uploads/old.png", Image.new("RGBA", (500, 500), RED))
    session.loader.resolve(ICON_REF, None)
    assert session.wait(timeout=5)

    frame = session.snapshot()
    assert frame.getpixel(_logo_center()) != RED
    bx, by, _, bh = wordmark_geometry(1080, 1080)["badge"]
    assert frame.getpixel((bx + 2, by + bh // 2)) == (0x22, 0xC5, 0x5E, 255)


def test_late_image_is_cached_for_next_render(session) -> None:
    session.update(_request(logo="/uploads/a.png"))
    session.update(_request(logo="/uploads/a.png", name="ADIDAS"))
    session.loader.resolve("/uploads/a.png", Image.new("RGBA", (500, 500), RED), index=0)
    # first load arrived for the stale generation: dropped, but cached
    session.update(_request(logo="/uploads/a.png", name="PUMA"))
    assert session.snapshot().getpixel(_logo_center()) == RED


def test_failed_load_leaves_region_blank(session) -> None:
    session.update(_request(logo="/uploads/a.png"))
    session.loader.resolve("/uploads/a.png", None)
    session.loader.resolve(ICON_REF, None)
    assert session.wait(timeout=5)
    assert session.snapshot().getpixel(_logo_center()) == (0, 0, 0, 255)


def test_new_update_cancels_pending_loads(session) -> None:
    loader = session.loader
    original = loader.load_async

    def not_started(reference: str) -> Future:
        fut: Future = Future()
        loader.futures.setdefault(reference, []).append(fut)
        return fut

    loader.load_async = not_started
    session.update(_request(logo="/uploads/a.png"))
    loader.load_async = original
    session.update(_request(mission=MissionType.CHOOSE_PROPLAYER))
    assert loader.futures["/uploads/a.png"][0].cancelled()
    assert session.wait(timeout=5)


def test_download_passes_png_to_injected_handler(session, downloads) -> None:
    session.update(_request(name="NIKE"))
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    filename = session.download(now=when)
    assert filename == "arte-NIKE-1704067200000.png"
    assert len(downloads) == 1
    name, data = downloads[0]
    assert name == filename
    assert data.startswith(b"\x89PNG")


def test_download_before_render_is_an_error(session) -> None:
    with pytest.raises(RuntimeError):
        session.download()


def test_download_filename_falls_back_to_design() -> None:
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert download_filename("", when) == "arte-design-1704067200000.png"
