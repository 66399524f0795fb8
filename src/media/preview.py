"""Live preview of an artwork that re-renders as the form changes.

Each call to ``update`` starts a new render generation. Logo and icon loads
are submitted to the asset loader as futures tagged with that generation;
when a future resolves after a newer ``update`` its image is dropped, so a
superseded request can never paint over the current one.
"""
import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image

from src.media.asset_loader import AssetLoader
from src.media.canvas import CanvasSurface
from src.media.compositor import RenderAssets, draw_corner_icons, draw_footer_logo, render
from src.shared.config import get_settings
from src.shared.logging_utils import info as log_info
from src.specs.common.datetime_utils import epoch_ms, utc_now
from src.specs.common.enums import MissionType
from src.specs.models.artwork import ArtworkRequest

DownloadHandler = Callable[[str, bytes], None]

LOGO = "logo"
ICON = "icon"


def download_filename(company_name: str, now: Optional[datetime] = None) -> str:
    return f"arte-{company_name or 'design'}-{epoch_ms(now or utc_now())}.png"


class PreviewSession:
    def __init__(
        self,
        loader: AssetLoader,
        on_download: DownloadHandler,
        *,
        icon_reference: Optional[str] = None,
        surface: Optional[CanvasSurface] = None,
    ):
        self.loader = loader
        self.on_download = on_download
        self.icon_reference = icon_reference or get_settings().icon_path
        self.surface = surface or CanvasSurface()
        self.request: Optional[ArtworkRequest] = None
        self._generation = 0
        self._pending: List[Future] = []
        self._cache: Dict[str, Image.Image] = {}
        self._lock = threading.RLock()
        self._settled = threading.Condition(self._lock)
        self._inflight = 0

    @property
    def generation(self) -> int:
        return self._generation

    def update(self, request: ArtworkRequest) -> int:
        """Re-render for ``request`` and start loading any missing images."""
        with self._lock:
            self._generation += 1
            generation = self._generation
            for fut in self._pending:
                fut.cancel()
            self._pending = []
            self.request = request

            wanted: List[Tuple[str, str]] = []
            if request.mission_type == MissionType.FOLLOW_INSTAGRAM:
                wanted.append((ICON, self.icon_reference))
            if request.logo_path:
                wanted.append((LOGO, request.logo_path))

            assets = RenderAssets(
                logo=self._cache.get(request.logo_path) if request.logo_path else None,
                icon=self._cache.get(self.icon_reference) if request.mission_type == MissionType.FOLLOW_INSTAGRAM else None,
            )
            render(self.surface, request, assets)
            missing = [(kind, ref) for kind, ref in wanted if ref not in self._cache]

        for kind, ref in missing:
            fut = self.loader.load_async(ref)
            with self._lock:
                self._inflight += 1
                if generation == self._generation:
                    self._pending.append(fut)
            fut.add_done_callback(
                lambda f, kind=kind, ref=ref: self._on_loaded(generation, kind, ref, f)
            )
        return generation

    def _on_loaded(self, generation: int, kind: str, reference: str, fut: Future) -> None:
        try:
            self._apply(generation, kind, reference, fut)
        finally:
            with self._settled:
                self._inflight -= 1
                self._settled.notify_all()

    def _apply(self, generation: int, kind: str, reference: str, fut: Future) -> None:
        if fut.cancelled():
            return
        image = fut.result()
        if image is None:
            return
        with self._lock:
            self._cache[reference] = image
            if generation != self._generation:
                log_info(None, "preview:stale_asset_dropped", kind=kind, generation=generation, current=self._generation)
                return
            if kind == ICON:
                draw_corner_icons(self.surface, image)
            else:
                draw_footer_logo(self.surface, image)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted load has been applied or dropped."""
        with self._settled:
            return self._settled.wait_for(lambda: self._inflight == 0, timeout=timeout)

    def snapshot(self) -> Image.Image:
        with self._lock:
            return self.surface.snapshot()

    def download(self, now: Optional[datetime] = None) -> str:
        """Encode the current frame and hand it to the injected download handler."""
        with self._lock:
            if self.request is None:
                raise RuntimeError("nothing rendered yet")
            filename = download_filename(self.request.company_name, now)
            png = self.surface.to_png()
        self.on_download(filename, png)
        return filename
