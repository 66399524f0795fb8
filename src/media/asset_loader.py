import io
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional

import requests
from PIL import Image, UnidentifiedImageError

from src.media.compositor import RenderAssets
from src.media.icons import instagram_glyph
from src.shared.config import BUILTIN_ICON, get_settings
from src.shared.logging_utils import warning as log_warning
from src.shared.retry_utils import retry_with_backoff
from src.shared.upload_store import is_public_path
from src.specs.common.enums import MissionType
from src.specs.models.artwork import ArtworkRequest

UPLOADS_PREFIX = "/uploads/"


class AssetLoader:
    """Resolves image references to decoded Pillow images.

    A reference is one of:
      - ``builtin:instagram`` for the bundled decorative glyph
      - an ``http(s)://`` URL, fetched with ``requests``
      - ``/uploads/<name>``, read from the uploads directory
      - any other filesystem path

    Only ``load`` accepts all of these, and it is meant for the configured
    icon. Logos named by a request go through ``load_upload``, which refuses
    anything outside the uploads directory.

    Failures never propagate: they are logged and resolve to ``None`` so the
    caller leaves the region blank.
    """

    def __init__(
        self,
        *,
        uploads_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
        http_get: Callable[..., requests.Response] = requests.get,
    ):
        settings = get_settings()
        self.uploads_dir = Path(uploads_dir) if uploads_dir is not None else settings.uploads_dir
        self.timeout = timeout if timeout is not None else settings.asset_fetch_timeout
        self._max_workers = max_workers or settings.asset_loader_workers
        self._http_get = http_get
        self._executor: Optional[ThreadPoolExecutor] = None

    def _read_bytes(self, reference: str) -> bytes:
        if reference.startswith(("http://", "https://")):
            def _fetch() -> bytes:
                resp = self._http_get(reference, timeout=self.timeout)
                resp.raise_for_status()
                return resp.content

            return retry_with_backoff(_fetch, exceptions=(requests.RequestException,), label="asset:fetch")
        if reference.startswith(UPLOADS_PREFIX):
            name = reference[len(UPLOADS_PREFIX):]
            return (self.uploads_dir / Path(name).name).read_bytes()
        return Path(reference).read_bytes()

    def load(self, reference: Optional[str]) -> Optional[Image.Image]:
        if not reference:
            return None
        if reference == BUILTIN_ICON:
            return instagram_glyph()
        try:
            data = self._read_bytes(reference)
            img = Image.open(io.BytesIO(data))
            img.load()
            return img.convert("RGBA")
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError, requests.RequestException) as exc:
            log_warning(None, "asset:load_failed", reference=reference, error=str(exc))
            return None

    def load_upload(self, reference: Optional[str]) -> Optional[Image.Image]:
        if not reference:
            return None
        if not is_public_path(reference):
            log_warning(None, "asset:reference_refused", reference=reference)
            return None
        return self.load(reference)

    def load_async(self, reference: Optional[str]) -> "Future[Optional[Image.Image]]":
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="asset-loader")
        return self._executor.submit(self.load, reference)

    def resolve(self, request: ArtworkRequest, icon_reference: Optional[str] = None) -> RenderAssets:
        """Load everything ``request`` needs before rendering, synchronously."""
        icon = None
        if request.mission_type == MissionType.FOLLOW_INSTAGRAM:
            icon = self.load(icon_reference or get_settings().icon_path)
        return RenderAssets(logo=self.load_upload(request.logo_path), icon=icon)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
