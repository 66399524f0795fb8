import itertools
import threading
import uuid
from typing import Any, Dict, List, Optional

from src.shared.logging_utils import info as log_info
from src.specs.models.artwork import Artwork, ArtworkFormData

_UPDATABLE_FIELDS = {"generatedImagePath", "metadata", "logoPath"}


class MemArtworkStore:
    """Artwork records kept in a process-local dict. Nothing is persisted."""

    def __init__(self) -> None:
        self._artworks: Dict[str, Artwork] = {}
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def create(self, form: ArtworkFormData) -> Artwork:
        artwork = Artwork(
            id=str(uuid.uuid4()),
            companyName=form.companyName,
            primaryColor=form.primaryColor,
            missionType=form.missionType,
            templateType=form.templateType,
            logoPath=form.logoPath,
        )
        with self._lock:
            self._artworks[artwork.id] = artwork
            self._order[artwork.id] = next(self._seq)
        log_info(artwork.id, "artworks:created", missionType=artwork.missionType.value)
        return artwork

    def get(self, artwork_id: str) -> Optional[Artwork]:
        with self._lock:
            return self._artworks.get(artwork_id)

    def recent(self, limit: int = 10) -> List[Artwork]:
        with self._lock:
            items = list(self._artworks.values())
            order = dict(self._order)
        items.sort(key=lambda a: (a.createdAt, order[a.id]), reverse=True)
        return items[: max(limit, 0)]

    def update(self, artwork_id: str, **updates: Any) -> Optional[Artwork]:
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"fields not updatable: {sorted(unknown)}")
        with self._lock:
            existing = self._artworks.get(artwork_id)
            if existing is None:
                return None
            updated = existing.model_copy(update=updates)
            self._artworks[artwork_id] = updated
        log_info(artwork_id, "artworks:updated", fields=sorted(updates))
        return updated


artwork_store = MemArtworkStore()
