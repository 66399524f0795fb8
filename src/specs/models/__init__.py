from __future__ import annotations

from .artwork import ArtworkFormData, Artwork, ArtworkRequest
from .http import LogoUploadResponse, GenerateArtworkResponse

__all__ = [
    "ArtworkFormData",
    "Artwork",
    "ArtworkRequest",
    "LogoUploadResponse",
    "GenerateArtworkResponse",
]
