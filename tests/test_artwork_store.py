"""
Tests for the in-memory artwork store.
"""

import pytest

from src.shared.artwork_store import MemArtworkStore
from src.specs.models.artwork import ArtworkFormData


def _form(name: str = "NIKE", **extra) -> ArtworkFormData:
    return ArtworkFormData(companyName=name, primaryColor="#22C55E", missionType="follow-instagram", **extra)


def test_create_assigns_id_and_defaults() -> None:
    store = MemArtworkStore()
    artwork = store.create(_form(logoPath="/uploads/logo.png"))
    assert artwork.id
    assert artwork.generatedImagePath is None
    assert artwork.metadata is None
    assert artwork.logoPath == "/uploads/logo.png"
    assert artwork.templateType.value == "instagram"
    assert store.get(artwork.id) == artwork


def test_get_unknown_returns_none() -> None:
    assert MemArtworkStore().get("missing") is None


def test_recent_is_newest_first_and_limited() -> None:
    store = MemArtworkStore()
    created = [store.create(_form(f"C{i}")) for i in range(5)]
    recent = store.recent(3)
    assert [a.companyName for a in recent] == ["C4", "C3", "C2"]
    assert len(store.recent(10)) == len(created)


def test_update_merges_fields() -> None:
    store = MemArtworkStore()
    artwork = store.create(_form())
    updated = store.update(artwork.id, generatedImagePath="/uploads/generated.png")
    assert updated is not None
    assert updated.generatedImagePath == "/uploads/generated.png"
    assert updated.companyName == "NIKE"
    assert store.get(artwork.id).generatedImagePath == "/uploads/generated.png"


def test_update_unknown_returns_none() -> None:
    assert MemArtworkStore().update("missing", metadata={}) is None


def test_update_rejects_immutable_fields() -> None:
    store = MemArtworkStore()
    artwork = store.create(_form())
    with pytest.raises(ValueError):
        store.update(artwork.id, companyName="OTHER")
