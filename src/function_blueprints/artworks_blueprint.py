import json
from functools import lru_cache
from pathlib import Path
from time import perf_counter
from typing import Optional

import azure.functions as func
from pydantic import ValidationError as PydanticValidationError

from src.media.asset_loader import AssetLoader
from src.media.compositor import render_png
from src.shared import upload_store
from src.shared.artwork_store import MemArtworkStore, artwork_store
from src.shared.config import get_settings
from src.shared.http_responses import error_response, json_list_response, json_response
from src.shared.logging_utils import info as log_info, error as log_error
from src.specs.common.datetime_utils import epoch_ms, utc_now
from src.specs.common.errors import MediaGenerationError, ResourceNotFoundError, ValidationError
from src.specs.models.artwork import ArtworkFormData, ArtworkRequest
from src.specs.models.http import GenerateArtworkResponse

bp = func.Blueprint()


@lru_cache(maxsize=1)
def default_loader() -> AssetLoader:
    return AssetLoader()


def _parse_limit(raw: Optional[str]) -> int:
    try:
        limit = int(raw) if raw is not None else 0
    except ValueError:
        limit = 0
    return limit if limit > 0 else get_settings().recent_artworks_limit


def parse_form(req: func.HttpRequest) -> ArtworkFormData:
    """Validate the JSON body as artwork form data."""
    try:
        data = req.get_json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON body", details={"error": str(exc)}) from exc
    try:
        return ArtworkFormData.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid artwork data", details={"errors": json.loads(exc.json(include_url=False))}) from exc


def handle_create_artwork(req: func.HttpRequest, store: MemArtworkStore = artwork_store) -> func.HttpResponse:
    try:
        form = parse_form(req)
    except ValidationError as exc:
        log_error(None, "artworks:invalid_request", error=str(exc))
        return error_response("Invalid artwork data", 400, code=exc.code, details=exc.details)

    artwork = store.create(form)
    return json_response(artwork)


def handle_recent_artworks(req: func.HttpRequest, store: MemArtworkStore = artwork_store) -> func.HttpResponse:
    limit = _parse_limit(req.params.get("limit"))
    artworks = store.recent(limit)
    log_info(None, "artworks:recent", limit=limit, count=len(artworks))
    return json_list_response(artworks)


def handle_get_artwork(req: func.HttpRequest, store: MemArtworkStore = artwork_store) -> func.HttpResponse:
    artwork_id = req.route_params.get("id") or ""
    artwork = store.get(artwork_id)
    if artwork is None:
        return error_response("Artwork not found", 404, code="RESOURCE_NOT_FOUND")
    return json_response(artwork)


def generate_artwork_image(
    artwork_id: str,
    store: MemArtworkStore,
    loader: AssetLoader,
    uploads_dir: Optional[Path] = None,
) -> str:
    """Render the stored artwork server-side and record the PNG path."""
    artwork = store.get(artwork_id)
    if artwork is None:
        raise ResourceNotFoundError("Artwork", artwork_id)
    request = ArtworkRequest.from_artwork(artwork)
    try:
        png, meta = render_png(request, loader.resolve(request))
        file_name = f"generated-{artwork.id}-{epoch_ms(utc_now())}.png"
        image_path = upload_store.save_bytes(file_name=file_name, data=png, base=uploads_dir)
    except (OSError, ValueError) as exc:
        raise MediaGenerationError("Failed to generate artwork", details={"error": str(exc)}) from exc
    store.update(artwork.id, generatedImagePath=image_path, metadata=meta)
    return image_path


def handle_generate_artwork(
    req: func.HttpRequest,
    store: MemArtworkStore = artwork_store,
    loader: Optional[AssetLoader] = None,
    uploads_dir: Optional[Path] = None,
) -> func.HttpResponse:
    start = perf_counter()
    artwork_id = req.route_params.get("id") or ""
    try:
        image_path = generate_artwork_image(artwork_id, store, loader or default_loader(), uploads_dir)
    except ResourceNotFoundError as exc:
        log_info(artwork_id, "artworks:generate_not_found")
        return error_response("Artwork not found", 404, code=exc.code)
    except MediaGenerationError as exc:
        log_error(artwork_id, "artworks:generate_failed", **exc.details)
        return error_response("Failed to generate artwork", 500, code=exc.code)
    except Exception as exc:
        log_error(artwork_id, "artworks:generate_failed", error=str(exc))
        return error_response("Failed to generate artwork", 500)

    duration_ms = int((perf_counter() - start) * 1000)
    log_info(artwork_id, "artworks:generated", imagePath=image_path, durationMs=duration_ms)
    return json_response(GenerateArtworkResponse(imagePath=image_path, artworkId=artwork_id))


@bp.function_name(name="create_artwork")
@bp.route(route="api/artworks", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def create_artwork(req: func.HttpRequest) -> func.HttpResponse:
    return handle_create_artwork(req)


@bp.function_name(name="recent_artworks")
@bp.route(route="api/artworks/recent", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def recent_artworks(req: func.HttpRequest) -> func.HttpResponse:
    return handle_recent_artworks(req)


@bp.function_name(name="get_artwork")
@bp.route(route="api/artworks/{id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_artwork(req: func.HttpRequest) -> func.HttpResponse:
    return handle_get_artwork(req)


@bp.function_name(name="generate_artwork")
@bp.route(route="api/artworks/{id}/generate", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def generate_artwork(req: func.HttpRequest) -> func.HttpResponse:
    return handle_generate_artwork(req)
