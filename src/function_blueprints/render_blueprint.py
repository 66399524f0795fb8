import re
from typing import Optional
from urllib.parse import quote

import azure.functions as func

from src.function_blueprints.artworks_blueprint import default_loader, parse_form
from src.media.asset_loader import AssetLoader
from src.media.compositor import render_png
from src.media.preview import download_filename
from src.shared.http_responses import error_response
from src.shared.logging_utils import info as log_info
from src.specs.common.errors import ValidationError
from src.specs.models.artwork import ArtworkRequest

bp = func.Blueprint()

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the exact UTF-8 name."""
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def handle_render(req: func.HttpRequest, loader: Optional[AssetLoader] = None) -> func.HttpResponse:
    """Render the posted form as a downloadable PNG without storing a record."""
    try:
        form = parse_form(req)
    except ValidationError as exc:
        log_info(None, "render:invalid_request", error=str(exc))
        return error_response("Invalid artwork data", 400, code=exc.code, details=exc.details)

    request = ArtworkRequest.from_form(form)
    png, meta = render_png(request, (loader or default_loader()).resolve(request))
    filename = download_filename(request.company_name)
    log_info(None, "render:completed", filename=filename, **meta)
    return func.HttpResponse(
        body=png,
        status_code=200,
        mimetype="image/png",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@bp.function_name(name="render_artwork")
@bp.route(route="api/render", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def render_artwork(req: func.HttpRequest) -> func.HttpResponse:
    return handle_render(req)
