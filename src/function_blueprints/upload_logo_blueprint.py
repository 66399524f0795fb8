from pathlib import Path
from typing import Optional, Tuple

import azure.functions as func

from src.media.logo_processing import normalize_logo
from src.shared import upload_store
from src.shared.http_responses import error_from_exception, error_response, json_response
from src.shared.logging_utils import info as log_info, error as log_error
from src.specs.common.errors import LogoRejectedError
from src.specs.models.http import LogoUploadResponse

bp = func.Blueprint()


def _read_upload(req: func.HttpRequest) -> Tuple[bytes, Optional[str]]:
    """Multipart field ``logo`` when present, otherwise the raw request body."""
    upload = req.files.get("logo") if req.files else None
    if upload is not None:
        return upload.read(), upload.mimetype
    return req.get_body() or b"", req.headers.get("Content-Type")


def handle_upload_logo(req: func.HttpRequest, uploads_dir: Optional[Path] = None) -> func.HttpResponse:
    try:
        data, mimetype = _read_upload(req)
        logo = normalize_logo(data, mimetype)
        logo_path = upload_store.save_bytes(file_name=logo.file_name, data=logo.data, base=uploads_dir)
    except LogoRejectedError as exc:
        log_info(None, "upload:rejected", reason=str(exc), **exc.details)
        return error_from_exception(exc, exc.status_code)
    except Exception as exc:
        log_error(None, "upload:failed", error=str(exc))
        return error_response("Failed to upload logo", 500)

    log_info(None, "upload:stored", logoPath=logo_path, dimensions=logo.dimensions)
    resp = LogoUploadResponse(logoPath=logo_path, fileName=logo.file_name, dimensions=logo.dimensions)
    return json_response(resp)


@bp.function_name(name="upload_logo")
@bp.route(route="api/upload-logo", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def upload_logo(req: func.HttpRequest) -> func.HttpResponse:
    return handle_upload_logo(req)


@bp.function_name(name="serve_upload")
@bp.route(route="uploads/{name}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def serve_upload(req: func.HttpRequest) -> func.HttpResponse:
    return handle_serve_upload(req)


def handle_serve_upload(req: func.HttpRequest, uploads_dir: Optional[Path] = None) -> func.HttpResponse:
    name = req.route_params.get("name") or ""
    data = upload_store.read_bytes(name, base=uploads_dir)
    if data is None:
        return error_response("File not found", 404)
    return func.HttpResponse(body=data, mimetype="image/png", status_code=200)
