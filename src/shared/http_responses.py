import json
from typing import Any, Optional

import azure.functions as func
from pydantic import BaseModel

from src.specs.common.error_response_spec import ErrorResponse
from src.specs.common.errors import ArtGenError


def json_response(model: BaseModel, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=model.model_dump_json(),
        mimetype="application/json",
        status_code=status_code,
    )


def json_list_response(models: list, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=json.dumps([m.model_dump(mode="json") for m in models]),
        mimetype="application/json",
        status_code=status_code,
    )


def error_response(message: str, status_code: int, code: Optional[str] = None, details: Any = None) -> func.HttpResponse:
    err = ErrorResponse(message=message, code=code, details=details)
    return json_response(err, status_code=status_code)


def error_from_exception(exc: ArtGenError, status_code: int) -> func.HttpResponse:
    return error_response(str(exc), status_code, code=exc.code, details=exc.details or None)
