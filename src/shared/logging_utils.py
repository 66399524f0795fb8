import logging
from typing import Any, Dict, Optional


_LOGGER = logging.getLogger("artgen")


def log(level: int, trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    """Log ``message`` with ``dimensions`` under ``custom_dimensions``.

    ``trace_id`` is the artwork id (or None for requests without one) and is
    recorded as ``traceId``.
    """
    dims: Dict[str, Any] = {"traceId": trace_id} if trace_id else {}
    dims.update(dimensions)
    _LOGGER.log(level, message, extra={"custom_dimensions": dims})


def info(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, trace_id, message, **dimensions)


def warning(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, trace_id, message, **dimensions)


def error(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, trace_id, message, **dimensions)
