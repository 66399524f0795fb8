import time
from typing import Callable, Optional, Tuple, TypeVar

from src.shared.logging_utils import warning as log_warning

T = TypeVar("T")


def retry_with_backoff(
    operation: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    exceptions: Tuple[type, ...] = (Exception,),
    label: Optional[str] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Execute `operation` with simple exponential backoff.

    The last exception is re-raised once `attempts` are exhausted.
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except exceptions as exc:  # type: ignore[misc]
            if attempt == attempts:
                raise
            log_warning(None, "retry:attempt_failed", label=label, attempt=attempt, error=str(exc))
            (sleep or time.sleep)(delay)
            delay *= backoff
    raise RuntimeError("retry_with_backoff called with attempts < 1")
