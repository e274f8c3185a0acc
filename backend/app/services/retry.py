"""
Relecture avec backoff exponentiel, réservée aux échecs DatastoreUnavailable.
Les autres types d'erreur sont renvoyés immédiatement : les rejouer ne changerait rien.
"""

import logging
import time
from typing import Callable, TypeVar

from app.errors import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_unavailable(
    operation: Callable[[], Result[T]],
    attempts: int = 3,
    base_delay: float = 0.1,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[T]:
    result = operation()
    for attempt in range(1, attempts):
        if result.ok or not result.error.retryable:
            return result
        delay = base_delay * (2 ** (attempt - 1))
        logger.warning("Base indisponible (tentative %d/%d), nouvel essai dans %.2fs", attempt, attempts, delay)
        sleep(delay)
        result = operation()
    return result
