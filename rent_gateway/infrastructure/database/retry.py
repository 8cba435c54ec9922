"""Bounded retry with exponential backoff for store writes"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

from sqlalchemy.exc import OperationalError

from rent_gateway.config import settings
from rent_gateway.infrastructure.observability.metrics import write_retry_counter

T = TypeVar("T")


def run_with_retry(
    operation: Callable[[], T],
    name: str,
    max_attempts: int | None = None,
    backoff_base: float | None = None,
    retry_on: Tuple[Type[BaseException], ...] = (OperationalError,),
    on_retry: Callable[[], None] | None = None,
) -> T:
    """
    Run a write, retrying transient failures.

    Retry strategy:
    - Exponential backoff: base, 2*base, 4*base ... (base * 2^(attempt-1))
    - Only exceptions in retry_on are retried; anything else propagates at once
    - on_retry runs before each new attempt (e.g. session rollback)

    Raises:
        The last exception once max_attempts is exhausted
    """
    max_attempts = max_attempts or settings.write_max_retries
    backoff_base = settings.write_backoff_base if backoff_base is None else backoff_base

    attempt = 0
    while True:
        try:
            return operation()
        except retry_on as e:
            attempt += 1
            write_retry_counter.labels(operation=name).inc()

            if attempt >= max_attempts:
                raise

            logging.warning(
                f"Transient store error on {name}, retrying: {e}",
                extra={"operation": name, "attempt": attempt},
            )
            if on_retry is not None:
                on_retry()

            time.sleep(backoff_base * (2 ** (attempt - 1)))
