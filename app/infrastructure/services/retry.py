"""app.infrastructure.services.retry

Name: Retry Helper con Exponential Backoff + Jitter (llamadas HTTP salientes)

CRC (Component Card)
--------------------
Component: retry helper
Responsibilities:
  - Clasificar errores de httpx: transitorios (reintentar) vs permanentes.
  - Proveer un decorator `tenacity` estándar con backoff exponencial + jitter.
  - Loguear cada reintento con contexto estructurado.
Collaborators:
  - tenacity (motor de retry)
  - httpx (tipos de error de transporte / status)
  - crosscutting.config.get_settings (attempts / delays)
Constraints:
  - Reintentar SOLO 408/429/5xx, timeouts y errores de red.
  - 4xx restantes son fail-fast (credenciales, payload inválido).
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger

T = TypeVar("T")

# R: Status codes que indican fallas transitorias del proveedor.
TRANSIENT_HTTP_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})


def is_transient_error(exception: BaseException) -> bool:
    """R: True si vale la pena reintentar la llamada."""
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in TRANSIENT_HTTP_CODES

    # R: TimeoutException, ConnectError, ReadError, RemoteProtocolError...
    if isinstance(exception, httpx.TransportError):
        return True

    return isinstance(exception, (TimeoutError, ConnectionError))


def _log_retry(retry_state: RetryCallState) -> None:
    fn = getattr(retry_state, "fn", None)
    wait_time = retry_state.next_action.sleep if retry_state.next_action else 0

    exc: Optional[BaseException] = None
    if retry_state.outcome is not None:
        exc = retry_state.outcome.exception()

    logger.warning(
        "Retrying external call",
        extra={
            "function": getattr(fn, "__name__", "unknown"),
            "attempt": retry_state.attempt_number,
            "wait_seconds": round(float(wait_time), 2),
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """R: Decorator `tenacity`; overrides explícitos ganan sobre Settings."""
    settings = get_settings()

    _max_attempts = (
        settings.retry_max_attempts if max_attempts is None else max_attempts
    )
    _base_delay = (
        settings.retry_base_delay_seconds if base_delay is None else float(base_delay)
    )
    _max_delay = (
        settings.retry_max_delay_seconds if max_delay is None else float(max_delay)
    )

    if _max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if _base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if _max_delay <= 0:
        raise ValueError("max_delay must be > 0")

    return retry(
        stop=stop_after_attempt(_max_attempts),
        wait=wait_exponential_jitter(multiplier=_base_delay, max=_max_delay),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_retry,
        reraise=True,
    )
