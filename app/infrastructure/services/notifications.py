"""
============================================================
TARJETA CRC — infrastructure/services/notifications.py
============================================================
Class: NovuNotificationService

Responsibilities:
  - Implementar NotificationService contra la API REST de Novu.
  - Identificar al suscriptor (lazy) antes de cada trigger:
      POST /v1/subscribers  {subscriberId, email, firstName, lastName}
  - Disparar el workflow:
      POST /v1/events/trigger {name, to: {subscriberId}, payload, transactionId}
  - Reintentar errores transitorios (429/5xx/red) con backoff + jitter.
  - Traducir cualquier falla a NotificationError (la capa superior decide
    si se traga o se propaga).

Collaborators:
  - httpx.Client (inyectable: tests usan httpx.MockTransport)
  - infrastructure.services.retry.create_retry_decorator (tenacity)
  - crosscutting.exceptions.NotificationError

Notes:
  - Sin API key el servicio existe pero cada trigger falla con
    NotificationError(not_configured=True).
  - Nunca se loguea el payload (puede contener contraseñas temporales).
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from ...crosscutting.exceptions import NotificationError
from ...crosscutting.logger import logger
from ...identity.users import User
from .retry import create_retry_decorator

SUBSCRIBERS_PATH = "/v1/subscribers"
TRIGGER_PATH = "/v1/events/trigger"


def split_full_name(full_name: str) -> tuple[str, str]:
    """'Ana María López' -> ('Ana', 'María López')."""
    parts = (full_name or "").split()
    if not parts:
        return full_name or "", ""
    return parts[0], " ".join(parts[1:])


class NovuNotificationService:
    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = "https://api.novu.co",
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._client = client or httpx.Client(
            base_url=api_url.rstrip("/"), timeout=timeout_seconds
        )
        retrying = create_retry_decorator(
            max_attempts=max_attempts, base_delay=base_delay, max_delay=max_delay
        )
        self._post = retrying(self._post_once)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    def _post_once(self, path: str, body: Mapping[str, Any]) -> httpx.Response:
        response = self._client.post(
            path,
            json=dict(body),
            headers={"Authorization": f"ApiKey {self._api_key}"},
        )
        response.raise_for_status()
        return response

    def _call(self, path: str, body: Mapping[str, Any], *, step: str) -> None:
        try:
            self._post(path, body)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error(
                "Novu: respuesta de error",
                extra={"step": step, "status_code": status},
            )
            raise NotificationError(
                f"Notification provider returned HTTP {status} ({step})",
                original_error=exc,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Novu: error de red",
                extra={"step": step, "error_type": type(exc).__name__},
            )
            raise NotificationError(
                f"Notification provider unreachable ({step})", original_error=exc
            ) from exc

    # ------------------------------------------------------------------
    # NotificationService
    # ------------------------------------------------------------------
    def identify_subscriber(self, user: User) -> None:
        first_name, last_name = split_full_name(user.full_name)
        self._call(
            SUBSCRIBERS_PATH,
            {
                "subscriberId": str(user.id),
                "email": user.username,
                "firstName": first_name,
                "lastName": last_name,
            },
            step="identify",
        )

    def trigger(
        self,
        workflow_id: str,
        *,
        user: User,
        payload: Mapping[str, Any],
        transaction_id: str | None = None,
    ) -> None:
        if not self.is_configured:
            raise NotificationError(
                "NOVU_API_KEY is not configured", not_configured=True
            )

        self.identify_subscriber(user)

        body: dict[str, Any] = {
            "name": workflow_id,
            "to": {"subscriberId": str(user.id)},
            "payload": dict(payload),
        }
        if transaction_id:
            body["transactionId"] = transaction_id

        self._call(TRIGGER_PATH, body, step="trigger")
        logger.info(
            "Novu: workflow disparado",
            extra={"workflow_id": workflow_id, "user_id": str(user.id)},
        )


class RecordingNotificationService:
    """Fake para tests / dev sin proveedor: guarda los triggers en memoria."""

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self._fail_with = fail_with

    def trigger(
        self,
        workflow_id: str,
        *,
        user: User,
        payload: Mapping[str, Any],
        transaction_id: str | None = None,
    ) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self.sent.append(
            {
                "workflow_id": workflow_id,
                "user_id": user.id,
                "payload": dict(payload),
                "transaction_id": transaction_id,
            }
        )
