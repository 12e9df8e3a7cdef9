"""
Name: Domain Service Interfaces (Ports)

Responsibilities:
  - Define the shared key/value store contract used by the token blacklist and
    the login rate limiter (TokenStore).
  - Define the notification contract used by user provisioning, email
    verification and welcome emails (NotificationService).
  - Keep application code independent from Redis / Novu.

Collaborators:
  - infrastructure.token_store: InMemoryTokenStore, RedisTokenStore
  - infrastructure.services.notifications: NovuNotificationService
  - identity.token_blacklist, crosscutting.rate_limit, application.usecases.*

Constraints:
  - Protocols only, no implementation details.
  - TokenStore TTLs are in whole seconds; expired keys behave as missing.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ..identity.users import User


class TokenStore(Protocol):
    """Shared key/value store with native expiry."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def expire(self, key: str, ttl_seconds: int) -> bool:
        """Reset the TTL of an existing key. False if the key is missing."""
        ...

    def delete(self, key: str) -> None: ...

    def incr(self, key: str, ttl_seconds: int) -> int:
        """Increment a counter; its TTL starts with the first increment."""
        ...

    def ttl(self, key: str) -> Optional[int]:
        """Remaining seconds, or None if the key is missing."""
        ...


class NotificationService(Protocol):
    """Triggers a provider workflow (email templates live in the provider)."""

    def trigger(
        self,
        workflow_id: str,
        *,
        user: User,
        payload: Mapping[str, Any],
        transaction_id: str | None = None,
    ) -> None: ...
