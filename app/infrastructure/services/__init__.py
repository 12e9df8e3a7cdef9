"""
Infrastructure Services (adapters de proveedores externos).

CRC (Component Card)
--------------------
Component: infrastructure.services (Facade)
Responsibilities:
  - Exportar el adapter de notificaciones (Novu) y su fake.
  - Exportar utilidades de resiliencia (retry).
Collaborators:
  - container (inyecta dependencias)
"""

from .notifications import NovuNotificationService, RecordingNotificationService
from .retry import TRANSIENT_HTTP_CODES, create_retry_decorator, is_transient_error

__all__ = [
    "NovuNotificationService",
    "RecordingNotificationService",
    "create_retry_decorator",
    "is_transient_error",
    "TRANSIENT_HTTP_CODES",
]
