"""
===============================================================================
TARJETA CRC — app/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, servicios, adapters) siguiendo DIP.
  - Exponer factories para FastAPI (Depends) y para scripts.
  - Mantener singletons con caching (lru_cache) para recursos compartidos.
  - Centralizar decisiones runtime basadas en Settings (config).

Colaboradores:
  - app.crosscutting.config.get_settings
  - app.domain.repositories.* / app.domain.services.* (puertos)
  - app.infrastructure.* (implementaciones)
  - app.identity.* (JWT, sesiones, blacklist)
  - app.application.usecases.* (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO debe depender de FastAPI (solo expone factories).
  - Los tests pisan estas factories con app.dependency_overrides.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases.auth import ChangePasswordUseCase, LoginUseCase
from .application.usecases.notifications import SendWelcomeEmailUseCase
from .application.usecases.organizations import (
    CreateCompanyUseCase,
    CreateContactUseCase,
    CreatePartnerUseCase,
    DeletePartnerUseCase,
    GetCompanyUseCase,
    GetContactUseCase,
    GetPartnerUseCase,
    ListContactsUseCase,
    ListPartnersUseCase,
    SetContactActiveUseCase,
    SetPartnerActiveUseCase,
    UpdateCompanyUseCase,
    UpdateContactUseCase,
    UpdatePartnerUseCase,
)
from .application.usecases.users import (
    CreateUserUseCase,
    ListUsersUseCase,
    ResetUserPasswordUseCase,
    UpdateUserUseCase,
)
from .application.usecases.verification import (
    IssueVerificationTokenUseCase,
    ResendVerificationEmailUseCase,
    VerifyEmailUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.rate_limit import LoginRateLimiter
from .domain.repositories import (
    ContactRepository,
    OrganizationRepository,
    SessionRepository,
    UserRepository,
    VerificationTokenRepository,
)
from .domain.services import NotificationService, TokenStore
from .identity.jwt_tokens import JwtService
from .identity.sessions import SessionManager
from .identity.token_blacklist import TokenBlacklist
from .infrastructure.repositories import (
    InMemoryContactRepository,
    InMemoryOrganizationRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
    InMemoryVerificationTokenRepository,
    PostgresContactRepository,
    PostgresOrganizationRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
    PostgresVerificationTokenRepository,
)
from .infrastructure.services import (
    NovuNotificationService,
    RecordingNotificationService,
)
from .infrastructure.token_store import build_token_store

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """
    Determina si estamos en entorno de test.

    Regla:
      - app_env ∈ {"test", "testing", "ci"} => se favorecen in-memory adapters.
    """
    env = get_settings().app_env.strip().lower()
    return env in {"test", "testing", "ci"}


# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio de usuarios (in-memory en test; Postgres en runtime)."""
    if _is_test_env():
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache(maxsize=1)
def get_session_repository() -> SessionRepository:
    if _is_test_env():
        return InMemorySessionRepository()
    return PostgresSessionRepository()


@lru_cache(maxsize=1)
def get_verification_token_repository() -> VerificationTokenRepository:
    if _is_test_env():
        return InMemoryVerificationTokenRepository(get_user_repository())
    return PostgresVerificationTokenRepository()


@lru_cache(maxsize=1)
def get_organization_repository() -> OrganizationRepository:
    if _is_test_env():
        return InMemoryOrganizationRepository()
    return PostgresOrganizationRepository()


@lru_cache(maxsize=1)
def get_contact_repository() -> ContactRepository:
    if _is_test_env():
        return InMemoryContactRepository(get_organization_repository())
    return PostgresContactRepository()


# =============================================================================
# Servicios compartidos (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_token_store() -> TokenStore:
    """Store TTL compartido (Redis si está configurado; memoria como fallback)."""
    return build_token_store(get_settings())


@lru_cache(maxsize=1)
def get_token_blacklist() -> TokenBlacklist:
    return TokenBlacklist(get_token_store())


@lru_cache(maxsize=1)
def get_jwt_service() -> JwtService:
    settings = get_settings()
    return JwtService(
        secret=settings.jwt_secret,
        expires_in_minutes=settings.jwt_expires_in_minutes,
        blacklist=get_token_blacklist(),
        user_lookup=get_user_repository().get_user_by_id,
    )


@lru_cache(maxsize=1)
def get_session_manager() -> SessionManager:
    settings = get_settings()
    return SessionManager(
        session_repository=get_session_repository(),
        user_lookup=get_user_repository().get_user_by_id,
        ttl_hours=settings.session_ttl_hours,
    )


@lru_cache(maxsize=1)
def get_login_rate_limiter() -> LoginRateLimiter:
    settings = get_settings()
    return LoginRateLimiter(
        get_token_store(),
        max_attempts=settings.login_rate_limit_attempts,
        window_seconds=settings.login_rate_limit_window_seconds,
    )


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """
    Proveedor de notificaciones.

    - test => RecordingNotificationService (sin red)
    - runtime => Novu (sin API key, cada envío falla con NotificationError)
    """
    if _is_test_env():
        return RecordingNotificationService()
    settings = get_settings()
    return NovuNotificationService(
        api_key=settings.novu_api_key,
        api_url=settings.novu_api_url,
        timeout_seconds=settings.notification_timeout_seconds,
    )


# =============================================================================
# Use cases: auth
# =============================================================================


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase(get_user_repository())


def get_change_password_use_case() -> ChangePasswordUseCase:
    return ChangePasswordUseCase(get_user_repository())


# =============================================================================
# Use cases: verificación de email
# =============================================================================


def get_issue_verification_use_case() -> IssueVerificationTokenUseCase:
    settings = get_settings()
    return IssueVerificationTokenUseCase(
        get_verification_token_repository(),
        get_notification_service(),
        app_url=settings.app_url,
        ttl_hours=settings.verification_token_ttl_hours,
    )


def get_verify_email_use_case() -> VerifyEmailUseCase:
    return VerifyEmailUseCase(get_verification_token_repository())


def get_resend_verification_use_case() -> ResendVerificationEmailUseCase:
    return ResendVerificationEmailUseCase(
        get_user_repository(),
        get_verification_token_repository(),
        get_issue_verification_use_case(),
        max_per_hour=get_settings().verification_resend_max_per_hour,
    )


# =============================================================================
# Use cases: usuarios (admin)
# =============================================================================


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(get_user_repository())


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(get_user_repository(), get_issue_verification_use_case())


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(get_user_repository())


def get_reset_user_password_use_case() -> ResetUserPasswordUseCase:
    return ResetUserPasswordUseCase(get_user_repository(), get_session_manager())


def get_send_welcome_use_case() -> SendWelcomeEmailUseCase:
    return SendWelcomeEmailUseCase(
        get_user_repository(),
        get_notification_service(),
        login_url=get_settings().app_login_url,
    )


# =============================================================================
# Use cases: partners / company
# =============================================================================


def get_list_partners_use_case() -> ListPartnersUseCase:
    return ListPartnersUseCase(get_organization_repository())


def get_get_partner_use_case() -> GetPartnerUseCase:
    return GetPartnerUseCase(get_organization_repository())


def get_create_partner_use_case() -> CreatePartnerUseCase:
    return CreatePartnerUseCase(get_organization_repository())


def get_update_partner_use_case() -> UpdatePartnerUseCase:
    return UpdatePartnerUseCase(get_organization_repository())


def get_set_partner_active_use_case() -> SetPartnerActiveUseCase:
    return SetPartnerActiveUseCase(get_organization_repository())


def get_delete_partner_use_case() -> DeletePartnerUseCase:
    return DeletePartnerUseCase(get_organization_repository())


def get_get_company_use_case() -> GetCompanyUseCase:
    return GetCompanyUseCase(get_organization_repository())


def get_create_company_use_case() -> CreateCompanyUseCase:
    return CreateCompanyUseCase(get_organization_repository())


def get_update_company_use_case() -> UpdateCompanyUseCase:
    return UpdateCompanyUseCase(get_organization_repository())


# =============================================================================
# Use cases: contactos
# =============================================================================


def get_list_contacts_use_case() -> ListContactsUseCase:
    return ListContactsUseCase(get_contact_repository())


def get_get_contact_use_case() -> GetContactUseCase:
    return GetContactUseCase(get_contact_repository())


def get_create_contact_use_case() -> CreateContactUseCase:
    return CreateContactUseCase(
        get_contact_repository(), get_organization_repository(), get_user_repository()
    )


def get_update_contact_use_case() -> UpdateContactUseCase:
    return UpdateContactUseCase(
        get_contact_repository(), get_organization_repository(), get_user_repository()
    )


def get_set_contact_active_use_case() -> SetContactActiveUseCase:
    return SetContactActiveUseCase(get_contact_repository())


# =============================================================================
# Utilidades de test
# =============================================================================

_CACHED_FACTORIES = (
    get_user_repository,
    get_session_repository,
    get_verification_token_repository,
    get_organization_repository,
    get_contact_repository,
    get_token_store,
    get_token_blacklist,
    get_jwt_service,
    get_session_manager,
    get_login_rate_limiter,
    get_notification_service,
)


def reset_container() -> None:
    """Limpia los singletons (tests / cambio de Settings)."""
    for factory in _CACHED_FACTORIES:
        factory.cache_clear()


def uses_database() -> bool:
    """True si los adapters son Postgres (runtime); False con in-memory (test)."""
    return not _is_test_env()
