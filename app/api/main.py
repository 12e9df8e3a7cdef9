"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context, body limit, global rate limit)
  - Mount auth routes and admin/driver routes under /api
  - Seed the initial admin and purge expired sessions at startup
  - Expose health check endpoint

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler (credentials for cookie)
  - RequestContextMiddleware: Request ID and logging context
  - auth_routes.router: session / mobile JWT / email verification endpoints
  - interfaces.api.http.router: admin users, notifications, partners, company,
    contacts, driver profile

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated)
  - With in-memory adapters (APP_ENV=test) no DB pool is created

Notes:
  - Middleware order (outermost first): RateLimit → BodyLimit →
    RequestContext → CORS → routes
  - /healthz follows Kubernetes health check convention
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..application.seed_admin import ensure_admin
from ..container import get_session_manager, get_user_repository, uses_database
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.rate_limit import RateLimitMiddleware
from ..infrastructure.db.pool import close_pool, init_pool
from ..interfaces.api.http.router import router
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes pool, seeds admin, purges sessions."""
    settings = get_settings()
    with_database = uses_database()

    # Initialize DB pool (must happen before any repository usage)
    if with_database:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        try:
            ensure_admin(settings, user_repo=get_user_repository())
            purged = get_session_manager().purge_expired()
        except Exception as e:
            logger.error("Startup failed", extra={"error": str(e)})
            raise

        logger.info(
            "Logistics API starting up",
            extra={
                "app_env": settings.app_env,
                "database": with_database,
                "purged_sessions": purged,
                "rate_limit_rps": settings.rate_limit_rps,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        if with_database:
            close_pool()
        logger.info("Logistics API shutting down")


# R: Fallback for tests that don't set env vars
def _get_allowed_origins() -> list[str]:
    try:
        return get_settings().get_allowed_origins_list()
    except Exception:
        return ["http://localhost:5000"]


app = FastAPI(
    title="Logistics Back-Office API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "Web sessions, mobile JWT, email verification"},
        {"name": "driver", "description": "Driver self-service"},
        {"name": "admin-users", "description": "User management (ADMIN)"},
        {"name": "admin-notifications", "description": "Transactional emails (ADMIN)"},
        {"name": "admin-organizations", "description": "Partners and company (ADMIN)"},
        {"name": "admin-contacts", "description": "Organization contacts (ADMIN)"},
    ],
)


def custom_openapi():
    fastapi_app = globals().get("_fastapi_app") or app
    if fastapi_app.openapi_schema:
        return fastapi_app.openapi_schema
    from fastapi.openapi.utils import get_openapi

    openapi_schema = get_openapi(
        title=fastapi_app.title,
        version=fastapi_app.version,
        routes=fastapi_app.routes,
    )
    openapi_schema["components"] = openapi_schema.get("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "SessionCookie": {
            "type": "apiKey",
            "in": "cookie",
            "name": get_settings().session_cookie_name,
            "description": "Server-side web session (httpOnly cookie).",
        },
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Mobile JWT via Authorization: Bearer <token>.",
        },
    }

    dual_security = [{"SessionCookie": []}, {"BearerAuth": []}]
    session_security = [{"SessionCookie": []}]
    public_paths = {
        "/healthz",
        "/api/login",
        "/api/logout",
        "/api/auth/login-mobile",
        "/api/auth/verify-email",
    }
    session_only_paths = {"/api/user", "/api/change-password"}

    for path, methods in openapi_schema.get("paths", {}).items():
        for operation in methods.values():
            if not isinstance(operation, dict):
                continue
            if path in public_paths:
                operation["security"] = []
            elif path in session_only_paths:
                operation["security"] = session_security
            elif path == "/api/auth/logout-mobile":
                operation["security"] = [{"BearerAuth": []}]
            else:
                operation["security"] = dual_security

    fastapi_app.openapi_schema = openapi_schema
    return fastapi_app.openapi_schema


app.openapi = custom_openapi

# R: add_middleware apila: el último agregado es el más externo.
try:
    _cors_allow_credentials = get_settings().cors_allow_credentials
except Exception:
    _cors_allow_credentials = False
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=_cors_allow_credentials,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(BodyLimitMiddleware)

app.include_router(auth_router, prefix="/api")
app.include_router(router, prefix="/api")

register_exception_handlers(app)


@app.get("/healthz")
def healthz(request: Request):
    """
    Health check (DB ping).

    Returns:
        ok: True if the database answers
        db: "connected" or "disconnected"
        request_id: Correlation ID for this request
    """
    db_status = "disconnected"
    try:
        if get_user_repository().ping():
            db_status = "connected"
    except Exception as e:
        logger.warning("Health check: DB unavailable", extra={"error": str(e)})

    return {
        "ok": db_status == "connected",
        "db": db_status,
        "request_id": getattr(request.state, "request_id", None),
    }


# R: Wrap app with rate limit middleware (ASGI-style)
# This MUST be at the very end, after all FastAPI setup
_fastapi_app = app
app = RateLimitMiddleware(_fastapi_app)
