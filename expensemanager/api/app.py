"""FastAPI application for Expense Manager.

Endpoints:
  POST   /api/register                         - Create a pending account
  POST   /api/login                            - Exchange credentials for a bearer token
  POST   /api/logout                           - Revoke the current token
  GET    /api/user                             - Current account
  POST   /api/password-reset-request           - Start a password reset
  POST   /api/password-reset                   - Finish a password reset
  GET    /api/users/pending                    - Accounts awaiting approval
  POST   /api/users/{id}/approve               - Activate an account
  POST   /api/users/{id}/reject                - Reject an account
  GET    /api/permissions                      - Full feature/role matrix
  GET    /api/permissions/me                   - Features granted to the caller
  GET    /api/categories                       - Own categories
  POST   /api/categories                       - Create a category
  PUT    /api/categories/{id}                  - Update a category
  DELETE /api/categories/{id}                  - Delete an unused category
  GET    /api/expenses                         - Own expenses (startDate/endDate)
  GET    /api/expenses/{id}                    - One expense
  POST   /api/expenses                         - Create an expense
  POST   /api/expenses/bulk                    - Create many expenses
  PUT    /api/expenses/{id}                    - Update an expense
  DELETE /api/expenses/{id}                    - Delete an expense
  GET    /api/dashboard/summary                - Totals and top category
  GET    /api/dashboard/category-distribution  - Spend per category
  GET    /api/dashboard/payment-distribution   - Spend per payment method
  GET    /api/dashboard/monthly-trend          - Spend per month
  GET    /api/dashboard/recent-expenses        - Latest expenses
  GET    /api/reports/pdf                      - PDF export
  GET    /api/reports/excel                    - Excel export
  GET    /health                               - Health check
  GET    /metrics                              - Prometheus metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

import expensemanager
from expensemanager.api.rate_limit import limiter
from expensemanager.api.routes import (
    auth as auth_routes,
    categories,
    dashboard,
    expenses,
    permissions,
    reports,
    users,
)
from expensemanager.auth import resolve_principal
from expensemanager.auth_providers.user_account import hash_password
from expensemanager.config import settings
from expensemanager.exceptions import ExpenseManagerError
from expensemanager.logging_config import log_startup_info, setup_logging
from expensemanager.notifications import Notifier
from expensemanager.storage.memory import MemoryStorage

logger = logging.getLogger("expensemanager")
_audit_logger = logging.getLogger("expensemanager.audit")

_STARTUP_TIME: float = 0.0


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    global _STARTUP_TIME
    _STARTUP_TIME = time.monotonic()
    setup_logging()
    if settings.seed_demo_users:
        seeded = await app.state.storage.seed_demo_users(hash_password(settings.demo_password))
        logger.info("Seeded %d demo accounts", len(seeded))
    log_startup_info()
    yield
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# OpenAPI tags
# ---------------------------------------------------------------------------
_OPENAPI_TAGS = [
    {"name": "Health", "description": "Health checks and version info"},
    {"name": "Auth", "description": "Registration, login, logout and password reset"},
    {"name": "Users", "description": "Account approval (administrators)"},
    {"name": "Permissions", "description": "Role/feature permission matrix"},
    {"name": "Categories", "description": "Expense categories"},
    {"name": "Expenses", "description": "Expense recording and retrieval"},
    {"name": "Dashboard", "description": "Spending summaries and trends"},
    {"name": "Reports", "description": "PDF and Excel exports"},
    {"name": "Metrics", "description": "Prometheus metrics endpoint"},
]

app = FastAPI(
    title="Expense Manager",
    description="Expense tracking API with role-based access control and resource ownership.",
    version=expensemanager.__version__,
    lifespan=lifespan,
    dependencies=[Depends(resolve_principal)],
    openapi_tags=_OPENAPI_TAGS,
)

# Shared state must exist before the lifespan runs; test transports skip it.
app.state.limiter = limiter
app.state.storage = MemoryStorage()
app.state.notifier = Notifier()


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.exception_handler(ExpenseManagerError)
async def expense_manager_error_handler(request: Request, exc: ExpenseManagerError) -> JSONResponse:
    """Centralized handler for custom Expense Manager exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_type,
            "message": exc.message,
            "request_id": request_id,
        },
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After header on rate limit."""
    request_id = getattr(request.state, "request_id", "unknown")
    _audit_logger.warning(
        "Rate limit exceeded: %s %s from %s",
        request.method,
        request.url.path,
        get_remote_address(request),
        extra={"event_category": "audit", "action": "rate_limit_exceeded"},
    )
    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": str(exc.detail),
            "request_id": request_id,
        },
    )
    response.headers["Retry-After"] = "60"
    return response


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip compression for responses > 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next) -> Response:
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cache-Control"] = "no-store"
    return response


# Also sets request_id on state for the error handlers.
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    request_id = str(uuid4())[:8]
    request.state.request_id = request_id
    start = time.monotonic()
    response: Response = await call_next(request)
    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    principal = getattr(request.state, "principal", None)
    logger.info(
        "%s %s %s %.1fms [%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_ms": elapsed_ms,
            "user_id": principal.id if principal else None,
        },
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------
_instrumentator = Instrumentator(
    excluded_handlers=["/metrics"],
    should_respect_env_var=False,
)
_instrumentator.instrument(app).expose(app, endpoint="/metrics", tags=["Metrics"])


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health", tags=["Health"], summary="Health check")
@limiter.exempt
async def health():
    uptime_s = time.monotonic() - _STARTUP_TIME if _STARTUP_TIME > 0 else 0
    return {
        "status": "ok",
        "version": expensemanager.__version__,
        "uptime_seconds": round(uptime_s, 1),
    }


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_routes.router)
app.include_router(users.router)
app.include_router(permissions.router)
app.include_router(categories.router)
app.include_router(expenses.router)
app.include_router(dashboard.router)
app.include_router(reports.router)
