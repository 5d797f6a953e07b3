"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from desktown.core.config import settings
from desktown.core.errors import setup_exception_handlers
from desktown.core.structured_logging import configure_logging
from desktown.db.session import engine

configure_logging(settings.LOG_LEVEL)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from desktown.core.rate_limit import limiter

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="DeskTown API",
    description="Virtual office platform: team workspace, storefront offices and payments",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
# Applies DEFAULT_LIMITS to every route without its own @limiter.limit
app.add_middleware(SlowAPIMiddleware)
setup_exception_handlers(app)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Employee-Token"],
)

# ============================================================================
# Routers
# ============================================================================

from desktown.routers import (
    admin_router,
    auth_router,
    automations_router,
    chat_router,
    emails_router,
    employee_router,
    jobs_router,
    meetings_router,
    notifications_router,
    objects_router,
    offices_router,
    posts_router,
    profiles_router,
    public_router,
    services_router,
    statuses_router,
    storage_router,
    tasks_router,
    tickets_router,
    transactions_router,
    users_router,
    webhooks_router,
)

API_PREFIX = "/api"

# Session auth and the member directory
app.include_router(auth_router, prefix=API_PREFIX, tags=["auth"])
app.include_router(users_router, prefix=API_PREFIX, tags=["users"])
app.include_router(notifications_router, prefix=API_PREFIX, tags=["notifications"])

# Team workspace
app.include_router(tasks_router, prefix=API_PREFIX, tags=["tasks"])
app.include_router(tickets_router, prefix=API_PREFIX, tags=["tickets"])
app.include_router(chat_router, prefix=API_PREFIX, tags=["chat"])
app.include_router(emails_router, prefix=API_PREFIX, tags=["emails"])
app.include_router(meetings_router, prefix=API_PREFIX, tags=["meetings"])
app.include_router(jobs_router, prefix=API_PREFIX, tags=["jobs"])
app.include_router(transactions_router, prefix=API_PREFIX, tags=["transactions"])

# Social
app.include_router(profiles_router, prefix=API_PREFIX, tags=["profiles"])
app.include_router(posts_router, prefix=API_PREFIX, tags=["posts"])
app.include_router(statuses_router, prefix=API_PREFIX, tags=["statuses"])

# Offices, storefront and orders
app.include_router(offices_router, prefix=API_PREFIX, tags=["offices"])
app.include_router(services_router, prefix=API_PREFIX, tags=["services"])
app.include_router(public_router, prefix=API_PREFIX, tags=["public"])

# Automations and inbound webhooks (signature-verified, no session)
app.include_router(automations_router, prefix=API_PREFIX, tags=["automations"])
app.include_router(webhooks_router, prefix=API_PREFIX, tags=["webhooks"])

# Employee portal (bearer token auth)
app.include_router(employee_router, prefix=API_PREFIX, tags=["employee"])

# Admin dashboard
app.include_router(admin_router, prefix=API_PREFIX, tags=["admin"])

# Object storage: uploads under /api, ACL-checked downloads at the root
app.include_router(storage_router, prefix=API_PREFIX, tags=["storage"])
app.include_router(objects_router, tags=["storage"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
