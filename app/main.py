import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL, RUN_MIGRATIONS
from app.core.logging_config import setup_logging

# ✅ Import All API Routes
from app.api.routes import (
    auth,
    subscriptions,
    analytics,
    currency,
    cancellation,
    billing,
    billing_webhook,
    admin,
    feedback,
    health,
)

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    if RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        run_migrations()
    else:
        from app.db.init_db import init_db
        init_db()
    yield
    logger.info(f"Shutting down {APP_NAME}")


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)

# ✅ CORS: only the configured frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Client-Info", "apikey"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(subscriptions.router)
app.include_router(analytics.router)
app.include_router(currency.router)
app.include_router(cancellation.router)
app.include_router(billing.router)
app.include_router(billing_webhook.router)
app.include_router(admin.router)
app.include_router(feedback.router)
app.include_router(health.router)


# ============================================
# ✅ ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": f"{APP_NAME} running"}
