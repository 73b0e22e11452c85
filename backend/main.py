# backend/main.py
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config import settings
from database.session import engine, init_db

# single gateway that mounts every business router under /gateway/*
from gateway.gateway_router import gateway_router
from services.errors import MarketplaceError
from services.outbox_service import get_outbox_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def _redrive_outbox():
    """Deliver emails staged before a restart. Runs in a worker thread."""
    try:
        redriven = get_outbox_service().deliver_pending()
        if redriven:
            logger.info(f"Re-drove {len(redriven)} pending email(s)")
    except Exception as e:
        logger.error(f"Outbox re-drive failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    print("🚀 FastAPI is starting…")

    try:
        init_db()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connected")
    except Exception as e:
        print(f"❌ Database connection failed: {e}")

    if settings.RESEND_API_KEY:
        print("✉️ Email provider configured (Resend)")
    else:
        print("⚠️ RESEND_API_KEY not set - status emails will only be logged")

    # startup does not wait on email delivery
    app.state.outbox_redrive = asyncio.get_running_loop().run_in_executor(None, _redrive_outbox)

    yield
    # Shutdown
    print("🛑 Shutting down…")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Order lifecycle API: status changes, realtime tracking, notifications and messaging",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],        # restrict to the storefront domains in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.get("/health")
    async def health():
        status = {
            "status": "healthy",
            "service": "marketplace-orders-api",
            "version": settings.APP_VERSION,
            "features": ["orders", "notifications", "realtime", "messaging", "company-verification"],
        }

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            status["database"] = "connected"
        except Exception as e:
            status["database"] = f"error: {e.__class__.__name__}"
            status["status"] = "degraded"

        status["email"] = "resend" if settings.RESEND_API_KEY else "log-only"
        return status

    @app.get("/")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "gateway_base": "/api/v1/gateway",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "orders": "/api/v1/gateway/orders/",
                "notifications": "/api/v1/gateway/notifications/",
                "conversations": "/api/v1/gateway/conversations/",
                "companies": "/api/v1/gateway/companies/",
            },
        }

    app.include_router(gateway_router, prefix="/api/v1")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
