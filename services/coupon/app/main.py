import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common import configure_logging
from services.coupon.app.api.v1.router import router
from services.coupon.app.core.OtpSessionStore import run_session_sweeper
from services.coupon.app.db.connection import settings
from services.coupon.app.db.seed import create_schema, seed_demo_products
from services.coupon.app.db.session import engine
from services.coupon.app.dependencies import get_otp_session_store, get_purchase_repository

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        create_schema(engine)
        await seed_demo_products(get_purchase_repository())

    # periodic cleanup of expired OTP sessions
    sweeper = asyncio.create_task(
        run_session_sweeper(get_otp_session_store(), settings.OTP_SWEEP_INTERVAL_SECONDS)
    )
    logger.info("Coupon service started (environment=%s)", settings.ENVIRONMENT)
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(
    title="Coupon Service",
    description="Purchase-driven coupon issuance and redemption server",
    lifespan=lifespan,
)

# CORS
# ALLOWED_ORIGINS wins when set; otherwise localhost defaults in development
if settings.ALLOWED_ORIGINS:
    allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]
elif settings.is_development:
    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",  # Vite
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8000",
    ]
else:
    # production without ALLOWED_ORIGINS blocks all origins
    allowed_origins = []

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# health check
@app.get("/")
def read_root():
    return {"service": "Coupon Service", "status": "running"}
