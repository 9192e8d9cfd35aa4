from datetime import timedelta
from functools import lru_cache

from redis.asyncio import Redis

from services.coupon.app.core.CouponService import CouponService
from services.coupon.app.core.IssuanceService import IssuanceService
from services.coupon.app.core.Notifier import (
    CodeSourcePort,
    FixedCodeSource,
    LoggingNotifier,
    NotifierPort,
    RandomCodeSource,
)
from services.coupon.app.core.OtpSessionStore import InMemoryOtpSessionStore, OtpSessionStorePort
from services.coupon.app.core.PurchaseService import PurchaseService
from services.coupon.app.db.connection import settings
from services.coupon.app.db.repositories.coupons import SQLAlchemyCouponRepository
from services.coupon.app.db.repositories.purchases import SQLAlchemyPurchaseRepository
from services.coupon.app.db.stores.otp import RedisOtpSessionStore


@lru_cache
def get_coupon_repository() -> SQLAlchemyCouponRepository:
    """Coupon repository dependency"""
    return SQLAlchemyCouponRepository()


@lru_cache
def get_purchase_repository() -> SQLAlchemyPurchaseRepository:
    """Purchase order / product repository dependency"""
    return SQLAlchemyPurchaseRepository()


@lru_cache
def get_otp_session_store() -> OtpSessionStorePort:
    if settings.OTP_STORE_BACKEND.lower() == "redis":
        return RedisOtpSessionStore(
            redis_factory=lambda: Redis.from_url(settings.REDIS_URL, decode_responses=True),
        )
    return InMemoryOtpSessionStore()


@lru_cache
def get_code_source() -> CodeSourcePort:
    if settings.use_fixed_otp:
        return FixedCodeSource()
    return RandomCodeSource()


@lru_cache
def get_notifier() -> NotifierPort:
    return LoggingNotifier()


@lru_cache
def get_coupon_service() -> CouponService:
    """Coupon service dependency"""
    return CouponService(
        coupon_repository=get_coupon_repository(),
        purchase_repository=get_purchase_repository(),
    )


@lru_cache
def get_issuance_service() -> IssuanceService:
    return IssuanceService(
        invoice_lookup=get_purchase_repository(),
        coupon_lookup=get_coupon_repository(),
        coupon_service=get_coupon_service(),
        session_store=get_otp_session_store(),
        code_source=get_code_source(),
        notifier=get_notifier(),
        otp_ttl=timedelta(seconds=settings.OTP_TTL_SECONDS),
        expose_code=settings.use_fixed_otp,
    )


@lru_cache
def get_purchase_service() -> PurchaseService:
    return PurchaseService(
        purchase_repository=get_purchase_repository(),
        coupon_service=get_coupon_service(),
        notifier=get_notifier(),
        demo_mode=settings.DEMO_MODE,
    )
