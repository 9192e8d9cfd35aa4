"""Shared fixtures: SQLite-backed repositories, a controllable clock and a recording notifier."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from services.coupon.app.core.CouponService import CouponService
from services.coupon.app.core.errors import NotificationFailedError
from services.coupon.app.core.IssuanceService import IssuanceService
from services.coupon.app.core.Notifier import FixedCodeSource
from services.coupon.app.core.OtpSessionStore import InMemoryOtpSessionStore
from services.coupon.app.core.PurchaseService import PurchaseService
from services.coupon.app.db.repositories.coupons import SQLAlchemyCouponRepository
from services.coupon.app.db.repositories.purchases import (
    NewProduct,
    NewPurchaseOrder,
    SQLAlchemyPurchaseRepository,
)
from services.coupon.app.db.tables import metadata

START_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that keeps every message instead of sending it."""

    def __init__(self):
        self.sms = []
        self.emails = []
        self.fail = False

    async def send_sms(self, phone, message):
        if self.fail:
            raise NotificationFailedError("SMS gateway unavailable")
        self.sms.append((phone, message))

    async def send_coupon_email(self, email, customer_name, coupon, purchase_order):
        if self.fail:
            raise NotificationFailedError("SMTP unavailable")
        self.emails.append((email, customer_name, coupon.code, purchase_order.orderNumber))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def coupon_repository(session_factory):
    return SQLAlchemyCouponRepository(session_factory=session_factory)


@pytest.fixture
def purchase_repository(session_factory):
    return SQLAlchemyPurchaseRepository(session_factory=session_factory)


@pytest.fixture
def session_store():
    return InMemoryOtpSessionStore()


@pytest.fixture
def coupon_service(coupon_repository, purchase_repository, clock):
    return CouponService(
        coupon_repository=coupon_repository,
        purchase_repository=purchase_repository,
        clock=clock,
    )


@pytest.fixture
def purchase_service(purchase_repository, coupon_service, notifier, clock):
    return PurchaseService(
        purchase_repository=purchase_repository,
        coupon_service=coupon_service,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def issuance_service(purchase_repository, coupon_repository, coupon_service, session_store, notifier, clock):
    return IssuanceService(
        invoice_lookup=purchase_repository,
        coupon_lookup=coupon_repository,
        coupon_service=coupon_service,
        session_store=session_store,
        code_source=FixedCodeSource(),
        notifier=notifier,
        otp_ttl=timedelta(minutes=5),
        expose_code=True,
        clock=clock,
    )


@pytest.fixture
def make_product(purchase_repository, clock):
    def _make(category="Printers", name="Laser Printer", price=150.0, is_active=True):
        return run(
            purchase_repository.create_product(
                NewProduct(
                    name=name,
                    category=category,
                    price=price,
                    is_active=is_active,
                    created_at=clock(),
                )
            )
        )

    return _make


@pytest.fixture
def make_order(purchase_repository, clock):
    """Stores a purchase order directly, without the automatic coupon."""

    def _make(product, order_number="PAN-1001", total_amount=150.0, phone="+15551234567",
              email="jane@example.com", serial_number=None):
        return run(
            purchase_repository.create_purchase_order(
                NewPurchaseOrder(
                    order_number=order_number,
                    customer_name="Jane Doe",
                    email=email,
                    phone=phone,
                    total_amount=total_amount,
                    product_id=product.productId,
                    serial_number=serial_number,
                    created_at=clock(),
                )
            )
        )

    return _make
