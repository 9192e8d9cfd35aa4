"""Tests for OTP code sources and how the environment selects them."""

import re
from datetime import timedelta

import pytest

from libs.schemas import Coupon
from services.coupon.app import dependencies
from services.coupon.app.core import Notifier
from services.coupon.app.core.IssuanceService import IssuanceService
from services.coupon.app.core.Notifier import FixedCodeSource, RandomCodeSource, build_coupon_email_subject
from services.coupon.app.db.connection import Settings
from tests.conftest import run

PHONE = "+15551234567"


def _settings(**overrides):
    values = {"ENVIRONMENT": "development", "DEBUG": False, "DEMO_MODE": False}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def wired_settings(monkeypatch):
    """Swaps the settings the dependency providers read and resets their caches."""

    def _apply(**overrides):
        monkeypatch.setattr(dependencies, "settings", _settings(**overrides))
        dependencies.get_code_source.cache_clear()
        dependencies.get_issuance_service.cache_clear()

    yield _apply
    dependencies.get_code_source.cache_clear()
    dependencies.get_issuance_service.cache_clear()


class TestRandomCodeSource:
    def test_six_digits(self):
        source = RandomCodeSource()
        for _ in range(200):
            assert re.fullmatch(r"[1-9]\d{5}", source.next_code())

    def test_range_bounds(self, monkeypatch):
        monkeypatch.setattr(Notifier.secrets, "randbelow", lambda upper: 0)
        assert RandomCodeSource().next_code() == "100000"

        monkeypatch.setattr(Notifier.secrets, "randbelow", lambda upper: upper - 1)
        assert RandomCodeSource().next_code() == "999999"


class TestFixedOtpSetting:
    @pytest.mark.parametrize(
        "environment, demo_mode, expected",
        [
            ("development", False, True),
            ("production", False, False),
            ("prod", False, False),
            ("production", True, True),
        ],
    )
    def test_use_fixed_otp(self, environment, demo_mode, expected):
        assert _settings(ENVIRONMENT=environment, DEMO_MODE=demo_mode).use_fixed_otp is expected


class TestCodeSourceWiring:
    def test_production_uses_random_codes_and_hides_them(self, wired_settings):
        wired_settings(ENVIRONMENT="production")

        assert isinstance(dependencies.get_code_source(), RandomCodeSource)
        assert dependencies.get_issuance_service().expose_code is False

    def test_development_uses_fixed_code(self, wired_settings):
        wired_settings(ENVIRONMENT="development")

        assert dependencies.get_code_source().next_code() == "123456"
        assert dependencies.get_issuance_service().expose_code is True

    def test_demo_mode_in_production_uses_fixed_code(self, wired_settings):
        wired_settings(ENVIRONMENT="production", DEMO_MODE=True)

        assert isinstance(dependencies.get_code_source(), FixedCodeSource)
        assert dependencies.get_issuance_service().expose_code is True

    def test_production_request_does_not_echo_code(
        self, wired_settings, purchase_repository, coupon_repository, coupon_service,
        session_store, notifier, clock, make_product, make_order,
    ):
        wired_settings(ENVIRONMENT="production")
        order = make_order(make_product(), order_number="PAN-7001")
        service = IssuanceService(
            invoice_lookup=purchase_repository,
            coupon_lookup=coupon_repository,
            coupon_service=coupon_service,
            session_store=session_store,
            code_source=dependencies.get_code_source(),
            notifier=notifier,
            otp_ttl=timedelta(minutes=5),
            expose_code=dependencies.settings.use_fixed_otp,
            clock=clock,
        )

        result = run(service.request_otp(PHONE, order.orderNumber))

        sent_code = run(session_store.get(result.session_id)).code
        assert result.dev_code is None
        assert re.fullmatch(r"\d{6}", sent_code)
        assert sent_code in notifier.sms[0][1]


class TestEmailSubject:
    @pytest.mark.parametrize(
        "discount_type, value, subject",
        [
            ("PERCENTAGE", 12.5, "Your Coupon is Ready! Save 12.5%"),
            ("FIXED_AMOUNT", 1500000, "Your Coupon is Ready! Save $1500000"),
            ("FIXED_AMOUNT", 10, "Your Coupon is Ready! Save $10"),
        ],
    )
    def test_subject_shows_stored_value(self, discount_type, value, subject):
        coupon = Coupon(
            couponId=1,
            code="ABCD-EFGH-12",
            discountType=discount_type,
            discountValue=value,
            expiresAt="2025-06-01T00:00:00Z",
        )
        assert build_coupon_email_subject(coupon) == subject
