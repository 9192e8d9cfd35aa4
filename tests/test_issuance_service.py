"""Tests for the OTP gated manual coupon issuance flow."""

import asyncio
from datetime import timedelta

import pytest

from libs.schemas import CouponStatus, DiscountType
from services.coupon.app.core.errors import (
    AlreadyIssuedError,
    InvalidSessionError,
    NotFoundError,
    OtpExpiredError,
    OtpMismatchError,
)
from tests.conftest import run

PHONE = "+15551234567"


@pytest.fixture
def order(make_product, make_order):
    return make_order(make_product(), order_number="PAN-2001")


class TestRequestOtp:
    def test_fixed_code_is_sent_and_exposed(self, issuance_service, notifier, session_store, order, clock):
        result = run(issuance_service.request_otp(PHONE, order.orderNumber))

        assert result.dev_code == "123456"
        assert result.expires_in == 300
        assert result.expires_at == clock() + timedelta(minutes=5)
        assert result.notification_sent is True
        assert result.session_id.startswith(f"{PHONE}-")
        assert len(session_store) == 1

        phone, message = notifier.sms[0]
        assert phone == PHONE
        assert "123456" in message

    def test_code_hidden_when_not_exposed(self, issuance_service, order):
        issuance_service.expose_code = False
        result = run(issuance_service.request_otp(PHONE, order.orderNumber))
        assert result.dev_code is None

    def test_unknown_invoice(self, issuance_service):
        with pytest.raises(NotFoundError):
            run(issuance_service.request_otp(PHONE, "PAN-MISSING"))

    def test_sms_failure_keeps_session(self, issuance_service, notifier, session_store, order):
        notifier.fail = True

        result = run(issuance_service.request_otp(PHONE, order.orderNumber))

        assert result.notification_sent is False
        assert run(session_store.get(result.session_id)) is not None

    def test_already_issued(self, issuance_service, order):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))
        issued = run(issuance_service.verify_and_generate(session.session_id, "123456"))

        with pytest.raises(AlreadyIssuedError) as exc_info:
            run(issuance_service.request_otp(PHONE, order.orderNumber))

        assert exc_info.value.existing_code == issued.coupon.code
        assert exc_info.value.code == "ERR-ALREADY-ISSUED"


class TestVerifyAndGenerate:
    def test_issues_one_coupon(self, issuance_service, coupon_repository, session_store, order, clock):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))

        result = run(issuance_service.verify_and_generate(session.session_id, "123456"))

        assert result.created is True
        assert result.phone == PHONE
        assert result.invoice_number == order.orderNumber
        assert result.coupon.discountType == DiscountType.PERCENTAGE
        assert result.coupon.discountValue == 15
        assert result.coupon.usageLimit == 1
        assert result.coupon.status == CouponStatus.ACTIVE
        assert result.coupon.purchaseOrderId == order.purchaseOrderId
        assert result.coupon.expiresAt == clock() + timedelta(days=30)
        assert run(coupon_repository.count_coupons()) == 1
        assert len(session_store) == 0

    def test_session_is_single_use(self, issuance_service, order):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))
        run(issuance_service.verify_and_generate(session.session_id, "123456"))

        with pytest.raises(InvalidSessionError):
            run(issuance_service.verify_and_generate(session.session_id, "123456"))

    def test_expired_session(self, issuance_service, session_store, order, clock):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))
        clock.advance(minutes=5, seconds=1)

        with pytest.raises(OtpExpiredError):
            run(issuance_service.verify_and_generate(session.session_id, "123456"))

        assert len(session_store) == 0

    def test_mismatch_keeps_session(self, issuance_service, session_store, order):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))

        with pytest.raises(OtpMismatchError):
            run(issuance_service.verify_and_generate(session.session_id, "654321"))

        assert run(session_store.get(session.session_id)) is not None
        assert run(issuance_service.verify_and_generate(session.session_id, "123456")).created is True

    def test_unknown_session(self, issuance_service):
        with pytest.raises(InvalidSessionError):
            run(issuance_service.verify_and_generate("nope", "123456"))

    def test_existing_coupon_returned(self, issuance_service, order, clock):
        """Two sessions opened before either was verified yield the same coupon."""
        first = run(issuance_service.request_otp(PHONE, order.orderNumber))
        clock.advance(seconds=1)
        second = run(issuance_service.request_otp(PHONE, order.orderNumber))

        issued = run(issuance_service.verify_and_generate(first.session_id, "123456"))
        again = run(issuance_service.verify_and_generate(second.session_id, "123456"))

        assert again.created is False
        assert again.coupon.couponId == issued.coupon.couponId

    def test_concurrent_verifies_issue_one_coupon(self, issuance_service, coupon_repository, order, clock):
        first = run(issuance_service.request_otp(PHONE, order.orderNumber))
        clock.advance(milliseconds=5)
        second = run(issuance_service.request_otp(PHONE, order.orderNumber))

        async def verify_both():
            return await asyncio.gather(
                issuance_service.verify_and_generate(first.session_id, "123456"),
                issuance_service.verify_and_generate(second.session_id, "123456"),
            )

        results = run(verify_both())

        assert sorted(result.created for result in results) == [False, True]
        assert results[0].coupon.couponId == results[1].coupon.couponId
        assert run(coupon_repository.count_coupons()) == 1


class TestResendAndSweep:
    def test_resend_restarts_expiry(self, issuance_service, notifier, order, clock):
        session = run(issuance_service.request_otp(PHONE, order.orderNumber))
        clock.advance(minutes=4)

        resent = run(issuance_service.resend_otp(session.session_id))
        clock.advance(minutes=4)

        assert resent.session_id == session.session_id
        assert resent.expires_at == session.expires_at + timedelta(minutes=4)
        assert len(notifier.sms) == 2
        assert run(issuance_service.verify_and_generate(session.session_id, "123456")).created is True

    def test_resend_unknown_session(self, issuance_service):
        with pytest.raises(InvalidSessionError) as exc_info:
            run(issuance_service.resend_otp("missing"))
        assert exc_info.value.message == "Invalid session. Please start over."

    def test_sweep_removes_expired_sessions(self, issuance_service, session_store, order, clock):
        run(issuance_service.request_otp(PHONE, order.orderNumber))
        clock.advance(minutes=3)
        run(issuance_service.request_otp("+15557654321", order.orderNumber))
        clock.advance(minutes=2, seconds=30)

        assert run(issuance_service.sweep_expired_sessions()) == 1
        assert len(session_store) == 1
