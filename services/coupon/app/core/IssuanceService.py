import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from weakref import WeakValueDictionary

from libs.common import Clock, mask_phone, now_utc
from libs.schemas import Coupon, DiscountType, PurchaseOrder
from services.coupon.app.core.CouponService import CouponService, CouponSpec
from services.coupon.app.core.errors import (
    AlreadyIssuedError,
    InvalidSessionError,
    NotFoundError,
    NotificationFailedError,
    OtpExpiredError,
    OtpMismatchError,
)
from services.coupon.app.core.Notifier import CodeSourcePort, NotifierPort
from services.coupon.app.core.OtpSessionStore import OtpSession, OtpSessionStorePort

logger = logging.getLogger(__name__)

ISSUED_DISCOUNT_PERCENT = 15
ISSUED_EXPIRY_DAYS = 30


class InvoiceLookupPort(Protocol):
    async def find_purchase_order_by_number(self, order_number: str) -> PurchaseOrder | None: ...


class ActiveCouponLookupPort(Protocol):
    async def find_active_coupon_for_order(self, purchase_order_id: int) -> Coupon | None: ...


@dataclass
class OtpRequestResult:
    session_id: str
    expires_at: datetime
    expires_in: int
    notification_sent: bool
    dev_code: str | None = None


@dataclass
class IssuanceResult:
    coupon: Coupon
    created: bool
    phone: str
    invoice_number: str


class IssuanceService:
    """
    Manual coupon issuance for an invoice, gated by an SMS one-time code.
    """

    def __init__(
        self,
        invoice_lookup: InvoiceLookupPort,
        coupon_lookup: ActiveCouponLookupPort,
        coupon_service: CouponService,
        session_store: OtpSessionStorePort,
        code_source: CodeSourcePort,
        notifier: NotifierPort,
        otp_ttl: timedelta = timedelta(minutes=5),
        expose_code: bool = False,
        clock: Clock = now_utc,
    ):
        """
        Args:
            expose_code: echo the OTP in request results (non-production wiring only)
        """
        self.invoice_lookup = invoice_lookup
        self.coupon_lookup = coupon_lookup
        self.coupon_service = coupon_service
        self.session_store = session_store
        self.code_source = code_source
        self.notifier = notifier
        self.otp_ttl = otp_ttl
        self.expose_code = expose_code
        self._clock = clock
        # one lock per invoice while a coupon is being issued for it
        self._issue_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    async def get_invoice(self, invoice_number: str) -> PurchaseOrder:
        purchase_order = await self.invoice_lookup.find_purchase_order_by_number(invoice_number.strip())
        if purchase_order is None:
            raise NotFoundError("Invoice not found")
        return purchase_order

    async def request_otp(self, phone: str, invoice_number: str) -> OtpRequestResult:
        """
        Starts a verification session for an invoice and sends the code by SMS.

        Raises:
            NotFoundError: unknown invoice
            AlreadyIssuedError: the invoice already has an ACTIVE coupon
        """
        purchase_order = await self.get_invoice(invoice_number)

        existing = await self.coupon_lookup.find_active_coupon_for_order(purchase_order.purchaseOrderId)
        if existing is not None:
            raise AlreadyIssuedError(
                "A coupon has already been generated for this invoice",
                existing_code=existing.code,
            )

        now = self._clock()
        code = self.code_source.next_code()
        session = OtpSession(
            session_id=self._build_session_id(phone, now),
            code=code,
            phone=phone,
            invoice_number=purchase_order.orderNumber,
            expires_at=now + self.otp_ttl,
        )
        await self.session_store.put(session)

        sent = await self._send_code(
            phone,
            f"Your coupon verification code is: {code}. Valid for {self._ttl_minutes()} minutes.",
        )
        logger.info(
            "OTP session opened for invoice %s (%s)",
            purchase_order.orderNumber,
            mask_phone(phone),
        )
        return self._request_result(session, sent)

    async def resend_otp(self, session_id: str) -> OtpRequestResult:
        """
        Replaces the session's code and restarts its expiry window.

        Raises:
            InvalidSessionError: unknown (or already swept) session
        """
        session = await self.session_store.get(session_id)
        if session is None:
            raise InvalidSessionError("Invalid session. Please start over.")

        session.code = self.code_source.next_code()
        session.expires_at = self._clock() + self.otp_ttl
        await self.session_store.put(session)

        sent = await self._send_code(
            session.phone,
            f"Your new coupon verification code is: {session.code}. "
            f"Valid for {self._ttl_minutes()} minutes.",
        )
        return self._request_result(session, sent)

    async def verify_and_generate(self, session_id: str, submitted_code: str) -> IssuanceResult:
        """
        Verifies the one-time code and issues the invoice's coupon.

        Raises:
            InvalidSessionError: unknown session
            OtpExpiredError: the session expired (it is removed)
            OtpMismatchError: wrong code (the session stays usable)
            NotFoundError: the invoice disappeared in the meantime
        """
        session = await self.session_store.get(session_id)
        if session is None:
            raise InvalidSessionError("Invalid or expired session")

        if session.is_expired(self._clock()):
            await self.session_store.delete(session_id)
            raise OtpExpiredError("OTP has expired. Please request a new one.")

        if session.code != submitted_code:
            raise OtpMismatchError("Invalid OTP")

        await self.session_store.delete(session_id)

        async with self._issue_lock(session.invoice_number):
            purchase_order = await self.get_invoice(session.invoice_number)

            # another request may have issued a coupon since the OTP was requested
            existing = await self.coupon_lookup.find_active_coupon_for_order(purchase_order.purchaseOrderId)
            if existing is not None:
                return IssuanceResult(
                    coupon=existing,
                    created=False,
                    phone=session.phone,
                    invoice_number=session.invoice_number,
                )

            coupon = await self.coupon_service.create_coupon(
                CouponSpec(
                    discount_type=DiscountType.PERCENTAGE,
                    discount_value=ISSUED_DISCOUNT_PERCENT,
                    expiry_days=ISSUED_EXPIRY_DAYS,
                    usage_limit=1,
                    product_id=purchase_order.productId,
                    purchase_order_id=purchase_order.purchaseOrderId,
                )
            )

        logger.info("Coupon generated for invoice %s: %s", session.invoice_number, coupon.code)
        return IssuanceResult(
            coupon=coupon,
            created=True,
            phone=session.phone,
            invoice_number=session.invoice_number,
        )

    async def sweep_expired_sessions(self) -> int:
        return await self.session_store.sweep(self._clock())

    def _issue_lock(self, invoice_number: str) -> asyncio.Lock:
        """
        Serializes the check-then-create of coupons per invoice within this
        process. The lock lives while any request holds or awaits it.
        """
        lock = self._issue_locks.get(invoice_number)
        if lock is None:
            lock = asyncio.Lock()
            self._issue_locks[invoice_number] = lock
        return lock

    async def _send_code(self, phone: str, message: str) -> bool:
        try:
            await self.notifier.send_sms(phone, message)
        except NotificationFailedError as exc:
            logger.warning("OTP SMS to %s failed: %s", mask_phone(phone), exc.message)
            return False
        return True

    def _request_result(self, session: OtpSession, notification_sent: bool) -> OtpRequestResult:
        return OtpRequestResult(
            session_id=session.session_id,
            expires_at=session.expires_at,
            expires_in=int(self.otp_ttl.total_seconds()),
            notification_sent=notification_sent,
            dev_code=session.code if self.expose_code else None,
        )

    def _ttl_minutes(self) -> int:
        return max(int(self.otp_ttl.total_seconds() // 60), 1)

    @staticmethod
    def _build_session_id(phone: str, requested_at: datetime) -> str:
        digits = re.sub(r"\s", "", phone)
        return f"{digits}-{int(requested_at.timestamp() * 1000)}"
