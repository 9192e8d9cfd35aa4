"""
Outbound capabilities of the coupon service: OTP code sources and customer
notifications (SMS, email).
"""
import logging
import secrets
from typing import Protocol

from libs.common import format_amount, mask_phone
from libs.schemas import Coupon, DiscountType, PurchaseOrder

logger = logging.getLogger(__name__)


class CodeSourcePort(Protocol):
    def next_code(self) -> str: ...


class FixedCodeSource(CodeSourcePort):
    """Always returns the same code. Used outside production and in demo mode."""

    DEMO_CODE = "123456"

    def __init__(self, code: str = DEMO_CODE):
        self.code = code

    def next_code(self) -> str:
        return self.code


class RandomCodeSource(CodeSourcePort):
    """Uniform 6 digit code in 100000..999999."""

    def next_code(self) -> str:
        return str(100_000 + secrets.randbelow(900_000))


class NotifierPort(Protocol):
    async def send_sms(self, phone: str, message: str) -> None: ...

    async def send_coupon_email(
        self,
        email: str,
        customer_name: str,
        coupon: Coupon,
        purchase_order: PurchaseOrder,
    ) -> None: ...


def build_coupon_email_subject(coupon: Coupon) -> str:
    if coupon.discountType == DiscountType.PERCENTAGE:
        saving = f"{format_amount(coupon.discountValue)}%"
    else:
        saving = f"${format_amount(coupon.discountValue)}"
    return f"Your Coupon is Ready! Save {saving}"


class LoggingNotifier(NotifierPort):
    """
    Notifier that only writes what it would send to the log.
    Real SMS/email delivery is not wired into this service.
    """

    async def send_sms(self, phone: str, message: str) -> None:
        logger.info("[SMS] to=%s message=%s", mask_phone(phone), message)

    async def send_coupon_email(
        self,
        email: str,
        customer_name: str,
        coupon: Coupon,
        purchase_order: PurchaseOrder,
    ) -> None:
        logger.info(
            "[EMAIL] to=%s name=%s subject=%r coupon=%s order=%s",
            email,
            customer_name,
            build_coupon_email_subject(coupon),
            coupon.code,
            purchase_order.orderNumber,
        )
