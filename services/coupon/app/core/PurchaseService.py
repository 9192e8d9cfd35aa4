"""
Purchase flow: order creation with automatic coupon, invoice lookup and the product catalog
"""
import logging
import secrets
import string
from dataclasses import dataclass
from typing import Protocol

from libs.common import Clock, now_utc
from libs.schemas import Coupon, Product, PurchaseOrder
from services.coupon.app.core.CouponService import CouponService
from services.coupon.app.core.errors import NotFoundError, NotificationFailedError
from services.coupon.app.core.Notifier import NotifierPort
from services.coupon.app.db.repositories.purchases import NewPurchaseOrder

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "PAN"
_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


class PurchaseRepositoryPort(Protocol):
    async def find_purchase_order_by_id(self, purchase_order_id: int) -> PurchaseOrder | None: ...

    async def find_purchase_order_for_invoice(
        self,
        email: str,
        invoice_number: str | None = None,
        serial_number: str | None = None,
    ) -> PurchaseOrder | None: ...

    async def create_purchase_order(self, new_order: NewPurchaseOrder) -> PurchaseOrder: ...

    async def find_product_by_id(self, product_id: int) -> Product | None: ...

    async def find_first_product(self) -> Product | None: ...

    async def list_products(self, active_only: bool = True) -> list[Product]: ...


@dataclass
class PurchaseResult:
    purchase_order: PurchaseOrder
    coupon: Coupon
    email_sent: bool


class PurchaseService:
    """Purchase service"""

    def __init__(
        self,
        purchase_repository: PurchaseRepositoryPort,
        coupon_service: CouponService,
        notifier: NotifierPort,
        demo_mode: bool = False,
        clock: Clock = now_utc,
    ):
        """
        Args:
            purchase_repository: purchase order / product repository
            coupon_service: creates the automatic coupon
            notifier: sends the coupon email
            demo_mode: unknown products fall back to the first catalog product
            clock: time source
        """
        self.purchase_repository = purchase_repository
        self.coupon_service = coupon_service
        self.notifier = notifier
        self.demo_mode = demo_mode
        self._clock = clock

    async def create_purchase(
        self,
        customer_name: str,
        email: str,
        product_id: int,
        total_amount: float,
        phone: str | None = None,
        serial_number: str | None = None,
    ) -> PurchaseResult:
        """
        Records a purchase, creates its automatic coupon and emails it.

        A failed email is logged and reported through email_sent; the order
        and coupon are kept.

        Raises:
            NotFoundError: the product does not exist (outside demo mode)
        """
        product = await self._resolve_product(product_id)

        now = self._clock()
        purchase_order = await self.purchase_repository.create_purchase_order(
            NewPurchaseOrder(
                order_number=self._build_order_number(now),
                customer_name=customer_name,
                email=email,
                phone=phone,
                total_amount=total_amount,
                product_id=product.productId,
                serial_number=serial_number,
                created_at=now,
            )
        )
        logger.info("Purchase order %s created for %s", purchase_order.orderNumber, email)

        coupon = await self.coupon_service.create_coupon_after_purchase(purchase_order.purchaseOrderId)

        try:
            await self.notifier.send_coupon_email(email, customer_name, coupon, purchase_order)
            email_sent = True
        except NotificationFailedError as exc:
            logger.warning(
                "Coupon email for order %s failed: %s", purchase_order.orderNumber, exc.message
            )
            email_sent = False

        return PurchaseResult(purchase_order=purchase_order, coupon=coupon, email_sent=email_sent)

    async def validate_invoice(
        self,
        email: str,
        invoice_number: str | None = None,
        serial_number: str | None = None,
    ) -> PurchaseOrder:
        """
        Finds the purchase matching an invoice or serial number for an email.

        Raises:
            NotFoundError: no matching purchase
        """
        purchase_order = await self.purchase_repository.find_purchase_order_for_invoice(
            email=email,
            invoice_number=invoice_number,
            serial_number=serial_number,
        )
        if purchase_order is None:
            raise NotFoundError("Purchase not found with provided details")
        return purchase_order

    async def list_products(self) -> list[Product]:
        return await self.purchase_repository.list_products(active_only=True)

    async def get_product(self, product_id: int) -> Product:
        product = await self.purchase_repository.find_product_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def _resolve_product(self, product_id: int) -> Product:
        product = await self.purchase_repository.find_product_by_id(product_id)
        if product is not None:
            return product

        if self.demo_mode:
            fallback = await self.purchase_repository.find_first_product()
            if fallback is not None:
                logger.info("Demo mode: product %s not found, using %s", product_id, fallback.productId)
                return fallback

        raise NotFoundError("Product not found")

    @staticmethod
    def _build_order_number(created_at) -> str:
        suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
        return f"{ORDER_NUMBER_PREFIX}-{int(created_at.timestamp() * 1000)}-{suffix}"
