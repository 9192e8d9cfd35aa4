"""
Coupon business logic: creation, validation, discount calculation and redemption
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from fastapi_pagination import Page

from libs.common import Clock, format_amount, now_utc
from libs.schemas import Coupon, CouponStatus, DiscountType, Product, PurchaseOrder
from services.coupon.app.core.CouponCodeGenerator import CouponCodeGenerator, normalize_code
from services.coupon.app.core.DiscountRules import rules_for_category
from services.coupon.app.core.errors import NotFoundError, ValidationFailedError
from services.coupon.app.db.repositories.coupons import NewCoupon
from services.coupon.app.schemas.response import CouponAnalyticsResponse, CouponStatistics

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 30
AFTER_PURCHASE_EXPIRY_DAYS = 90


class CouponRepositoryPort(Protocol):
    """Coupon repository interface"""

    async def code_exists(self, code: str) -> bool: ...

    async def find_coupon_by_code(self, code: str, with_details: bool = False) -> Coupon | None: ...

    async def find_coupon_by_id(self, coupon_id: int) -> Coupon | None: ...

    async def find_active_coupon_for_order(self, purchase_order_id: int) -> Coupon | None: ...

    async def create_coupon(self, new_coupon: NewCoupon) -> Coupon: ...

    async def update_coupon_status(self, coupon_id: int, status: CouponStatus) -> Coupon | None: ...

    async def record_usage(
        self,
        coupon_id: int,
        user_id: str,
        order_value: float,
        discount: float,
        used_at: datetime,
    ) -> Coupon | None: ...

    async def count_coupons(self, status: CouponStatus | None = None) -> int: ...

    async def count_lapsed_coupons(self, now: datetime) -> int: ...

    async def count_usages(self) -> int: ...

    async def list_coupons(
        self,
        page: int,
        size: int,
        status: CouponStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Coupon], int]: ...

    async def recent_coupons(self, limit: int = 5) -> list[Coupon]: ...


class PurchaseOrderLookupPort(Protocol):
    async def find_purchase_order_by_id(self, purchase_order_id: int) -> PurchaseOrder | None: ...

    async def find_product_by_id(self, product_id: int) -> Product | None: ...


@dataclass
class CouponSpec:
    discount_type: DiscountType
    discount_value: float
    minimum_order_value: float | None = None
    max_discount_amount: float | None = None
    expiry_days: int = DEFAULT_EXPIRY_DAYS
    usage_limit: int = 1
    product_id: int | None = None
    purchase_order_id: int | None = None


@dataclass
class CouponValidation:
    is_valid: bool
    coupon: Coupon | None = None
    error: str | None = None


@dataclass
class CouponApplication:
    coupon: Coupon
    discount: float
    order_value: float

    @property
    def final_amount(self) -> float:
        return self.order_value - self.discount


def calculate_discount(coupon: Coupon, order_value: float) -> float:
    """
    Discount amount for an order.

    Percentage coupons are capped at maxDiscountAmount when one is set. Fixed
    amount coupons return their value even when it exceeds the order value.
    No rounding is applied.
    """
    if coupon.discountType == DiscountType.PERCENTAGE:
        discount = order_value * coupon.discountValue / 100
        if coupon.maxDiscountAmount is not None:
            return min(discount, coupon.maxDiscountAmount)
        return discount
    return coupon.discountValue


def _minimum_order_message(minimum: float) -> str:
    return f"Minimum order value of ${format_amount(minimum)} required"


class CouponService:
    """Coupon service"""

    USABLE_STATUS_UPDATES = (CouponStatus.ACTIVE, CouponStatus.CANCELLED)

    def __init__(
        self,
        coupon_repository: CouponRepositoryPort,
        purchase_repository: PurchaseOrderLookupPort,
        code_generator: CouponCodeGenerator | None = None,
        clock: Clock = now_utc,
    ):
        self.coupon_repository = coupon_repository
        self.purchase_repository = purchase_repository
        self.code_generator = code_generator or CouponCodeGenerator(coupon_repository.code_exists)
        self._clock = clock

    async def create_coupon(self, spec: CouponSpec) -> Coupon:
        """
        Creates a coupon with a fresh unique code.

        Args:
            spec: discount parameters, validity and links

        Returns:
            stored coupon with its product / purchase order attached

        Raises:
            NotFoundError: the linked product does not exist
            GenerationExhaustedError: no unique code could be drawn
        """
        if spec.product_id is not None:
            product = await self.purchase_repository.find_product_by_id(spec.product_id)
            if product is None:
                raise NotFoundError("Product not found")

        code = await self.code_generator.generate_unique_code()
        now = self._clock()

        coupon = await self.coupon_repository.create_coupon(
            NewCoupon(
                code=code,
                discount_type=spec.discount_type,
                discount_value=spec.discount_value,
                minimum_order_value=spec.minimum_order_value,
                max_discount_amount=spec.max_discount_amount,
                expires_at=now + timedelta(days=spec.expiry_days),
                usage_limit=spec.usage_limit,
                product_id=spec.product_id,
                purchase_order_id=spec.purchase_order_id,
                created_at=now,
            )
        )
        logger.info("Created coupon %s (%s %s)", coupon.code, spec.discount_type.value, spec.discount_value)
        return coupon

    async def create_coupon_after_purchase(self, purchase_order_id: int) -> Coupon:
        """
        Creates the automatic coupon for a purchase using the product category rule.

        Raises:
            NotFoundError: the purchase order or its product does not exist
        """
        purchase_order = await self.purchase_repository.find_purchase_order_by_id(purchase_order_id)
        if purchase_order is None or purchase_order.product is None:
            raise NotFoundError("Purchase order not found")

        rule = rules_for_category(purchase_order.product.category, purchase_order.totalAmount)

        return await self.create_coupon(
            CouponSpec(
                discount_type=rule.type,
                discount_value=rule.value,
                minimum_order_value=rule.minimum_order_value,
                max_discount_amount=rule.max_discount_amount,
                expiry_days=AFTER_PURCHASE_EXPIRY_DAYS,
                usage_limit=1,
                product_id=purchase_order.productId,
                purchase_order_id=purchase_order.purchaseOrderId,
            )
        )

    async def validate_coupon(self, code: str, order_value: float | None = None) -> CouponValidation:
        """
        Checks whether a coupon can be used. Read-only; the first failing check wins.
        """
        coupon = await self.coupon_repository.find_coupon_by_code(normalize_code(code))

        if coupon is None:
            return CouponValidation(is_valid=False, error="Coupon not found")

        # a coupon closed by reaching its limit reports the limit below
        exhausted = coupon.status == CouponStatus.USED and coupon.usedCount >= coupon.usageLimit
        if coupon.status != CouponStatus.ACTIVE and not exhausted:
            return CouponValidation(is_valid=False, error="Coupon is not active")

        if not coupon.isActive:
            return CouponValidation(is_valid=False, error="Coupon is disabled")

        if self._clock() > coupon.expiresAt:
            return CouponValidation(is_valid=False, error="Coupon has expired")

        if coupon.usedCount >= coupon.usageLimit:
            return CouponValidation(is_valid=False, error="Coupon usage limit reached")

        if (
            order_value is not None
            and coupon.minimumOrderValue is not None
            and order_value < coupon.minimumOrderValue
        ):
            return CouponValidation(
                is_valid=False,
                error=_minimum_order_message(coupon.minimumOrderValue),
            )

        return CouponValidation(is_valid=True, coupon=coupon)

    @staticmethod
    def calculate_discount(coupon: Coupon, order_value: float) -> float:
        return calculate_discount(coupon, order_value)

    async def apply_coupon(self, code: str, user_id: str, order_value: float) -> CouponApplication:
        """
        Redeems a coupon against an order.

        Raises:
            ValidationFailedError: the coupon is not usable (or its last use was
                taken by a concurrent request)
        """
        validation = await self.validate_coupon(code, order_value)
        if not validation.is_valid:
            raise ValidationFailedError(validation.error)

        coupon = validation.coupon
        discount = calculate_discount(coupon, order_value)

        updated = await self.coupon_repository.record_usage(
            coupon_id=coupon.couponId,
            user_id=user_id,
            order_value=order_value,
            discount=discount,
            used_at=self._clock(),
        )
        if updated is None:
            logger.warning("Coupon %s lost a concurrent redemption race", coupon.code)
            raise ValidationFailedError("Coupon usage limit reached")

        logger.info(
            "Coupon %s applied by %s: order=%s discount=%s (%d/%d)",
            updated.code,
            user_id,
            order_value,
            discount,
            updated.usedCount,
            updated.usageLimit,
        )
        return CouponApplication(coupon=updated, discount=discount, order_value=order_value)

    async def get_coupon(self, code: str) -> Coupon:
        """
        Coupon details including product, purchase order and usage history.

        Raises:
            NotFoundError: no coupon with this code
        """
        coupon = await self.coupon_repository.find_coupon_by_code(normalize_code(code), with_details=True)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        return coupon

    async def list_coupons(
        self,
        page: int,
        size: int,
        status: CouponStatus | None = None,
        search: str | None = None,
    ) -> Page[Coupon]:
        """
        Admin coupon listing.

        Args:
            page: page number (starts at 1)
            size: page size
            status: optional status filter
            search: optional code / customer name / email search

        Returns:
            paginated coupons, newest first
        """
        items, total = await self.coupon_repository.list_coupons(
            page=page,
            size=size,
            status=status,
            search=search.strip() if search else None,
        )

        # build the fastapi-pagination Page directly
        return Page(
            items=items,
            total=total,
            page=page,
            size=size,
            pages=(total + size - 1) // size if size > 0 else 0,
        )

    async def update_coupon_status(self, coupon_id: int, status: CouponStatus) -> Coupon:
        """
        Admin status change. Only ACTIVE and CANCELLED can be set by hand.

        Raises:
            ValidationFailedError: another status was requested
            NotFoundError: no coupon with this id
        """
        if status not in self.USABLE_STATUS_UPDATES:
            raise ValidationFailedError(f"Coupon status cannot be set to {status.value}")

        coupon = await self.coupon_repository.update_coupon_status(coupon_id, status)
        if coupon is None:
            raise NotFoundError("Coupon not found")

        logger.info("Coupon %s status updated to %s", coupon.code, status.value)
        return coupon

    async def get_analytics(self) -> CouponAnalyticsResponse:
        """
        Coupon counters. ACTIVE coupons past their expiry count as expired.
        """
        total = await self.coupon_repository.count_coupons()
        lapsed = await self.coupon_repository.count_lapsed_coupons(self._clock())
        active = await self.coupon_repository.count_coupons(CouponStatus.ACTIVE) - lapsed
        used = await self.coupon_repository.count_coupons(CouponStatus.USED)
        expired = await self.coupon_repository.count_coupons(CouponStatus.EXPIRED) + lapsed
        total_usage = await self.coupon_repository.count_usages()
        recent = await self.coupon_repository.recent_coupons(limit=5)

        usage_rate = (used / total) * 100 if total > 0 else 0.0

        return CouponAnalyticsResponse(
            statistics=CouponStatistics(
                totalCoupons=total,
                activeCoupons=active,
                usedCoupons=used,
                expiredCoupons=expired,
                totalUsage=total_usage,
                usageRate=round(usage_rate, 2),
            ),
            recentCoupons=recent,
        )
