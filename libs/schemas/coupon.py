from datetime import datetime

from pydantic import BaseModel, Field

from libs.schemas.coupon_status import CouponStatus, DiscountType
from libs.schemas.coupon_usage import CouponUsage
from libs.schemas.product import Product
from libs.schemas.purchase_order import PurchaseOrder


class Coupon(BaseModel):
    """
    Coupon entity.

    usedCount never exceeds usageLimit. A coupon whose expiresAt has passed is
    invalid even while its stored status is still ACTIVE.
    """

    couponId: int = Field(..., description="Coupon identifier")
    code: str = Field(..., description="Coupon code (XXXX-XXXX-XX)")

    discountType: DiscountType = Field(..., description="Discount type")
    discountValue: float = Field(..., ge=0, description="Percent or amount")
    minimumOrderValue: float | None = Field(None, description="Minimum order value")
    maxDiscountAmount: float | None = Field(None, description="Discount cap (percentage only)")

    expiresAt: datetime = Field(..., description="Expiry time")
    usageLimit: int = Field(1, ge=1, description="Maximum number of redemptions")
    usedCount: int = Field(0, ge=0, description="Number of redemptions so far")
    status: CouponStatus = Field(CouponStatus.ACTIVE, description="Lifecycle status")
    isActive: bool = Field(True, description="Disabled flag (False = disabled)")

    productId: int | None = Field(None, description="Linked product ID")
    product: Product | None = Field(None, description="Linked product")

    purchaseOrderId: int | None = Field(None, description="Linked purchase order ID")
    purchaseOrder: PurchaseOrder | None = Field(None, description="Linked purchase order")

    usages: list[CouponUsage] = Field(default_factory=list, description="Redemption history")

    createdAt: datetime | None = Field(None, description="Creation time")

    class Config:
        from_attributes = True
