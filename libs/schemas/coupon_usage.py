from datetime import datetime

from pydantic import BaseModel, Field


class CouponUsage(BaseModel):
    """
    Coupon redemption record. Written once per successful apply, never updated.
    """

    usageId: int = Field(..., description="Usage record identifier")
    couponId: int = Field(..., description="Redeemed coupon ID")
    userId: str = Field(..., description="Customer/user reference")
    orderValue: float = Field(..., description="Order value at redemption")
    discount: float = Field(..., description="Discount applied")
    usedAt: datetime = Field(..., description="Redemption time")

    class Config:
        from_attributes = True
