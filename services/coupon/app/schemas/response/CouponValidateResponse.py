from pydantic import BaseModel, Field

from libs.schemas import Coupon


class CouponValidateResponse(BaseModel):
    """Coupon validation result"""
    coupon: Coupon = Field(..., description="Validated coupon")
    discount: float = Field(..., description="Discount for orderValue (0 when not given)")
    orderValue: float | None = Field(None, description="Order value used for the check")

    class Config:
        from_attributes = True


class CouponApplyResponse(BaseModel):
    """Coupon redemption result"""
    coupon: Coupon = Field(..., description="Coupon after redemption")
    discount: float = Field(..., description="Discount applied")
    orderValue: float = Field(..., description="Order value")
    finalAmount: float = Field(..., description="Order value minus discount")

    class Config:
        from_attributes = True
