from pydantic import BaseModel, Field

from libs.schemas import DiscountType


class CouponCreateSchema(BaseModel):
    """Manual coupon creation request (admin)"""
    discountType: DiscountType = Field(..., description="PERCENTAGE or FIXED_AMOUNT")
    discountValue: float = Field(..., description="Percent or amount", ge=0)
    minimumOrderValue: float | None = Field(None, description="Minimum order value", ge=0)
    maxDiscountAmount: float | None = Field(None, description="Discount cap", ge=0)
    expiryDays: int | None = Field(None, description="Validity in days (default 30)", ge=1)
    usageLimit: int | None = Field(None, description="Maximum redemptions (default 1)", ge=1)
    productId: int | None = Field(None, description="Linked product ID")

    class Config:
        from_attributes = True
