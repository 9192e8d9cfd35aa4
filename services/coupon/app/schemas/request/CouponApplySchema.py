from pydantic import BaseModel, Field


class CouponApplySchema(BaseModel):
    """Coupon redemption request"""
    code: str = Field(..., description="Coupon code", min_length=3)
    userId: str = Field(..., description="Customer/user reference", min_length=1)
    orderValue: float = Field(..., description="Order value", ge=0)

    class Config:
        from_attributes = True
