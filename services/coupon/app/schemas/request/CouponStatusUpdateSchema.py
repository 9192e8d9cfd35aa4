from pydantic import BaseModel, Field

from libs.schemas import CouponStatus


class CouponStatusUpdateSchema(BaseModel):
    """Coupon status change request (admin)"""
    status: CouponStatus = Field(..., description="New status (ACTIVE or CANCELLED)")

    class Config:
        from_attributes = True
