from pydantic import BaseModel, Field

from libs.schemas import Coupon


class CouponStatistics(BaseModel):
    """Coupon counters"""
    totalCoupons: int = Field(..., description="All coupons")
    activeCoupons: int = Field(..., description="ACTIVE coupons not yet expired")
    usedCoupons: int = Field(..., description="USED coupons")
    expiredCoupons: int = Field(..., description="EXPIRED coupons plus ACTIVE ones past their expiry")
    totalUsage: int = Field(..., description="Usage records")
    usageRate: float = Field(..., description="USED / total in percent (2 decimals)")


class CouponAnalyticsResponse(BaseModel):
    """Admin analytics"""
    statistics: CouponStatistics = Field(..., description="Counters")
    recentCoupons: list[Coupon] = Field(default_factory=list, description="Five newest coupons")
