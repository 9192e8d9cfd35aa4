"""
Admin API router (coupon management and analytics)
"""
from fastapi import APIRouter, Depends, Query, status
from fastapi_pagination import Page

from libs.schemas import Coupon, CouponStatus

from services.coupon.app.api.errors import to_http_exception
from services.coupon.app.core.CouponService import DEFAULT_EXPIRY_DAYS, CouponService, CouponSpec
from services.coupon.app.core.errors import CouponError
from services.coupon.app.dependencies import get_coupon_service
from services.coupon.app.schemas.request import CouponCreateSchema, CouponStatusUpdateSchema
from services.coupon.app.schemas.response import CouponAnalyticsResponse

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/coupons", response_model=Page[Coupon])
async def get_coupons(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    status: CouponStatus | None = None,
    search: str | None = None,
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Lists coupons newest first.

    **Query Parameters:**
    - `page`: page number (default 1)
    - `size`: page size (default 10, max 100)
    - `status`: ACTIVE / USED / EXPIRED / CANCELLED (optional)
    - `search`: coupon code, customer name or email (optional)

    **Response format:**
    - `items`: coupons
    - `total`: total count
    - `page`: current page
    - `size`: page size
    - `pages`: page count
    """
    return await coupon_service.list_coupons(page=page, size=size, status=status, search=search)


@router.post("/coupons", response_model=Coupon, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponCreateSchema,
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Creates a manual coupon.

    **Response:**
    - HTTP 201 Created: created coupon
    - HTTP 404 Not Found: unknown productId `{"code": "ERR-NOT-FOUND"}`
    - HTTP 503 Service Unavailable: no unique code could be generated
    """
    try:
        return await coupon_service.create_coupon(
            CouponSpec(
                discount_type=payload.discountType,
                discount_value=payload.discountValue,
                minimum_order_value=payload.minimumOrderValue,
                max_discount_amount=payload.maxDiscountAmount,
                expiry_days=payload.expiryDays or DEFAULT_EXPIRY_DAYS,
                usage_limit=payload.usageLimit or 1,
                product_id=payload.productId,
            )
        )
    except CouponError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/coupons/{coupon_id}/status", response_model=Coupon)
async def update_coupon_status(
    coupon_id: int,
    payload: CouponStatusUpdateSchema,
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Activates or cancels a coupon.

    **Response:**
    - HTTP 200 OK: updated coupon
    - HTTP 400 Bad Request: status other than ACTIVE / CANCELLED
    - HTTP 404 Not Found: unknown coupon
    """
    try:
        return await coupon_service.update_coupon_status(coupon_id, payload.status)
    except CouponError as exc:
        raise to_http_exception(exc) from exc


@router.get("/analytics", response_model=CouponAnalyticsResponse)
async def get_analytics(
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Coupon counters, usage rate and the five newest coupons.
    """
    return await coupon_service.get_analytics()
