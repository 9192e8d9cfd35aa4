from fastapi import APIRouter, Depends, HTTPException, Query, status

from libs.schemas import Coupon

from services.coupon.app.api.errors import to_http_exception
from services.coupon.app.core.CouponService import CouponService
from services.coupon.app.core.errors import CouponError
from services.coupon.app.dependencies import get_coupon_service
from services.coupon.app.schemas.request import CouponApplySchema
from services.coupon.app.schemas.response import CouponApplyResponse, CouponValidateResponse

# customer facing coupon router
router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.get("/validate/{code}", response_model=CouponValidateResponse)
async def validate_coupon(
    code: str,
    orderValue: float | None = Query(None, ge=0, description="Order value to check the minimum against"),
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Checks whether a coupon can be used and previews its discount.

    **Path Parameters:**
    - `code`: coupon code (case-insensitive)

    **Query Parameters:**
    - `orderValue`: order value (optional)

    **Response:**
    - HTTP 200 OK: coupon, discount (0 without orderValue) and orderValue
    - HTTP 400 Bad Request: coupon not usable `{"code": "ERR-IVD-VALUE", "message": ...}`
    """
    validation = await coupon_service.validate_coupon(code, orderValue)
    if not validation.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "ERR-IVD-VALUE", "message": validation.error},
        )

    discount = 0.0
    if orderValue is not None:
        discount = coupon_service.calculate_discount(validation.coupon, orderValue)

    return CouponValidateResponse(coupon=validation.coupon, discount=discount, orderValue=orderValue)


@router.post("/apply", response_model=CouponApplyResponse)
async def apply_coupon(
    payload: CouponApplySchema,
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Redeems a coupon against an order and records the usage.

    **Response:**
    - HTTP 200 OK: updated coupon, discount and final amount
    - HTTP 400 Bad Request: coupon not usable `{"code": "ERR-IVD-VALUE", "message": ...}`
    """
    try:
        result = await coupon_service.apply_coupon(
            code=payload.code,
            user_id=payload.userId,
            order_value=payload.orderValue,
        )
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    return CouponApplyResponse(
        coupon=result.coupon,
        discount=result.discount,
        orderValue=result.order_value,
        finalAmount=result.final_amount,
    )


@router.get("/{code}", response_model=Coupon)
async def get_coupon(
    code: str,
    coupon_service: CouponService = Depends(get_coupon_service),
):
    """
    Coupon details with product, purchase order and usage history.

    **Response:**
    - HTTP 200 OK: coupon
    - HTTP 404 Not Found: unknown code `{"code": "ERR-NOT-FOUND"}`
    """
    try:
        return await coupon_service.get_coupon(code)
    except CouponError as exc:
        raise to_http_exception(exc) from exc
