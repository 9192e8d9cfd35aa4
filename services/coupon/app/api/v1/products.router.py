"""
Product catalog API router
"""
from fastapi import APIRouter, Depends, status

from libs.schemas import Product

from services.coupon.app.api.errors import to_http_exception
from services.coupon.app.core.errors import CouponError
from services.coupon.app.core.PurchaseService import PurchaseService
from services.coupon.app.dependencies import get_purchase_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[Product], status_code=status.HTTP_200_OK)
async def get_products(
    purchase_service: PurchaseService = Depends(get_purchase_service),
):
    """
    Lists active products ordered by name.
    """
    return await purchase_service.list_products()


@router.get("/{product_id}", response_model=Product, status_code=status.HTTP_200_OK)
async def get_product(
    product_id: int,
    purchase_service: PurchaseService = Depends(get_purchase_service),
):
    """
    Returns a single product.

    **Response:**
    - HTTP 200 OK: product
    - HTTP 404 Not Found: unknown product `{"code": "ERR-NOT-FOUND"}`
    """
    try:
        return await purchase_service.get_product(product_id)
    except CouponError as exc:
        raise to_http_exception(exc) from exc
