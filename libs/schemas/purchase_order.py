from datetime import datetime

from pydantic import BaseModel, Field

from libs.schemas.product import Product


class PurchaseOrder(BaseModel):
    """
    Purchase order entity. The order number doubles as the invoice number.
    """

    purchaseOrderId: int = Field(..., description="Purchase order identifier")
    orderNumber: str = Field(..., description="Unique order (invoice) number")
    customerName: str = Field(..., description="Customer name")
    email: str = Field(..., description="Customer email")
    phone: str | None = Field(None, description="Customer phone number")
    totalAmount: float = Field(..., description="Order total")
    serialNumber: str | None = Field(None, description="Product serial number")

    productId: int = Field(..., description="Purchased product ID")
    product: Product | None = Field(None, description="Purchased product")

    createdAt: datetime | None = Field(None, description="Order creation time")

    class Config:
        from_attributes = True
