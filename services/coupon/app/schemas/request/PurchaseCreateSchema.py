from pydantic import BaseModel, EmailStr, Field


class PurchaseCreateSchema(BaseModel):
    """Purchase creation request"""
    customerName: str = Field(..., description="Customer name", min_length=2)
    email: EmailStr = Field(..., description="Customer email")
    phone: str | None = Field(None, description="Customer phone number", pattern=r"^\+?[1-9]\d{1,14}$")
    productId: int = Field(..., description="Purchased product ID")
    totalAmount: float = Field(..., description="Order total", ge=0)
    serialNumber: str | None = Field(None, description="Product serial number")

    class Config:
        from_attributes = True
