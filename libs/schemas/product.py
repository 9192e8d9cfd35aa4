from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    Product sold to customers. Its category drives the default discount rule.
    """

    productId: int = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name")
    description: str | None = Field(None, description="Product description")
    category: str = Field(..., description="Product category (e.g. Printers)")
    price: float = Field(..., description="Unit price")
    isActive: bool = Field(True, description="Whether the product is listed")

    class Config:
        from_attributes = True
