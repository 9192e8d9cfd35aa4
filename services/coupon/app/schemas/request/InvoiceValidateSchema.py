from pydantic import BaseModel, EmailStr, Field


class InvoiceValidateSchema(BaseModel):
    """Invoice/serial number validation request"""
    invoiceNumber: str | None = Field(None, description="Invoice (order) number")
    serialNumber: str | None = Field(None, description="Product serial number")
    email: EmailStr = Field(..., description="Customer email")

    class Config:
        from_attributes = True
