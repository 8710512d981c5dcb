# schemas/donation.py
"""
Pydantic schemas for Donation API responses.

Incoming donation bodies are deliberately not parsed by pydantic: they go
through the donation validator so that every intake path reports the same
error messages.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import CamelModel


DONATION_EXAMPLE = {
     "receiptNo": "1024",
     "name": "Muthu Kumar",
     "phone": "9876543210",
     "community": "payiran",
     "location": "Karaikudi",
     "address": "12 North Car Street",
     "amount": 5001,
     "paymentMode": "upi",
     "inscription": True,
     "donationDate": "2025-04-14T00:00:00",
}


class DonationResponse(CamelModel):
     """Schema for a stored donation."""
     id: int
     receipt_no: str
     name: str
     phone: str
     community: Optional[str] = None
     location: Optional[str] = None
     address: Optional[str] = None
     amount: int
     payment_mode: str
     inscription: bool
     donation_date: Optional[datetime] = None
     created_at: datetime

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          from_attributes=True,
          json_schema_extra={"example": {"id": 1, **DONATION_EXAMPLE, "createdAt": "2025-04-14T09:30:00"}},
     )


class DonationValidationErrorResponse(CamelModel):
     message: str = "Invalid donation data"
     errors: List[str]


class DuplicateReceiptResponse(CamelModel):
     error: str = "Duplicate receipt number"
     message: str
     receipt_no: str


class ReceiptCheckResponse(CamelModel):
     exists: bool
     receipt_no: str


class ReceiptNumberResponse(CamelModel):
     receipt_number: str


class MessageResponse(CamelModel):
     success: bool = True
     message: str
     deleted: Optional[int] = Field(None, description="Number of donations removed")
