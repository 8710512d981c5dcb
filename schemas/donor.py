# schemas/donor.py
from datetime import datetime
from typing import List

from .base import CamelModel
from .donation import DonationResponse


class DonorSummaryResponse(CamelModel):
     """A donor is every donation sharing one phone number."""
     phone: str
     name: str
     location: str
     community: str
     total_amount: int
     donation_count: int
     last_donation: datetime
     donations: List[DonationResponse]
