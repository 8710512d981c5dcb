# schemas/dashboard.py
from datetime import datetime
from typing import List, Optional

from .base import CamelModel


class PaymentModeShareResponse(CamelModel):
     mode: str
     count: int
     amount: int
     percentage: float


class RecentDonationResponse(CamelModel):
     name: str
     amount: int
     payment_mode: str
     donation_date: Optional[datetime] = None
     created_at: datetime


class DashboardStatsResponse(CamelModel):
     """Dashboard figures for one date window."""
     total_collections: int
     total_donors: int
     total_donations: int
     avg_donation: float
     payment_mode_distribution: List[PaymentModeShareResponse]
     recent_donations: List[RecentDonationResponse]
