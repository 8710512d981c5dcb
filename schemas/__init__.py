# schemas/__init__.py
from .auth import (
     AuthStatusResponse,
     ChangeCredentialsRequest,
     ChangeCredentialsResponse,
     LoginRequest,
     LoginResponse,
)
from .dashboard import (
     DashboardStatsResponse,
     PaymentModeShareResponse,
     RecentDonationResponse,
)
from .donation import (
     DonationResponse,
     DonationValidationErrorResponse,
     DuplicateReceiptResponse,
     MessageResponse,
     ReceiptCheckResponse,
     ReceiptNumberResponse,
)
from .donor import DonorSummaryResponse
from .imports import ImportResponse

__all__ = [
     "AuthStatusResponse",
     "ChangeCredentialsRequest",
     "ChangeCredentialsResponse",
     "LoginRequest",
     "LoginResponse",
     "DashboardStatsResponse",
     "PaymentModeShareResponse",
     "RecentDonationResponse",
     "DonationResponse",
     "DonationValidationErrorResponse",
     "DuplicateReceiptResponse",
     "MessageResponse",
     "ReceiptCheckResponse",
     "ReceiptNumberResponse",
     "DonorSummaryResponse",
     "ImportResponse",
]
