# models/__init__.py
from .base import Base
from .donation import Donation, Community, PaymentMode
from .receipt_sequence import ReceiptSequence
from .admin_user import AdminUser

__all__ = [
     "Base",
     "Donation",
     "Community",
     "PaymentMode",
     "ReceiptSequence",
     "AdminUser",
]
