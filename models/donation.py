# models/donation.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func

from .base import Base


class PaymentMode(str, enum.Enum):
     """Accepted payment modes, as stored in the database."""
     CASH = "cash"
     CARD = "card"
     UPI = "upi"
     BANK_TRANSFER = "bank_transfer"
     CHEQUE = "cheque"


class Community(str, enum.Enum):
     """Kulam of the donor. CHOZHAN and PANDIYAN are legacy members."""
     ANY = "any"
     PAYIRAN = "payiran"
     SEMBAN = "semban"
     OTHAALAN = "othaalan"
     AAVAN = "aavan"
     AADAI = "aadai"
     VIZHIYAN = "vizhiyan"
     CHOZHAN = "chozhan"
     PANDIYAN = "pandiyan"


class Donation(Base):
     """
     Donation model - one receipt issued by the temple.

     The phone number identifies the donor; a donor is never stored on
     its own, only aggregated from the donations sharing a phone.
     """
     __tablename__ = "donations"

     id = Column(Integer, primary_key=True, autoincrement=True)
     receipt_no = Column(String(50), nullable=False, unique=True, index=True)

     # Donor
     name = Column(String(100), nullable=False)
     phone = Column(String(10), nullable=False, index=True)
     community = Column(String(20), nullable=False, default=Community.ANY.value)
     location = Column(String(100), nullable=False)
     address = Column(String(255), nullable=True)

     # Donation
     amount = Column(Integer, nullable=False)
     payment_mode = Column(String(20), nullable=False)
     inscription = Column(Boolean, default=False, nullable=False)
     donation_date = Column(DateTime, nullable=True, index=True)

     # Timestamps
     created_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<Donation(id={self.id}, receipt_no='{self.receipt_no}', amount={self.amount})>"

     @property
     def effective_date(self):
          """Donation date when recorded, otherwise the creation time."""
          return self.donation_date or self.created_at
