# models/receipt_sequence.py
"""
ReceiptSequence model - last receipt number issued for each calendar year.

Rows are never deleted by normal operation so numbering never restarts
within a year; only a full data reset clears them.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime

from .base import Base


class ReceiptSequence(Base):
     __tablename__ = "receipt_sequences"

     id = Column(Integer, primary_key=True, autoincrement=True)
     year = Column(Integer, nullable=False, unique=True)
     last_receipt_number = Column(Integer, nullable=False, default=0)
     updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

     def __repr__(self):
          return f"<ReceiptSequence(year={self.year}, last_receipt_number={self.last_receipt_number})>"
