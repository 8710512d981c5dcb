# services/receipt_service.py
"""
Receipt Sequence Allocator - sequential receipt numbers per calendar year.

The counter is advanced with a single UPDATE ... SET n = n + 1 statement,
so the row lock taken by the database serializes concurrent callers for
the same year until their transaction ends. The first allocation of a year
inserts the counter row inside a savepoint; if a concurrent request wins
that insert, the unique constraint on year rejects ours and the increment
is retried against the row the other request created.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import ReceiptSequence
from services.errors import translate_storage_errors

logger = logging.getLogger(__name__)

FIRST_RECEIPT_NUMBER = 1


def _increment(db: Session, year: int) -> bool:
     result = db.execute(
          update(ReceiptSequence)
          .where(ReceiptSequence.year == year)
          .values(last_receipt_number=ReceiptSequence.last_receipt_number + 1)
          .execution_options(synchronize_session=False)
     )
     return result.rowcount > 0


@translate_storage_errors
def next_receipt_number(db: Session, year: int) -> str:
     """
     Allocate the next receipt number for the given year.

     Returns "1" for the first allocation of a year, then "2", "3", ...
     The caller's transaction must be committed for the number to stick.
     """
     if not _increment(db, year):
          try:
               with db.begin_nested():
                    db.add(ReceiptSequence(year=year, last_receipt_number=FIRST_RECEIPT_NUMBER))
               logger.info("Started receipt sequence for %s", year)
               return str(FIRST_RECEIPT_NUMBER)
          except IntegrityError:
               logger.info("Receipt sequence for %s created concurrently, retrying increment", year)
               if not _increment(db, year):
                    raise

     value = db.execute(
          select(ReceiptSequence.last_receipt_number).where(ReceiptSequence.year == year)
     ).scalar_one()
     return str(value)


@translate_storage_errors
def current_receipt_sequence(db: Session, year: int) -> Optional[ReceiptSequence]:
     """The counter row for the year, or None before the first allocation."""
     return db.query(ReceiptSequence).filter(ReceiptSequence.year == year).first()
