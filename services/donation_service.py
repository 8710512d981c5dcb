# services/donation_service.py
"""
Donation Service - business logic for recording and querying donations.

Expected failures (invalid fields, duplicate receipt numbers) come back as
a DonationOutcome; missing records come back as None. Every successful
write commits and then drops the cached dashboard figures.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Donation, ReceiptSequence
from services.cache import DashboardCache
from services.dashboard_service import (
     DASHBOARD_CACHE_PREFIX,
     apply_date_window,
     effective_date_column,
     resolve_date_range,
)
from services.errors import translate_storage_errors
from services.validation import (
     IntakePath,
     community_variants,
     ensure_unique_receipt,
     normalize_payment_mode,
     validate_donation,
)

logger = logging.getLogger(__name__)

AMOUNT_RANGES = {
     "0-1000": (0, 1000),
     "1001-5000": (1001, 5000),
     "5001-10000": (5001, 10000),
     "10000+": (10000, None),
}

# Column attribute -> API field name
_API_FIELDS = {
     "receipt_no": "receiptNo",
     "name": "name",
     "phone": "phone",
     "community": "community",
     "location": "location",
     "address": "address",
     "amount": "amount",
     "payment_mode": "paymentMode",
     "inscription": "inscription",
     "donation_date": "donationDate",
}


@dataclass
class DonationOutcome:
     """Result of a create or update request."""
     donation: Optional[Donation] = None
     errors: List[str] = field(default_factory=list)
     duplicate_receipt: Optional[str] = None

     @property
     def ok(self) -> bool:
          return self.donation is not None


@dataclass
class DonationFilters:
     """Filters accepted by the donation list and the CSV export."""
     date_range: Optional[str] = None
     start_date: Optional[str] = None
     end_date: Optional[str] = None
     community: Optional[str] = None
     payment_mode: Optional[str] = None
     amount_range: Optional[str] = None
     phone: Optional[str] = None
     receipt_no: Optional[str] = None


def _invalidate(cache: Optional[DashboardCache]) -> None:
     if cache is not None:
          dropped = cache.invalidate_pattern(DASHBOARD_CACHE_PREFIX)
          logger.debug("Dropped %d cached dashboard entries", dropped)


def insert_donation(db: Session, record: dict) -> Optional[Donation]:
     """
     Insert a validated record inside a savepoint.

     Returns None when the unique constraint on receipt_no rejects it, which
     is how a duplicate that slipped past the pre-check is detected.
     """
     donation = Donation(**record)
     try:
          with db.begin_nested():
               db.add(donation)
     except IntegrityError:
          logger.warning("Receipt number %s rejected by unique constraint", record["receipt_no"])
          return None
     return donation


@translate_storage_errors
def create_donation(
     db: Session,
     raw: dict,
     intake: IntakePath = IntakePath.FORM,
     cache: Optional[DashboardCache] = None,
) -> DonationOutcome:
     """
     Validate a submission and store it.

     1. Field validation (ValidationResult errors -> outcome.errors)
     2. Receipt pre-check against stored donations
     3. Insert; a unique constraint violation is also a duplicate receipt
     """
     result = validate_donation(raw, intake)
     if not result.ok:
          return DonationOutcome(errors=result.errors)

     ensure_unique_receipt(db, result)
     if result.duplicate_receipt is not None:
          return DonationOutcome(duplicate_receipt=result.duplicate_receipt)

     donation = insert_donation(db, result.record)
     if donation is None:
          db.rollback()
          return DonationOutcome(duplicate_receipt=result.record["receipt_no"])

     db.commit()
     _invalidate(cache)
     logger.info("Recorded donation %s (%s) via %s", donation.id, donation.receipt_no, intake.value)
     return DonationOutcome(donation=donation)


def _as_submission(donation: Donation) -> dict:
     return {api: getattr(donation, column) for column, api in _API_FIELDS.items()}


@translate_storage_errors
def update_donation(
     db: Session,
     donation_id: int,
     changes: dict,
     cache: Optional[DashboardCache] = None,
) -> Optional[DonationOutcome]:
     """
     Apply a partial update. The receipt number is immutable; every other
     field goes through the same validation as the donation form.
     Returns None when the donation does not exist.
     """
     donation = get_donation(db, donation_id)
     if donation is None:
          return None

     normalized = {}
     for key, value in changes.items():
          normalized[_API_FIELDS.get(key, key)] = value

     new_receipt = normalized.pop("receiptNo", None)
     if new_receipt is not None and str(new_receipt).strip() != donation.receipt_no:
          return DonationOutcome(errors=["Receipt number cannot be changed"])

     merged = _as_submission(donation)
     merged.update({key: value for key, value in normalized.items() if key in merged})

     result = validate_donation(merged, IntakePath.FORM)
     if not result.ok:
          return DonationOutcome(errors=result.errors)

     for column, value in result.record.items():
          if column != "receipt_no":
               setattr(donation, column, value)
     db.commit()
     _invalidate(cache)
     logger.info("Updated donation %s", donation.id)
     return DonationOutcome(donation=donation)


@translate_storage_errors
def get_donation(db: Session, donation_id: int) -> Optional[Donation]:
     return db.query(Donation).filter(Donation.id == donation_id).first()


@translate_storage_errors
def get_donations_by_phone(db: Session, phone: str) -> List[Donation]:
     return (
          db.query(Donation)
          .filter(Donation.phone == phone)
          .order_by(effective_date_column().desc(), Donation.id.desc())
          .all()
     )


@translate_storage_errors
def receipt_exists(db: Session, receipt_no: str) -> bool:
     return db.query(Donation.id).filter(Donation.receipt_no == receipt_no.strip()).first() is not None


@translate_storage_errors
def list_donations(db: Session, filters: Optional[DonationFilters] = None) -> List[Donation]:
     """
     Donations matching the filters, newest effective date first.

     Raises ValueError for an unknown date range, payment mode or amount range.
     """
     filters = filters or DonationFilters()
     query = db.query(Donation)

     start, end = resolve_date_range(filters.date_range, filters.start_date, filters.end_date)
     if filters.date_range in (None, "", "all") and (filters.start_date or filters.end_date):
          start, end = resolve_date_range("custom", filters.start_date, filters.end_date)
     query = apply_date_window(query, start, end)

     if filters.community and filters.community not in ("any", "all"):
          query = query.filter(Donation.community.in_(community_variants(filters.community)))

     if filters.payment_mode and filters.payment_mode != "all":
          payment_mode = normalize_payment_mode(filters.payment_mode)
          if payment_mode is None:
               raise ValueError(f"Unknown payment mode: {filters.payment_mode}")
          query = query.filter(Donation.payment_mode == payment_mode)

     if filters.amount_range and filters.amount_range != "all":
          if filters.amount_range not in AMOUNT_RANGES:
               raise ValueError(f"Unknown amount range: {filters.amount_range}")
          low, high = AMOUNT_RANGES[filters.amount_range]
          query = query.filter(Donation.amount >= low)
          if high is not None:
               query = query.filter(Donation.amount <= high)

     if filters.phone:
          query = query.filter(Donation.phone == filters.phone.strip())

     if filters.receipt_no:
          query = query.filter(Donation.receipt_no == filters.receipt_no.strip())

     return query.order_by(effective_date_column().desc(), Donation.id.desc()).all()


@translate_storage_errors
def delete_donation(db: Session, donation_id: int, cache: Optional[DashboardCache] = None) -> bool:
     donation = get_donation(db, donation_id)
     if donation is None:
          return False
     db.delete(donation)
     db.commit()
     _invalidate(cache)
     logger.info("Deleted donation %s (%s)", donation_id, donation.receipt_no)
     return True


@translate_storage_errors
def delete_all_donations(db: Session, cache: Optional[DashboardCache] = None) -> int:
     """Remove every donation and reset the receipt sequences."""
     deleted = db.query(Donation).delete(synchronize_session=False)
     db.query(ReceiptSequence).delete(synchronize_session=False)
     db.commit()
     _invalidate(cache)
     logger.warning("Deleted all %d donations and reset receipt sequences", deleted)
     return deleted
