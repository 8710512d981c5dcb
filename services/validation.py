# services/validation.py
"""
Donation Record Validator.

Turns a raw donation submission into the canonical column values of a
Donation row. The same rules serve three intake paths:

- form:    staff/donor entry through the donation form (strict)
- webhook: Google Form submissions (strict, with defaults for optional fields)
- import:  spreadsheet rows (lenient community, defaults for optional fields)

Validation never raises for bad input; it returns a ValidationResult holding
either the record or the list of reasons it was rejected.
"""
import enum
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, List, Optional, Set

from sqlalchemy.orm import Session

from models import Donation
from models.donation import Community, PaymentMode


class IntakePath(str, enum.Enum):
     """Where a donation submission came from."""
     FORM = "form"
     WEBHOOK = "webhook"
     IMPORT = "import"


# Old spellings still found in historical data, mapped to their canonical member
COMMUNITY_ALIASES = {
     "odhaalan": Community.OTHAALAN.value,
}


PAYMENT_MODE_ALIASES = {
     "cash": PaymentMode.CASH.value,
     "card": PaymentMode.CARD.value,
     "upi": PaymentMode.UPI.value,
     "cheque": PaymentMode.CHEQUE.value,
     "bank_transfer": PaymentMode.BANK_TRANSFER.value,
     "banktransfer": PaymentMode.BANK_TRANSFER.value,
     "bank-transfer": PaymentMode.BANK_TRANSFER.value,
     "bank transfer": PaymentMode.BANK_TRANSFER.value,
}

PHONE_PATTERN = re.compile(r"^\d{10}$")

# donations.amount is a 32-bit INT column
MAX_AMOUNT = 2_147_483_647

_TRUE_WORDS = {"yes", "y", "true", "1", "on"}


@dataclass
class ValidationResult:
     """Outcome of validating one submission."""
     record: Optional[dict] = None
     errors: List[str] = field(default_factory=list)
     duplicate_receipt: Optional[str] = None

     @property
     def ok(self) -> bool:
          return self.record is not None and not self.errors and self.duplicate_receipt is None

     @property
     def reasons(self) -> List[str]:
          """All rejection reasons, the duplicate receipt included."""
          reasons = list(self.errors)
          if self.duplicate_receipt is not None:
               reasons.append(f"Receipt number {self.duplicate_receipt} already exists")
          return reasons


def normalize_community(value: Any) -> Optional[str]:
     """Canonical community value, or None when the value is not recognised."""
     key = _text(value).lower()
     key = COMMUNITY_ALIASES.get(key, key)
     if key in {member.value for member in Community}:
          return key
     return None


def community_variants(value: str) -> List[str]:
     """Every stored spelling that belongs to the given community."""
     canonical = normalize_community(value) or value
     variants = [canonical]
     variants.extend(alias for alias, target in COMMUNITY_ALIASES.items() if target == canonical)
     return variants


def normalize_payment_mode(value: Any) -> Optional[str]:
     """Stored payment mode value, or None when the value is not recognised."""
     return PAYMENT_MODE_ALIASES.get(_text(value).lower())


def validate_donation(raw: dict, intake: IntakePath = IntakePath.FORM) -> ValidationResult:
     """
     Validate and normalize a raw donation submission.

     Accepts camelCase (API/webhook) or snake_case keys. Returns the
     canonical record (no id/created_at) or the list of field errors.
     The duplicate receipt check needs storage and lives in
     ensure_unique_receipt().
     """
     errors: List[str] = []
     lenient = intake == IntakePath.IMPORT

     receipt_no = _text(_field(raw, "receiptNo", "receipt_no"))
     if not receipt_no:
          errors.append("Receipt number is required")

     name = _text(_field(raw, "name"))
     if not name:
          errors.append("Name is required")

     phone = _text(_field(raw, "phone"))
     if intake in (IntakePath.FORM, IntakePath.IMPORT):
          phone = re.sub(r"\D", "", phone)
     if not phone:
          errors.append("Phone number is required")
     elif not PHONE_PATTERN.match(phone):
          errors.append("Phone number must be 10 digits")

     raw_community = _text(_field(raw, "community"))
     community = Community.ANY.value
     if raw_community:
          community = normalize_community(raw_community)
          if community is None:
               if lenient:
                    community = Community.ANY.value
               else:
                    errors.append(f"Invalid community: {raw_community}")

     location = _text(_field(raw, "location"))
     if not location:
          errors.append("Location is required")

     address = _text(_field(raw, "address")) or None

     amount = _coerce_amount(_field(raw, "amount"))
     if amount is None:
          errors.append("Valid amount is required")
     elif amount <= 0:
          errors.append("Amount must be positive")
     elif amount > MAX_AMOUNT:
          errors.append("Amount is too large")
     elif not amount.is_integer():
          errors.append("Amount must be a whole number")

     raw_mode = _text(_field(raw, "paymentMode", "payment_mode"))
     payment_mode = None
     if not raw_mode:
          if intake == IntakePath.FORM:
               errors.append("Payment mode is required")
          else:
               payment_mode = PaymentMode.CASH.value
     else:
          payment_mode = normalize_payment_mode(raw_mode)
          if payment_mode is None:
               errors.append(f"Invalid payment mode: {raw_mode}")

     inscription = _coerce_bool(_field(raw, "inscription"), lenient)

     donation_date, date_ok = _coerce_datetime(_field(raw, "donationDate", "donation_date"))
     if not date_ok:
          errors.append("Invalid donation date")

     if errors:
          return ValidationResult(errors=errors)

     return ValidationResult(record={
          "receipt_no": receipt_no,
          "name": name,
          "phone": phone,
          "community": community,
          "location": location,
          "address": address,
          "amount": int(amount),
          "payment_mode": payment_mode,
          "inscription": inscription,
          "donation_date": donation_date,
     })


def find_duplicate_receipt(db: Session, receipt_no: str) -> Optional[Donation]:
     """The stored donation already holding this receipt number, if any."""
     return db.query(Donation).filter(Donation.receipt_no == receipt_no).first()


def ensure_unique_receipt(
     db: Session,
     result: ValidationResult,
     seen: Optional[Set[str]] = None,
) -> ValidationResult:
     """
     Mark the result as a duplicate when its receipt number is already
     stored, or already claimed by an earlier row of the same batch.

     This is early feedback only; the unique constraint on
     donations.receipt_no decides at insert time.
     """
     if not result.ok:
          return result
     receipt_no = result.record["receipt_no"]
     if (seen is not None and receipt_no in seen) or find_duplicate_receipt(db, receipt_no):
          result.duplicate_receipt = receipt_no
     return result


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _field(raw: dict, *names: str) -> Any:
     for name in names:
          if name in raw and raw[name] is not None:
               return raw[name]
     return None


def _text(value: Any) -> str:
     if value is None:
          return ""
     if isinstance(value, float) and value.is_integer():
          # Spreadsheet cells hand back 9876543210.0 for typed numbers
          return str(int(value))
     return str(value).strip()


def _coerce_amount(value: Any) -> Optional[float]:
     if value is None or isinstance(value, bool):
          return None
     if isinstance(value, (int, float)):
          try:
               number = float(value)
          except OverflowError:
               return math.inf
     else:
          text = str(value).strip()
          if not text:
               return None
          try:
               number = float(text)
          except ValueError:
               return None
     if math.isnan(number):
          return None
     return number


def _coerce_bool(value: Any, lenient: bool = False) -> bool:
     if value is None:
          return False
     if isinstance(value, bool):
          return value
     if isinstance(value, (int, float)):
          return value != 0
     text = str(value).strip().lower()
     if lenient:
          return "yes" in text or text in _TRUE_WORDS
     return text in _TRUE_WORDS


def _coerce_datetime(value: Any):
     """Returns (datetime or None, parsed_ok)."""
     if value is None or value == "":
          return None, True
     if isinstance(value, datetime):
          return _naive(value), True
     if isinstance(value, date):
          return datetime.combine(value, time()), True
     text = str(value).strip()
     if not text:
          return None, True
     try:
          return _naive(datetime.fromisoformat(text.replace("Z", "+00:00"))), True
     except ValueError:
          return None, False


def _naive(value: datetime) -> datetime:
     if value.tzinfo is None:
          return value
     return value.astimezone().replace(tzinfo=None)
