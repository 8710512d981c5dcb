# services/import_service.py
"""
Bulk Import Pipeline - spreadsheet rows to donations.

Each row is mapped from its free-form headers, validated on the lenient
import path and inserted on its own savepoint, so one bad row never stops
the rest of the file. Row numbers in error messages match the spreadsheet
(the header is row 1).
"""
import csv
import io
import logging
import os
import re
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Optional, Set

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.orm import Session

from services.cache import DashboardCache
from services.dashboard_service import DASHBOARD_CACHE_PREFIX
from services.donation_service import insert_donation
from services.errors import translate_storage_errors
from services.validation import IntakePath, ensure_unique_receipt, validate_donation

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
HEADER_ROW_OFFSET = 2

EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_SERIAL_THRESHOLD = 40000
TWO_DIGIT_YEAR_PIVOT = 50

# Target field -> accepted spreadsheet headers, in priority order
COLUMN_ALIASES = (
     ("receiptNo", ("Receipt No", "ReceiptNo", "receipt_no", "Receipt Number")),
     ("name", ("Name", "Donor Name", "name")),
     ("phone", ("Phone", "Phone Number", "phone", "Mobile")),
     ("community", ("Community", "Kulam", "community", "kulam")),
     ("location", ("Location", "Place", "location", "place")),
     ("address", ("Address", "address")),
     ("amount", ("Amount", "Donation Amount", "amount")),
     ("paymentMode", ("Payment Mode", "PaymentMode", "payment_mode", "Mode")),
     ("inscription", ("Inscription", "inscription")),
     ("donationDate", ("Date", "Donation Date", "date")),
)


class ImportFileError(ValueError):
     """The uploaded file cannot be read as a spreadsheet."""


@dataclass
class ImportResult:
     imported_count: int = 0
     total_count: int = 0
     errors: List[str] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
     return value is None or (isinstance(value, str) and not value.strip())


def map_row(row: dict) -> dict:
     """Resolve the first non-empty header alias for every donation field."""
     mapped = {}
     for target, headers in COLUMN_ALIASES:
          mapped[target] = None
          for header in headers:
               value = row.get(header)
               if not _is_blank(value):
                    mapped[target] = value
                    break
     return mapped


def parse_amount(value: Any) -> Optional[float]:
     """Numeric amount from a cell such as "Rs. 1,500" or 1500.0."""
     if _is_blank(value) or isinstance(value, bool):
          return None
     if isinstance(value, (int, float)):
          return float(value)
     cleaned = re.sub(r"[^\d.\-]", "", str(value))
     try:
          return float(cleaned)
     except ValueError:
          return None


def _from_excel_serial(serial: float, today: datetime) -> datetime:
     try:
          day = EXCEL_EPOCH + timedelta(days=int(serial))
     except OverflowError:
          logger.warning("Excel date serial %s out of range, using today", serial)
          return today
     return datetime.combine(day, time())


def _from_slashed(text: str) -> Optional[datetime]:
     parts = text.split("/")
     if len(parts) != 3 or not all(part.isdigit() for part in parts):
          return None
     first, second, year = (int(part) for part in parts)

     # Day first unless only the second part can be a day
     if first <= 12 < second:
          month, day = first, second
     else:
          day, month = first, second

     if len(parts[2]) != 4:
          year += 2000 if year < TWO_DIGIT_YEAR_PIVOT else 1900
     try:
          return datetime(year, month, day)
     except ValueError:
          return None


def parse_donation_date(value: Any, today: datetime) -> Optional[datetime]:
     """
     Donation date of an import row.

     Blank cells mean today. Returns None when the value is present but
     cannot be read as a date.
     """
     if _is_blank(value):
          return today
     if isinstance(value, datetime):
          return value
     if isinstance(value, date):
          return datetime.combine(value, time())

     text = str(value).strip()
     try:
          serial = float(text)
     except ValueError:
          serial = None
     if serial is not None:
          if serial > EXCEL_SERIAL_THRESHOLD:
               return _from_excel_serial(serial, today)
          return None

     cleaned = re.sub(r"[^\d/\-]", "", text)
     if "/" in cleaned:
          return _from_slashed(cleaned)
     if "-" in cleaned:
          try:
               return datetime.strptime(cleaned, "%Y-%m-%d")
          except ValueError:
               return None
     return None


@translate_storage_errors
def import_rows(
     db: Session,
     rows: Iterable[dict],
     strict_dates: bool = False,
     today: Optional[datetime] = None,
     cache: Optional[DashboardCache] = None,
) -> ImportResult:
     """
     Validate and store every row, collecting "Row N: reason, reason"
     messages for the rows that fail.
     """
     today = today or datetime.now()
     rows = list(rows)
     result = ImportResult(total_count=len(rows))
     seen: Set[str] = set()

     for index, row in enumerate(rows):
          row_number = index + HEADER_ROW_OFFSET
          mapped = map_row(row)
          mapped["amount"] = parse_amount(mapped["amount"])

          raw_date = mapped["donationDate"]
          donation_date = parse_donation_date(raw_date, today)
          date_failed = donation_date is None
          if date_failed and not strict_dates:
               logger.warning("Row %d: unreadable date %r, using today", row_number, raw_date)
               donation_date = today
          mapped["donationDate"] = donation_date

          validation = validate_donation(mapped, IntakePath.IMPORT)
          if date_failed and strict_dates:
               validation.errors.append("Invalid donation date")
          ensure_unique_receipt(db, validation, seen)
          if not validation.ok:
               result.errors.append(f"Row {row_number}: {', '.join(validation.reasons)}")
               continue

          receipt_no = validation.record["receipt_no"]
          if insert_donation(db, validation.record) is None:
               result.errors.append(f"Row {row_number}: Receipt number {receipt_no} already exists")
               continue
          seen.add(receipt_no)
          result.imported_count += 1

     db.commit()
     if result.imported_count and cache is not None:
          cache.invalidate_pattern(DASHBOARD_CACHE_PREFIX)
     logger.info(
          "Imported %d of %d rows (%d errors)",
          result.imported_count,
          result.total_count,
          len(result.errors),
     )
     return result


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------

def _read_csv(content: bytes) -> List[dict]:
     try:
          text = content.decode("utf-8-sig")
     except UnicodeDecodeError as e:
          raise ImportFileError("CSV file must be UTF-8 encoded") from e
     rows = []
     for row in csv.DictReader(io.StringIO(text)):
          cleaned = {key.strip(): value for key, value in row.items() if isinstance(key, str)}
          if any(not _is_blank(value) for value in cleaned.values()):
               rows.append(cleaned)
     return rows


def _read_xlsx(content: bytes) -> List[dict]:
     try:
          workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
     except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
          raise ImportFileError("Could not read Excel file") from e
     try:
          sheet = workbook.worksheets[0]
          values = sheet.iter_rows(values_only=True)
          header = next(values, None)
          if header is None:
               return []
          columns = [str(cell).strip() if cell is not None else "" for cell in header]
          rows = []
          for cells in values:
               if all(_is_blank(cell) for cell in cells):
                    continue
               rows.append({
                    column: cell
                    for column, cell in zip(columns, cells)
                    if column
               })
          return rows
     finally:
          workbook.close()


def read_tabular_file(filename: str, content: bytes) -> List[dict]:
     """
     Rows of an uploaded CSV or .xlsx file as header -> value dicts.

     Raises ImportFileError for oversized, unsupported or unreadable files.
     """
     if len(content) > MAX_UPLOAD_BYTES:
          raise ImportFileError("File too large. Maximum size is 10MB")

     extension = os.path.splitext(filename or "")[1].lower()
     if extension == ".csv":
          return _read_csv(content)
     if extension in (".xlsx", ".xlsm"):
          return _read_xlsx(content)
     raise ImportFileError("Unsupported file type. Please upload a CSV or Excel (.xlsx) file")
