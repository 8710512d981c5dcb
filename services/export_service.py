# services/export_service.py
"""CSV export of donations for spreadsheets and downstream reports."""
from typing import Iterable, Optional

from models import Donation

EXPORT_HEADERS = (
     "S.No",
     "Receipt No",
     "Name",
     "Community",
     "Location",
     "Address",
     "Phone",
     "Amount",
     "Payment Mode",
     "Inscription",
     "Date",
)

EXPORT_FILENAME_PREFIX = "temple-donations"


def _quoted(value: Optional[str]) -> str:
     # Free-text columns are always quoted; embedded quotes are doubled
     return '"' + (value or "").replace('"', '""') + '"'


def _quoted_if_needed(value: str) -> str:
     # Receipt numbers are typed by hand and may hold separators
     if any(char in value for char in ',"\r\n'):
          return _quoted(value)
     return value


def donation_to_csv_row(serial_no: int, donation: Donation) -> str:
     return ",".join([
          str(serial_no),
          _quoted_if_needed(donation.receipt_no),
          _quoted(donation.name),
          _quoted(donation.community),
          _quoted(donation.location),
          _quoted(donation.address),
          donation.phone,
          str(donation.amount),
          donation.payment_mode,
          "Yes" if donation.inscription else "No",
          donation.effective_date.strftime("%d/%m/%Y"),
     ])


def donations_to_csv(donations: Iterable[Donation]) -> str:
     """
     Serialize donations in their given order.

     The column order and header names are relied on by existing
     spreadsheets; keep them fixed.
     """
     lines = [",".join(EXPORT_HEADERS)]
     lines.extend(
          donation_to_csv_row(index, donation)
          for index, donation in enumerate(donations, start=1)
     )
     return "\n".join(lines)


def export_filename(
     preset: Optional[str] = None,
     start_date: Optional[str] = None,
     end_date: Optional[str] = None,
) -> str:
     """temple-donations[-{preset}][-{start}-to-{end}].csv"""
     filename = EXPORT_FILENAME_PREFIX
     if preset and preset != "all":
          filename += f"-{preset}"
          if preset == "custom" and start_date and end_date:
               filename += f"-{start_date}-to-{end_date}"
     return filename + ".csv"
