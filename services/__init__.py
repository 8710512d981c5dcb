# services/__init__.py
from .errors import TransientStorageError, translate_storage_errors
from .cache import DashboardCache, dashboard_cache, get_dashboard_cache
from .validation import (
     IntakePath,
     ValidationResult,
     validate_donation,
     ensure_unique_receipt,
)
from .receipt_service import next_receipt_number
from .dashboard_service import (
     compute_stats,
     payment_mode_distribution,
     recent_donations,
     resolve_date_range,
)
from .donor_service import DonorSummary, search_donors, get_donor_by_phone
from .donation_service import DonationFilters, DonationOutcome, create_donation
from .export_service import donations_to_csv, export_filename
from .import_service import ImportResult, import_rows, read_tabular_file
from .credential_store import CredentialStore, SqlCredentialStore, seed_admins

__all__ = [
     "TransientStorageError",
     "translate_storage_errors",
     "DashboardCache",
     "dashboard_cache",
     "get_dashboard_cache",
     "IntakePath",
     "ValidationResult",
     "validate_donation",
     "ensure_unique_receipt",
     "next_receipt_number",
     "compute_stats",
     "payment_mode_distribution",
     "recent_donations",
     "resolve_date_range",
     "DonorSummary",
     "search_donors",
     "get_donor_by_phone",
     "DonationFilters",
     "DonationOutcome",
     "create_donation",
     "donations_to_csv",
     "export_filename",
     "ImportResult",
     "import_rows",
     "read_tabular_file",
     "CredentialStore",
     "SqlCredentialStore",
     "seed_admins",
]
