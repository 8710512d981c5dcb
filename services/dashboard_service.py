# services/dashboard_service.py
"""
Dashboard Statistics Engine.

All figures are computed over an optional inclusive window on the
effective date of a donation (donation_date, or created_at when the
donation date was never recorded). Missing bounds are open ended.

Named presets ("today", "lastmonth", ...) are resolved to concrete bounds
by resolve_date_range() before calling the engine.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple, Union

from sqlalchemy import case, distinct, func
from sqlalchemy.orm import Query, Session

from models import Donation
from services.errors import translate_storage_errors

DASHBOARD_CACHE_PREFIX = "dashboard-stats"
DEFAULT_RECENT_LIMIT = 5

DATE_RANGE_PRESETS = (
     "all",
     "today",
     "week",
     "month",
     "thisyear",
     "lastyear",
     "thismonth",
     "lastmonth",
     "custom",
)

DateBound = Optional[Union[str, date, datetime]]


@dataclass
class DashboardStats:
     total_collection: int
     total_donors: int
     total_donations: int
     average_donation: float


@dataclass
class PaymentModeShare:
     mode: str
     count: int
     amount: int
     percentage: float


def effective_date_column():
     """SQL expression for donation_date ?? created_at."""
     return func.coalesce(Donation.donation_date, Donation.created_at)


def apply_date_window(query: Query, start: Optional[datetime], end: Optional[datetime]) -> Query:
     effective_date = effective_date_column()
     if start is not None:
          query = query.filter(effective_date >= start)
     if end is not None:
          query = query.filter(effective_date <= end)
     return query


@translate_storage_errors
def compute_stats(
     db: Session,
     start: Optional[datetime] = None,
     end: Optional[datetime] = None,
) -> DashboardStats:
     """Totals, distinct donors and average donation inside the window."""
     query = db.query(
          func.coalesce(func.sum(Donation.amount), 0),
          func.count(Donation.id),
          func.count(distinct(Donation.phone)),
     )
     total_collection, total_donations, total_donors = apply_date_window(query, start, end).one()

     total_collection = int(total_collection or 0)
     total_donations = int(total_donations or 0)
     average = total_collection / total_donations if total_donations > 0 else 0

     return DashboardStats(
          total_collection=total_collection,
          total_donors=int(total_donors or 0),
          total_donations=total_donations,
          average_donation=average,
     )


@translate_storage_errors
def payment_mode_distribution(
     db: Session,
     start: Optional[datetime] = None,
     end: Optional[datetime] = None,
) -> List[PaymentModeShare]:
     """
     Count and amount per payment mode, with each mode's share of the
     donation count. Percentages sum to 100 whenever there are donations.
     """
     query = db.query(
          Donation.payment_mode,
          func.count(Donation.id),
          func.coalesce(func.sum(Donation.amount), 0),
     )
     rows = apply_date_window(query, start, end).group_by(Donation.payment_mode).all()

     total = sum(count for _, count, _ in rows)
     shares = [
          PaymentModeShare(
               mode=mode,
               count=int(count),
               amount=int(amount or 0),
               percentage=(count / total) * 100 if total > 0 else 0,
          )
          for mode, count, amount in rows
     ]
     shares.sort(key=lambda share: (-share.count, share.mode))
     return shares


@translate_storage_errors
def recent_donations(
     db: Session,
     limit: int = DEFAULT_RECENT_LIMIT,
     start: Optional[datetime] = None,
     end: Optional[datetime] = None,
) -> List[Donation]:
     """
     Most recent donations inside the window.

     Donations with a donation date come first, newest first; donations
     without one follow, ordered by creation time. A dated donation always
     outranks an undated one, however old it is.
     """
     query = apply_date_window(db.query(Donation), start, end)
     return (
          query.order_by(
               case((Donation.donation_date.is_(None), 1), else_=0),
               Donation.donation_date.desc(),
               Donation.created_at.desc(),
               Donation.id.desc(),
          )
          .limit(limit)
          .all()
     )


def stats_cache_key(preset: Optional[str], start_date: DateBound, end_date: DateBound) -> str:
     return f"{DASHBOARD_CACHE_PREFIX}-{preset or 'all'}-{start_date or ''}-{end_date or ''}"


# ---------------------------------------------------------------------------
# Date range presets
# ---------------------------------------------------------------------------

def _start_of_day(day: date) -> datetime:
     return datetime.combine(day, time.min)


def _end_of_day(day: date) -> datetime:
     return datetime.combine(day, time.max)


def _as_date(value: DateBound) -> Optional[date]:
     if value is None or value == "":
          return None
     if isinstance(value, datetime):
          return value.date()
     if isinstance(value, date):
          return value
     return date.fromisoformat(str(value).strip()[:10])


def resolve_date_range(
     preset: Optional[str],
     start_date: DateBound = None,
     end_date: DateBound = None,
     now: Optional[datetime] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
     """
     Turn a named preset into concrete (start, end) bounds.

     "all" (or no preset) means no bounds. "custom" uses the given dates,
     the end date covering its whole day. Raises ValueError for an unknown
     preset or a malformed custom date.
     """
     now = now or datetime.now()
     today = now.date()
     preset = (preset or "all").lower()

     if preset == "all":
          return None, None
     if preset == "today":
          return _start_of_day(today), _end_of_day(today)
     if preset == "week":
          return now - timedelta(days=7), now
     if preset == "month":
          return _start_of_day(today.replace(day=1)), now
     if preset == "thisyear":
          return (
               _start_of_day(date(today.year, 1, 1)),
               _end_of_day(date(today.year, 12, 31)),
          )
     if preset == "lastyear":
          return (
               _start_of_day(date(today.year - 1, 1, 1)),
               _end_of_day(date(today.year - 1, 12, 31)),
          )
     if preset == "thismonth":
          last_day = calendar.monthrange(today.year, today.month)[1]
          return (
               _start_of_day(today.replace(day=1)),
               _end_of_day(today.replace(day=last_day)),
          )
     if preset == "lastmonth":
          last_of_previous = today.replace(day=1) - timedelta(days=1)
          return (
               _start_of_day(last_of_previous.replace(day=1)),
               _end_of_day(last_of_previous),
          )
     if preset == "custom":
          start = _as_date(start_date)
          end = _as_date(end_date)
          return (
               _start_of_day(start) if start else None,
               _end_of_day(end) if end else None,
          )
     raise ValueError(f"Unknown date range: {preset}")
