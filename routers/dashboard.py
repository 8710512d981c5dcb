# routers/dashboard.py
"""
Dashboard API routes (admin token required).

Stats responses are cached per (dateRange, startDate, endDate) for
DASHBOARD_CACHE_TTL seconds; every donation write clears them.
"""
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_session
from schemas.dashboard import DashboardStatsResponse, PaymentModeShareResponse, RecentDonationResponse
from schemas.donation import MessageResponse
from security import verify_token
from services.cache import DashboardCache, get_dashboard_cache
from services.dashboard_service import (
     compute_stats,
     payment_mode_distribution,
     recent_donations,
     resolve_date_range,
     stats_cache_key,
)
from services.donation_service import DonationFilters, list_donations
from services.export_service import donations_to_csv, export_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _resolve(date_range: str, start_date: Optional[str], end_date: Optional[str]):
     try:
          return resolve_date_range(date_range, start_date, end_date)
     except ValueError as e:
          raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(
     response: Response,
     date_range: str = Query("all", alias="dateRange"),
     start_date: Optional[str] = Query(None, alias="startDate"),
     end_date: Optional[str] = Query(None, alias="endDate"),
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(verify_token),
):
     """
     Totals, payment mode distribution and the five most recent donations
     for the selected date range.

     - **dateRange**: all, today, week, month, thisyear, lastyear,
       thismonth, lastmonth or custom (with startDate/endDate)
     """
     started = time.perf_counter()
     cache_key = stats_cache_key(date_range, start_date, end_date)

     # Read before computing so a concurrent write can veto the set below
     generation = cache.generation
     cached = cache.get(cache_key)
     if cached is not None:
          response.headers["X-Cache"] = "HIT"
          response.headers["Cache-Control"] = "private, max-age=120"
          return cached

     start, end = _resolve(date_range, start_date, end_date)
     stats = compute_stats(db, start, end)
     shares = payment_mode_distribution(db, start, end)
     recent = recent_donations(db, start=start, end=end)

     data = DashboardStatsResponse(
          total_collections=stats.total_collection,
          total_donors=stats.total_donors,
          total_donations=stats.total_donations,
          avg_donation=stats.average_donation,
          payment_mode_distribution=[
               PaymentModeShareResponse.model_validate(share) for share in shares
          ],
          recent_donations=[
               RecentDonationResponse.model_validate(donation) for donation in recent
          ],
     )
     cache.set(cache_key, data, generation=generation)

     duration_ms = (time.perf_counter() - started) * 1000
     response.headers["X-Cache"] = "MISS"
     response.headers["Cache-Control"] = "private, max-age=120, stale-while-revalidate=60"
     response.headers["X-Response-Time"] = f"{duration_ms:.0f}ms"
     return data


@router.delete("/cache", response_model=MessageResponse)
def clear_dashboard_cache(
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(verify_token),
):
     cache.clear()
     logger.info("Dashboard cache cleared by %s", token.get("sub"))
     return MessageResponse(message="Dashboard cache cleared")


@router.get("/export")
def export_dashboard(
     date_range: str = Query("all", alias="dateRange"),
     start_date: Optional[str] = Query(None, alias="startDate"),
     end_date: Optional[str] = Query(None, alias="endDate"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """CSV of the donations behind the dashboard's current date range."""
     _resolve(date_range, start_date, end_date)
     donations = list_donations(db, DonationFilters(
          date_range=date_range,
          start_date=start_date,
          end_date=end_date,
     ))
     filename = export_filename(date_range, start_date, end_date)
     return Response(
          content=donations_to_csv(donations),
          media_type="text/csv",
          headers={"Content-Disposition": f"attachment; filename={filename}"},
     )
