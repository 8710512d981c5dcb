# routers/donations.py
"""
Donation API routes.

Access:
- Public: create a donation, check whether a receipt number is taken
- Admin token: list, export, import, search, get, update, delete
- Superadmin token: delete all donations

Fixed paths (export, import, check-receipt, delete-all, search) are
declared before /{donation_id} so they are not captured by it.
"""
import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_session
from schemas.donation import (
     DONATION_EXAMPLE,
     DonationResponse,
     DonationValidationErrorResponse,
     DuplicateReceiptResponse,
     MessageResponse,
     ReceiptCheckResponse,
)
from schemas.imports import ImportResponse
from security import require_superadmin, verify_token
from services import donation_service
from services.cache import DashboardCache, get_dashboard_cache
from services.donation_service import DonationFilters, DonationOutcome
from services.export_service import donations_to_csv
from services.import_service import ImportFileError, import_rows, read_tabular_file
from services.validation import IntakePath

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/donations", tags=["donations"])

OUTCOME_RESPONSES = {
     400: {"model": DonationValidationErrorResponse, "description": "Invalid donation data"},
     409: {"model": DuplicateReceiptResponse, "description": "Receipt number already used"},
}


def donation_filters(
     date_range: Optional[str] = Query(None, alias="dateRange"),
     start_date: Optional[str] = Query(None, alias="startDate"),
     end_date: Optional[str] = Query(None, alias="endDate"),
     community: Optional[str] = Query(None),
     payment_mode: Optional[str] = Query(None, alias="paymentMode"),
     amount_range: Optional[str] = Query(None, alias="amountRange"),
     phone: Optional[str] = Query(None),
     receipt_no: Optional[str] = Query(None, alias="receiptNo"),
) -> DonationFilters:
     return DonationFilters(
          date_range=date_range,
          start_date=start_date,
          end_date=end_date,
          community=community,
          payment_mode=payment_mode,
          amount_range=amount_range,
          phone=phone,
          receipt_no=receipt_no,
     )


def _filtered_donations(db: Session, filters: DonationFilters):
     try:
          return donation_service.list_donations(db, filters)
     except ValueError as e:
          raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def outcome_error_response(outcome: DonationOutcome) -> JSONResponse:
     """400/409 body for a refused create or update."""
     if outcome.duplicate_receipt is not None:
          body = DuplicateReceiptResponse(
               message=f"Receipt number {outcome.duplicate_receipt} already exists",
               receipt_no=outcome.duplicate_receipt,
          )
          return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(by_alias=True))
     body = DonationValidationErrorResponse(errors=outcome.errors)
     return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(by_alias=True))


@router.get("/export", summary="Export filtered donations as CSV")
def export_donations(
     filters: DonationFilters = Depends(donation_filters),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     donations = _filtered_donations(db, filters)
     logger.info("Exporting %d donations for %s", len(donations), token.get("sub"))
     return Response(
          content=donations_to_csv(donations),
          media_type="text/csv",
          headers={"Content-Disposition": "attachment; filename=donations.csv"},
     )


@router.post("/import", response_model=ImportResponse, summary="Import donations from CSV or Excel")
def import_donations(
     file: UploadFile = File(...),
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(verify_token),
):
     """
     Import a spreadsheet of donations. Rows that fail validation are
     reported as "Row N: reason" and skipped; every other row is stored.
     """
     try:
          rows = read_tabular_file(file.filename, file.file.read())
     except ImportFileError as e:
          raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
     if not rows:
          raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No data found in file")

     strict_dates = os.getenv("IMPORT_STRICT_DATES", "false").lower() == "true"
     result = import_rows(db, rows, strict_dates=strict_dates, cache=cache)
     logger.info("Import of %s by %s finished", file.filename, token.get("sub"))
     return ImportResponse(
          message=f"Import completed. {result.imported_count} donations imported successfully.",
          imported=result.imported_count,
          total=result.total_count,
          errors=result.errors,
     )


@router.get("", response_model=List[DonationResponse], summary="List donations")
def list_donations(
     filters: DonationFilters = Depends(donation_filters),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Donations matching the filters, newest first."""
     return _filtered_donations(db, filters)


@router.get("/check-receipt/{receipt_no}", response_model=ReceiptCheckResponse)
def check_receipt(receipt_no: str, db: Session = Depends(get_session)):
     return ReceiptCheckResponse(
          exists=donation_service.receipt_exists(db, receipt_no),
          receipt_no=receipt_no,
     )


@router.post(
     "",
     response_model=DonationResponse,
     status_code=status.HTTP_201_CREATED,
     responses=OUTCOME_RESPONSES,
     summary="Record a donation",
)
def create_donation(
     payload: Dict[str, Any] = Body(..., examples=[DONATION_EXAMPLE]),
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
):
     """
     Record a donation from the donation form.

     - **400**: one or more fields are invalid
     - **409**: the receipt number is already used
     """
     outcome = donation_service.create_donation(db, payload, IntakePath.FORM, cache)
     if not outcome.ok:
          return outcome_error_response(outcome)
     return outcome.donation


@router.delete("/delete-all", response_model=MessageResponse)
def delete_all_donations(
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(require_superadmin),
):
     deleted = donation_service.delete_all_donations(db, cache)
     logger.warning("All donations deleted by %s", token.get("sub"))
     return MessageResponse(message="All donations deleted successfully", deleted=deleted)


@router.get("/search/{phone}", response_model=List[DonationResponse])
def search_by_phone(
     phone: str,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     return donation_service.get_donations_by_phone(db, phone)


@router.get("/{donation_id}", response_model=DonationResponse)
def get_donation(
     donation_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     donation = donation_service.get_donation(db, donation_id)
     if not donation:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Donation not found")
     return donation


@router.put("/{donation_id}", response_model=DonationResponse, responses=OUTCOME_RESPONSES)
def update_donation(
     donation_id: int,
     changes: Dict[str, Any] = Body(...),
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(verify_token),
):
     """Partial update; the receipt number cannot be changed."""
     outcome = donation_service.update_donation(db, donation_id, changes, cache)
     if outcome is None:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Donation not found")
     if not outcome.ok:
          return outcome_error_response(outcome)
     return outcome.donation


@router.delete("/{donation_id}", response_model=MessageResponse)
def delete_donation(
     donation_id: int,
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
     token: dict = Depends(verify_token),
):
     if not donation_service.delete_donation(db, donation_id, cache):
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Donation not found")
     return MessageResponse(message="Donation deleted successfully")
