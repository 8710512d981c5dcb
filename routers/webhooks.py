# routers/webhooks.py
"""
Google Form intake.

The form's Apps Script posts each submission here as JSON using the same
field names as the donation API. No token: the form is public.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_session
from routers.donations import OUTCOME_RESPONSES, outcome_error_response
from services.cache import DashboardCache, get_dashboard_cache
from services.donation_service import create_donation
from services.validation import IntakePath

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["webhooks"])


@router.post("/google-form-webhook", status_code=status.HTTP_201_CREATED, responses=OUTCOME_RESPONSES)
def google_form_webhook(
     payload: Dict[str, Any] = Body(...),
     db: Session = Depends(get_session),
     cache: DashboardCache = Depends(get_dashboard_cache),
):
     logger.info("Google Form webhook received for receipt %s", payload.get("receiptNo"))
     outcome = create_donation(db, payload, IntakePath.WEBHOOK, cache)
     if not outcome.ok:
          logger.warning("Google Form submission rejected: %s", outcome.errors or outcome.duplicate_receipt)
          return outcome_error_response(outcome)

     donation = outcome.donation
     return JSONResponse(status_code=status.HTTP_201_CREATED, content={
          "success": True,
          "message": "Donation received successfully from Google Form",
          "donation": {
               "id": donation.id,
               "receiptNo": donation.receipt_no,
               "name": donation.name,
               "amount": donation.amount,
          },
     })
