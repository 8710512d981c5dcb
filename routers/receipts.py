# routers/receipts.py
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_session
from schemas.donation import ReceiptNumberResponse
from security import verify_token
from services.receipt_service import next_receipt_number

router = APIRouter(prefix="/api/receipt-number", tags=["receipts"])


@router.get("/next", response_model=ReceiptNumberResponse)
def get_next_receipt_number(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Allocate the next receipt number of the current year."""
     receipt_number = next_receipt_number(db, datetime.now().year)
     db.commit()
     return ReceiptNumberResponse(receipt_number=receipt_number)
