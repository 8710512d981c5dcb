# routers/donors.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_session
from schemas.donor import DonorSummaryResponse
from security import verify_token
from services.donor_service import get_donor_by_phone, search_donors

router = APIRouter(prefix="/api/donors", tags=["donors"])


@router.get("/search", response_model=List[DonorSummaryResponse])
def search(
     query: str = Query("", description="Part of a donor name or phone number"),
     community: Optional[str] = Query(None),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """Donors grouped by phone, most recent donor first."""
     return search_donors(db, query, community)


@router.get("/{phone}", response_model=DonorSummaryResponse)
def get_donor(
     phone: str,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     donor = get_donor_by_phone(db, phone)
     if donor is None:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Donor not found")
     return donor
