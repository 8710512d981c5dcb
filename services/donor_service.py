# services/donor_service.py
"""
Donor Aggregator - donors are not stored, they are the donations that
share a phone number.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Donation
from services.dashboard_service import effective_date_column
from services.errors import translate_storage_errors
from services.validation import community_variants


@dataclass
class DonorSummary:
     """Aggregate view of every donation made with one phone number."""
     phone: str
     name: str
     location: str
     community: str
     total_amount: int
     donation_count: int
     last_donation: datetime
     donations: List[Donation] = field(default_factory=list)


def _newest_first(query):
     return query.order_by(effective_date_column().desc(), Donation.id.desc())


def summarize_donations(donations: List[Donation]) -> List[DonorSummary]:
     """
     Group donations by phone.

     Expects donations ordered newest first: the first donation seen for a
     phone supplies the displayed name, location and community. Donors come
     out in the order of their latest donation.
     """
     groups: Dict[str, List[Donation]] = {}
     for donation in donations:
          groups.setdefault(donation.phone, []).append(donation)

     summaries = []
     for phone, records in groups.items():
          latest = records[0]
          summaries.append(DonorSummary(
               phone=phone,
               name=latest.name,
               location=latest.location or "",
               community=latest.community or "",
               total_amount=sum(record.amount for record in records),
               donation_count=len(records),
               last_donation=latest.effective_date,
               donations=records,
          ))
     return summaries


@translate_storage_errors
def search_donors(db: Session, query: Optional[str], community: Optional[str] = None) -> List[DonorSummary]:
     """
     Donors whose name or phone contains the query (case-insensitive).

     An empty query without a community filter finds nobody. With a
     community filter ("all" means none) an empty query lists that
     community's donors.
     """
     text = (query or "").strip()
     if community in (None, "", "all"):
          community = None
     if not text and community is None:
          return []

     donations = db.query(Donation)
     if text:
          donations = donations.filter(or_(
               Donation.name.icontains(text, autoescape=True),
               Donation.phone.contains(text, autoescape=True),
          ))
     if community is not None:
          donations = donations.filter(Donation.community.in_(community_variants(community)))

     return summarize_donations(_newest_first(donations).all())


@translate_storage_errors
def get_donor_by_phone(db: Session, phone: str) -> Optional[DonorSummary]:
     """Summary for the exact phone number, or None when it never donated."""
     donations = _newest_first(db.query(Donation).filter(Donation.phone == phone)).all()
     if not donations:
          return None
     return summarize_donations(donations)[0]
