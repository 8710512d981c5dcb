from models import ReceiptSequence
from services.receipt_service import current_receipt_sequence, next_receipt_number


def test_first_allocations_start_at_one(db) -> None:
     assert next_receipt_number(db, 2025) == "1"
     assert next_receipt_number(db, 2025) == "2"
     db.commit()

     assert current_receipt_sequence(db, 2025).last_receipt_number == 2


def test_years_are_counted_independently(db) -> None:
     issued = [
          next_receipt_number(db, 2024),
          next_receipt_number(db, 2025),
          next_receipt_number(db, 2024),
          next_receipt_number(db, 2025),
          next_receipt_number(db, 2024),
     ]
     assert issued == ["1", "1", "2", "2", "3"]


def test_sequence_is_strictly_increasing(db) -> None:
     numbers = [int(next_receipt_number(db, 2026)) for _ in range(25)]
     assert numbers == list(range(1, 26))


def test_continues_from_existing_counter(db) -> None:
     db.add(ReceiptSequence(year=2023, last_receipt_number=41))
     db.commit()

     assert next_receipt_number(db, 2023) == "42"


def test_allocation_survives_commit_and_new_session(db) -> None:
     from database import SessionLocal

     next_receipt_number(db, 2025)
     db.commit()

     other = SessionLocal()
     try:
          assert next_receipt_number(other, 2025) == "2"
          other.commit()
     finally:
          other.close()


def test_no_counter_before_first_allocation(db) -> None:
     assert current_receipt_sequence(db, 2030) is None
