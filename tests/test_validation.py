from datetime import datetime

import pytest

from services.validation import (
     MAX_AMOUNT,
     IntakePath,
     community_variants,
     ensure_unique_receipt,
     normalize_community,
     normalize_payment_mode,
     validate_donation,
)


def _submission(**overrides):
     raw = {
          "receiptNo": "R1",
          "name": "A",
          "phone": "9876543210",
          "community": "payiran",
          "location": "Madurai",
          "amount": 500,
          "paymentMode": "cash",
     }
     raw.update(overrides)
     return raw


def test_valid_form_submission_is_normalized() -> None:
     result = validate_donation(_submission(receiptNo=" R1 ", phone="98765 43210", amount="500"))

     assert result.ok
     assert result.record == {
          "receipt_no": "R1",
          "name": "A",
          "phone": "9876543210",
          "community": "payiran",
          "location": "Madurai",
          "address": None,
          "amount": 500,
          "payment_mode": "cash",
          "inscription": False,
          "donation_date": None,
     }


def test_snake_case_keys_are_accepted() -> None:
     result = validate_donation({
          "receipt_no": "R2",
          "name": "Kumar",
          "phone": "9876543210",
          "location": "Sivakasi",
          "amount": 100,
          "payment_mode": "upi",
          "donation_date": "2025-01-15",
     })

     assert result.ok
     assert result.record["receipt_no"] == "R2"
     assert result.record["payment_mode"] == "upi"
     assert result.record["donation_date"] == datetime(2025, 1, 15)


def test_missing_fields_are_all_reported() -> None:
     result = validate_donation({})

     assert not result.ok
     assert result.record is None
     assert result.errors == [
          "Receipt number is required",
          "Name is required",
          "Phone number is required",
          "Location is required",
          "Valid amount is required",
          "Payment mode is required",
     ]


@pytest.mark.parametrize("phone", ["12345", "98765432101", "phone"])
def test_phone_must_have_ten_digits(phone) -> None:
     result = validate_donation(_submission(phone=phone))
     expected = "Phone number is required" if phone == "phone" else "Phone number must be 10 digits"
     assert result.errors == [expected]


def test_webhook_phone_is_not_stripped() -> None:
     result = validate_donation(_submission(phone="98765-43210"), IntakePath.WEBHOOK)
     assert result.errors == ["Phone number must be 10 digits"]


@pytest.mark.parametrize(
     "amount, message",
     [
          (0, "Amount must be positive"),
          (-50, "Amount must be positive"),
          ("abc", "Valid amount is required"),
          (10.5, "Amount must be a whole number"),
          (True, "Valid amount is required"),
          (3000000000, "Amount is too large"),
          ("99999999999999999999", "Amount is too large"),
          (10 ** 400, "Amount is too large"),
     ],
)
def test_amount_rules(amount, message) -> None:
     result = validate_donation(_submission(amount=amount))
     assert result.errors == [message]


def test_largest_storable_amount_is_accepted() -> None:
     result = validate_donation(_submission(amount=MAX_AMOUNT))
     assert result.ok
     assert result.record["amount"] == MAX_AMOUNT


def test_unknown_community_rejected_on_form_but_defaulted_on_import() -> None:
     form = validate_donation(_submission(community="martian"))
     imported = validate_donation(_submission(community="martian"), IntakePath.IMPORT)

     assert form.errors == ["Invalid community: martian"]
     assert imported.ok
     assert imported.record["community"] == "any"


def test_missing_community_defaults_to_any() -> None:
     result = validate_donation(_submission(community=None))
     assert result.record["community"] == "any"


def test_legacy_community_spelling_maps_to_canonical() -> None:
     assert normalize_community("Odhaalan") == "othaalan"
     assert normalize_community("chozhan") == "chozhan"
     assert normalize_community("nobody") is None
     assert sorted(community_variants("othaalan")) == ["odhaalan", "othaalan"]


def test_payment_mode_required_on_form_only() -> None:
     form = validate_donation(_submission(paymentMode=None))
     webhook = validate_donation(_submission(paymentMode=None), IntakePath.WEBHOOK)

     assert form.errors == ["Payment mode is required"]
     assert webhook.record["payment_mode"] == "cash"


def test_payment_mode_aliases() -> None:
     assert normalize_payment_mode("Bank Transfer") == "bank_transfer"
     assert normalize_payment_mode("bankTransfer") == "bank_transfer"
     assert normalize_payment_mode("UPI") == "upi"
     assert normalize_payment_mode("bitcoin") is None

     result = validate_donation(_submission(paymentMode="bitcoin"))
     assert result.errors == ["Invalid payment mode: bitcoin"]


def test_inscription_coercion() -> None:
     assert validate_donation(_submission(inscription="yes")).record["inscription"] is True
     assert validate_donation(_submission(inscription="No")).record["inscription"] is False
     assert validate_donation(_submission(inscription=True)).record["inscription"] is True
     lenient = validate_donation(_submission(inscription="Yes, on stone"), IntakePath.IMPORT)
     assert lenient.record["inscription"] is True


def test_invalid_donation_date_is_rejected() -> None:
     result = validate_donation(_submission(donationDate="next tuesday"))
     assert result.errors == ["Invalid donation date"]


def test_duplicate_receipt_detected_against_storage(db, make_donation) -> None:
     make_donation(receipt_no="R1")

     result = ensure_unique_receipt(db, validate_donation(_submission()))

     assert not result.ok
     assert result.duplicate_receipt == "R1"
     assert result.reasons == ["Receipt number R1 already exists"]


def test_duplicate_receipt_detected_within_batch(db) -> None:
     result = ensure_unique_receipt(db, validate_donation(_submission()), seen={"R1"})
     assert result.duplicate_receipt == "R1"


def test_unique_receipt_passes(db) -> None:
     result = ensure_unique_receipt(db, validate_donation(_submission()))
     assert result.ok
     assert result.duplicate_receipt is None
