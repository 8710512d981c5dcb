"""End-to-end tests through the FastAPI app."""
from services.errors import TransientStorageError

DONATION = {
     "receiptNo": "R1",
     "name": "A",
     "phone": "9876543210",
     "community": "payiran",
     "location": "Madurai",
     "amount": 500,
     "paymentMode": "cash",
}


def test_app_startup_seeds_configured_admins(client, db) -> None:
     from models import AdminUser

     admins = db.query(AdminUser).order_by(AdminUser.id).all()
     assert [(a.username, a.role) for a in admins] == [
          ("templeadmin", "superadmin"),
          ("deskadmin", "admin"),
     ]


def test_create_donation_is_public(client) -> None:
     response = client.post("/api/donations", json=DONATION)

     assert response.status_code == 201
     body = response.json()
     assert body["id"] > 0
     assert body["receiptNo"] == "R1"
     assert body["paymentMode"] == "cash"
     assert body["inscription"] is False
     assert body["donationDate"] is None
     assert "createdAt" in body


def test_duplicate_receipt_is_conflict(client) -> None:
     client.post("/api/donations", json=DONATION)

     response = client.post("/api/donations", json={**DONATION, "name": "Other"})

     assert response.status_code == 409
     assert response.json() == {
          "error": "Duplicate receipt number",
          "message": "Receipt number R1 already exists",
          "receiptNo": "R1",
     }


def test_invalid_donation_is_bad_request(client) -> None:
     response = client.post("/api/donations", json={**DONATION, "phone": "12345", "paymentMode": "gold"})

     assert response.status_code == 400
     assert response.json() == {
          "message": "Invalid donation data",
          "errors": ["Phone number must be 10 digits", "Invalid payment mode: gold"],
     }


def test_check_receipt_is_public(client) -> None:
     assert client.get("/api/donations/check-receipt/R1").json() == {"exists": False, "receiptNo": "R1"}
     client.post("/api/donations", json=DONATION)
     assert client.get("/api/donations/check-receipt/R1").json() == {"exists": True, "receiptNo": "R1"}


def test_admin_routes_require_token(client) -> None:
     for method, path in [
          ("get", "/api/donations"),
          ("get", "/api/donations/export"),
          ("get", "/api/donations/1"),
          ("delete", "/api/donations/1"),
          ("get", "/api/receipt-number/next"),
          ("get", "/api/dashboard/stats"),
          ("delete", "/api/dashboard/cache"),
          ("get", "/api/donors/search?query=ab"),
          ("get", "/api/donors/9876543210"),
     ]:
          response = getattr(client, method)(path)
          assert response.status_code == 401, path


def test_invalid_token_rejected(client) -> None:
     response = client.get("/api/donations", headers={"Authorization": "Bearer not-a-token"})
     assert response.status_code == 401


def test_login_and_status(client) -> None:
     assert client.get("/api/auth/status").json() == {
          "isAuthenticated": False,
          "username": None,
          "role": None,
     }

     login = client.post("/api/auth/login", json={"username": "templeadmin", "password": "Gopuram!2025#Key"})
     assert login.status_code == 200
     assert login.json()["role"] == "superadmin"

     headers = {"Authorization": f"Bearer {login.json()['token']}"}
     assert client.get("/api/auth/status", headers=headers).json() == {
          "isAuthenticated": True,
          "username": "templeadmin",
          "role": "superadmin",
     }
     assert client.post("/api/auth/logout").json()["success"] is True


def test_login_with_wrong_password(client) -> None:
     response = client.post("/api/auth/login", json={"username": "templeadmin", "password": "guess"})
     assert response.status_code == 401


def test_change_credentials(client, admin_headers) -> None:
     weak = client.post(
          "/api/auth/change-credentials",
          json={"currentPassword": "Desk#Counter9", "newUsername": "desk2", "newPassword": "weak"},
          headers=admin_headers,
     )
     assert weak.status_code == 400
     assert "Password must be at least 8 characters long" in weak.json()["details"]

     wrong = client.post(
          "/api/auth/change-credentials",
          json={"currentPassword": "nope", "newUsername": "desk2", "newPassword": "Better#Pass42"},
          headers=admin_headers,
     )
     assert wrong.status_code == 401

     changed = client.post(
          "/api/auth/change-credentials",
          json={"currentPassword": "Desk#Counter9", "newUsername": "desk2", "newPassword": "Better#Pass42"},
          headers=admin_headers,
     )
     assert changed.status_code == 200
     login = client.post("/api/auth/login", json={"username": "desk2", "password": "Better#Pass42"})
     assert login.status_code == 200


def test_list_get_update_delete(client, auth_headers) -> None:
     created = client.post("/api/donations", json=DONATION).json()
     client.post("/api/donations", json={**DONATION, "receiptNo": "R2", "amount": 3000, "paymentMode": "upi"})

     listing = client.get("/api/donations", params={"paymentMode": "upi"}, headers=auth_headers)
     assert [d["receiptNo"] for d in listing.json()] == ["R2"]

     fetched = client.get(f"/api/donations/{created['id']}", headers=auth_headers)
     assert fetched.json()["name"] == "A"

     updated = client.put(f"/api/donations/{created['id']}", json={"amount": 750}, headers=auth_headers)
     assert updated.status_code == 200
     assert updated.json()["amount"] == 750

     refused = client.put(f"/api/donations/{created['id']}", json={"receiptNo": "R9"}, headers=auth_headers)
     assert refused.status_code == 400
     assert refused.json()["errors"] == ["Receipt number cannot be changed"]

     deleted = client.delete(f"/api/donations/{created['id']}", headers=auth_headers)
     assert deleted.json()["success"] is True
     missing = client.get(f"/api/donations/{created['id']}", headers=auth_headers)
     assert missing.status_code == 404
     assert missing.json() == {"detail": "Donation not found"}


def test_list_rejects_unknown_amount_range(client, auth_headers) -> None:
     response = client.get("/api/donations", params={"amountRange": "lots"}, headers=auth_headers)
     assert response.status_code == 400


def test_search_by_phone(client, auth_headers) -> None:
     client.post("/api/donations", json=DONATION)
     client.post("/api/donations", json={**DONATION, "receiptNo": "R2", "phone": "9123456789"})

     response = client.get("/api/donations/search/9876543210", headers=auth_headers)

     assert [d["receiptNo"] for d in response.json()] == ["R1"]


def test_next_receipt_number(client, auth_headers) -> None:
     first = client.get("/api/receipt-number/next", headers=auth_headers)
     second = client.get("/api/receipt-number/next", headers=auth_headers)

     assert first.json() == {"receiptNumber": "1"}
     assert second.json() == {"receiptNumber": "2"}


def test_dashboard_stats_cached_until_next_donation(client, auth_headers) -> None:
     client.post("/api/donations", json={**DONATION, "amount": 100})
     client.post("/api/donations", json={**DONATION, "receiptNo": "R2", "amount": 200})
     client.post("/api/donations", json={**DONATION, "receiptNo": "R3", "amount": 300, "phone": "9123456789"})

     first = client.get("/api/dashboard/stats", headers=auth_headers)
     assert first.headers["X-Cache"] == "MISS"
     body = first.json()
     assert body["totalCollections"] == 600
     assert body["totalDonations"] == 3
     assert body["totalDonors"] == 2
     assert body["avgDonation"] == 200
     assert body["paymentModeDistribution"] == [
          {"mode": "cash", "count": 3, "amount": 600, "percentage": 100.0}
     ]
     assert [d["name"] for d in body["recentDonations"]] == ["A", "A", "A"]

     second = client.get("/api/dashboard/stats", headers=auth_headers)
     assert second.headers["X-Cache"] == "HIT"
     assert second.json() == body

     client.post("/api/donations", json={**DONATION, "receiptNo": "R4", "amount": 400})
     third = client.get("/api/dashboard/stats", headers=auth_headers)
     assert third.headers["X-Cache"] == "MISS"
     assert third.json()["totalCollections"] == 1000


def test_dashboard_cache_clear(client, auth_headers) -> None:
     client.get("/api/dashboard/stats", headers=auth_headers)
     assert client.delete("/api/dashboard/cache", headers=auth_headers).json()["success"] is True
     assert client.get("/api/dashboard/stats", headers=auth_headers).headers["X-Cache"] == "MISS"


def test_dashboard_unknown_range(client, auth_headers) -> None:
     response = client.get("/api/dashboard/stats", params={"dateRange": "decade"}, headers=auth_headers)
     assert response.status_code == 400


def test_dashboard_export(client, auth_headers) -> None:
     client.post("/api/donations", json={**DONATION, "donationDate": "2025-01-10"})

     response = client.get(
          "/api/dashboard/export",
          params={"dateRange": "custom", "startDate": "2025-01-01", "endDate": "2025-01-31"},
          headers=auth_headers,
     )

     assert response.status_code == 200
     assert response.headers["content-type"].startswith("text/csv")
     assert "temple-donations-custom-2025-01-01-to-2025-01-31.csv" in response.headers["content-disposition"]
     lines = response.text.split("\n")
     assert lines[0].startswith("S.No,Receipt No,Name")
     assert lines[1].startswith("1,R1,")
     assert lines[1].endswith(",10/01/2025")


def test_donations_export(client, auth_headers) -> None:
     client.post("/api/donations", json=DONATION)

     response = client.get("/api/donations/export", headers=auth_headers)

     assert "filename=donations.csv" in response.headers["content-disposition"]
     assert len(response.text.split("\n")) == 2


def test_import_endpoint(client, auth_headers) -> None:
     csv_text = (
          "Receipt No,Name,Phone,Community,Location,Amount,Payment Mode,Date\n"
          "100,Ravi,9876543210,semban,Madurai,500,cash,15/08/2024\n"
          "101,Mala,12345,semban,Madurai,500,cash,15/08/2024\n"
          "102,Kavi,9123456789,semban,Theni,700,upi,2024-08-16\n"
     )

     response = client.post(
          "/api/donations/import",
          files={"file": ("donations.csv", csv_text.encode("utf-8"), "text/csv")},
          headers=auth_headers,
     )

     assert response.status_code == 200
     assert response.json() == {
          "success": True,
          "message": "Import completed. 2 donations imported successfully.",
          "imported": 2,
          "total": 3,
          "errors": ["Row 3: Phone number must be 10 digits"],
     }


def test_import_rejects_unsupported_file(client, auth_headers) -> None:
     response = client.post(
          "/api/donations/import",
          files={"file": ("notes.txt", b"hello", "text/plain")},
          headers=auth_headers,
     )
     assert response.status_code == 400


def test_import_rejects_empty_file(client, auth_headers) -> None:
     response = client.post(
          "/api/donations/import",
          files={"file": ("empty.csv", b"Receipt No,Name\n", "text/csv")},
          headers=auth_headers,
     )
     assert response.status_code == 400
     assert response.json() == {"detail": "No data found in file"}


def test_donor_routes(client, auth_headers) -> None:
     client.post("/api/donations", json=DONATION)
     client.post("/api/donations", json={**DONATION, "receiptNo": "R2", "amount": 250})

     donors = client.get("/api/donors/search", params={"query": "9876"}, headers=auth_headers).json()
     assert len(donors) == 1
     assert donors[0]["totalAmount"] == 750
     assert donors[0]["donationCount"] == 2

     donor = client.get("/api/donors/9876543210", headers=auth_headers)
     assert donor.json()["phone"] == "9876543210"
     assert len(donor.json()["donations"]) == 2

     missing = client.get("/api/donors/9000000000", headers=auth_headers)
     assert missing.status_code == 404


def test_delete_all_requires_superadmin(client, auth_headers, admin_headers) -> None:
     client.post("/api/donations", json=DONATION)

     forbidden = client.delete("/api/donations/delete-all", headers=admin_headers)
     assert forbidden.status_code == 403

     allowed = client.delete("/api/donations/delete-all", headers=auth_headers)
     assert allowed.status_code == 200
     assert allowed.json()["deleted"] == 1
     assert client.get("/api/donations", headers=auth_headers).json() == []


def test_google_form_webhook(client) -> None:
     response = client.post("/api/google-form-webhook", json={
          "receiptNo": "G1",
          "name": "Form Donor",
          "phone": "9876543210",
          "location": "Online",
          "amount": "1001",
     })

     assert response.status_code == 201
     assert response.json()["donation"] == {
          "id": 1,
          "receiptNo": "G1",
          "name": "Form Donor",
          "amount": 1001,
     }

     rejected = client.post("/api/google-form-webhook", json={
          "receiptNo": "G2",
          "name": "Form Donor",
          "phone": "98765 43210",
          "location": "Online",
          "amount": 10,
     })
     assert rejected.status_code == 400


def test_unknown_route(client) -> None:
     response = client.get("/api/nothing-here")
     assert response.status_code == 404
     assert response.json() == {"error": "Route not found"}


def test_storage_outage_is_service_unavailable(client, monkeypatch) -> None:
     from services import donation_service

     def unavailable(db, receipt_no):
          raise TransientStorageError("connection refused")

     monkeypatch.setattr(donation_service, "receipt_exists", unavailable)

     response = client.get("/api/donations/check-receipt/R1")

     assert response.status_code == 503
     assert response.json() == {"error": "Storage temporarily unavailable"}
