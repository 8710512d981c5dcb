"""
Pytest configuration for the temple donation backend.

The application reads DATABASE_URL when database.py is imported, so the
test database is chosen here before any application module loads.

Provides fixtures for:
- A fresh SQLite schema per test
- A database session and a donation factory
- A TestClient with seeded admin accounts and their auth headers
"""
import itertools
import os
import tempfile

_TEST_DB_DIR = tempfile.mkdtemp(prefix="temple-donations-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TEST_DB_DIR, "test.db")
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["ADMIN_USERNAME"] = "templeadmin"
os.environ["ADMIN_PASSWORD"] = "Gopuram!2025#Key"
os.environ["ADMIN_USERNAME_2"] = "deskadmin"
os.environ["ADMIN_PASSWORD_2"] = "Desk#Counter9"
os.environ.pop("ADMIN_USERNAME_3", None)
os.environ.pop("ADMIN_PASSWORD_3", None)
os.environ["IMPORT_STRICT_DATES"] = "false"

import pytest
from fastapi.testclient import TestClient

from database import SessionLocal, engine
from models import Base, Donation
from services.cache import dashboard_cache

SUPERADMIN = ("templeadmin", "Gopuram!2025#Key")
ADMIN = ("deskadmin", "Desk#Counter9")


@pytest.fixture(autouse=True)
def reset_database():
     """Every test starts with empty tables and an empty dashboard cache."""
     Base.metadata.drop_all(bind=engine)
     Base.metadata.create_all(bind=engine)
     dashboard_cache.clear()
     yield
     dashboard_cache.clear()


@pytest.fixture
def db():
     session = SessionLocal()
     try:
          yield session
     finally:
          session.close()


@pytest.fixture
def make_donation(db):
     """Insert a donation directly, bypassing validation."""
     counter = itertools.count(1)

     def _make(**overrides) -> Donation:
          values = {
               "receipt_no": f"T{next(counter)}",
               "name": "Test Donor",
               "phone": "9876543210",
               "community": "any",
               "location": "Madurai",
               "amount": 100,
               "payment_mode": "cash",
               "inscription": False,
               "donation_date": None,
          }
          values.update(overrides)
          donation = Donation(**values)
          db.add(donation)
          db.commit()
          return donation

     return _make


@pytest.fixture
def client():
     from main import app

     with TestClient(app) as test_client:
          yield test_client


def _login(client: TestClient, username: str, password: str) -> dict:
     response = client.post("/api/auth/login", json={"username": username, "password": password})
     assert response.status_code == 200, response.text
     return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
     """Superadmin bearer token."""
     return _login(client, *SUPERADMIN)


@pytest.fixture
def admin_headers(client):
     """Regular admin bearer token."""
     return _login(client, *ADMIN)
