# routers/__init__.py
from . import auth, dashboard, donations, donors, receipts, webhooks

__all__ = ["auth", "dashboard", "donations", "donors", "receipts", "webhooks"]
