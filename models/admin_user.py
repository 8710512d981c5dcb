# models/admin_user.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, func

from .base import Base


class AdminUser(Base):
     """
     Admin account allowed to sign in to the donation back office.
     """
     __tablename__ = "admin_users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     username = Column(String(100), unique=True, nullable=False, index=True)
     password_hash = Column(String(255), nullable=False)
     role = Column(String(20), nullable=False, default="admin")  # superadmin, admin
     created_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False)
     last_login_at = Column(DateTime, nullable=True)

     def __repr__(self):
          return f"<AdminUser(id={self.id}, username='{self.username}', role='{self.role}')>"
