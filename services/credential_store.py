# services/credential_store.py
"""
Admin credential store.

Routes depend on the CredentialStore interface (through
get_credential_store) so the backing store can be swapped in tests.
Passwords are only ever stored as bcrypt hashes.
"""
import logging
import os
import re
import secrets
import string
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from database import get_session
from models import AdminUser
from security import pwd_context
from services.errors import translate_storage_errors

logger = logging.getLogger(__name__)

ROLE_SUPERADMIN = "superadmin"
ROLE_ADMIN = "admin"

MIN_PASSWORD_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
COMMON_PASSWORD_PREFIXES = ("password", "123456", "admin", "temple")

DEFAULT_SUPERADMIN_USERNAME = "templeadmin"

# (username env, password env, role) for the accounts created on first start
SEED_ACCOUNTS = (
     ("ADMIN_USERNAME", "ADMIN_PASSWORD", ROLE_SUPERADMIN),
     ("ADMIN_USERNAME_2", "ADMIN_PASSWORD_2", ROLE_ADMIN),
     ("ADMIN_USERNAME_3", "ADMIN_PASSWORD_3", ROLE_ADMIN),
)


class CredentialError(ValueError):
     """A credential change was refused."""

     def __init__(self, message: str, errors: Optional[List[str]] = None):
          super().__init__(message)
          self.errors = errors or [message]


def validate_password_strength(password: str) -> Tuple[bool, List[str]]:
     errors = []
     if len(password) < MIN_PASSWORD_LENGTH:
          errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
     if not re.search(r"[A-Z]", password):
          errors.append("Password must contain at least one uppercase letter")
     if not re.search(r"[a-z]", password):
          errors.append("Password must contain at least one lowercase letter")
     if not re.search(r"\d", password):
          errors.append("Password must contain at least one number")
     if not any(char in PASSWORD_SYMBOLS for char in password):
          errors.append("Password must contain at least one special character")
     if password.lower().startswith(COMMON_PASSWORD_PREFIXES):
          errors.append("Password contains common patterns and is not secure")
     return len(errors) == 0, errors


def generate_secure_password(length: int = 16) -> str:
     """Random password with at least one character of every class."""
     symbols = "!@#$%^&*()_+-=[]{}|;:,.<>?"
     pools = (string.ascii_uppercase, string.ascii_lowercase, string.digits, symbols)
     length = max(length, len(pools))
     rng = secrets.SystemRandom()

     chars = [rng.choice(pool) for pool in pools]
     alphabet = "".join(pools)
     chars.extend(rng.choice(alphabet) for _ in range(length - len(chars)))
     rng.shuffle(chars)
     return "".join(chars)


class CredentialStore(ABC):
     """Lookup, verification and update of admin accounts."""

     @abstractmethod
     def get_admin(self, username: str) -> Optional[AdminUser]:
          ...

     @abstractmethod
     def validate(self, username: str, password: str) -> Optional[AdminUser]:
          """The admin when the password matches, otherwise None."""

     @abstractmethod
     def update_credentials(self, current_username: str, new_username: str, new_password: str) -> AdminUser:
          """Raises CredentialError when the change is refused."""

     @abstractmethod
     def list_admins(self) -> List[AdminUser]:
          ...


class SqlCredentialStore(CredentialStore):
     """Credential store backed by the admin_users table."""

     def __init__(self, db: Session):
          self.db = db

     @translate_storage_errors
     def get_admin(self, username: str) -> Optional[AdminUser]:
          return self.db.query(AdminUser).filter(AdminUser.username == username).first()

     @translate_storage_errors
     def validate(self, username: str, password: str) -> Optional[AdminUser]:
          admin = self.get_admin(username)
          if admin is None or not pwd_context.verify(password, admin.password_hash):
               return None
          admin.last_login_at = datetime.now()
          self.db.commit()
          return admin

     @translate_storage_errors
     def update_credentials(self, current_username: str, new_username: str, new_password: str) -> AdminUser:
          admin = self.get_admin(current_username)
          if admin is None:
               raise CredentialError("Admin account not found")

          new_username = (new_username or "").strip()
          if not new_username:
               raise CredentialError("Username is required")
          if new_username != current_username and self.get_admin(new_username) is not None:
               raise CredentialError("Username already exists")

          valid, errors = validate_password_strength(new_password)
          if not valid:
               raise CredentialError("Password validation failed", errors)

          admin.username = new_username
          admin.password_hash = pwd_context.hash(new_password)
          self.db.commit()
          logger.info("Admin credentials updated: %s -> %s", current_username, new_username)
          return admin

     @translate_storage_errors
     def list_admins(self) -> List[AdminUser]:
          return self.db.query(AdminUser).order_by(AdminUser.id).all()


def get_credential_store(db: Session = Depends(get_session)) -> CredentialStore:
     return SqlCredentialStore(db)


@translate_storage_errors
def seed_admins(db: Session) -> int:
     """
     Create the initial admin accounts from ADMIN_USERNAME/ADMIN_PASSWORD
     (superadmin) and the _2/_3 variants (admins) when no admin exists yet.

     Without any configured account a superadmin with a generated password
     is created and its password is printed once to stderr.
     """
     if db.query(AdminUser.id).first() is not None:
          return 0

     created = 0
     for username_var, password_var, role in SEED_ACCOUNTS:
          username = os.getenv(username_var)
          password = os.getenv(password_var)
          if not username or not password:
               continue
          db.add(AdminUser(username=username, password_hash=pwd_context.hash(password), role=role))
          created += 1

     if created == 0:
          password = generate_secure_password()
          db.add(AdminUser(
               username=DEFAULT_SUPERADMIN_USERNAME,
               password_hash=pwd_context.hash(password),
               role=ROLE_SUPERADMIN,
          ))
          created = 1
          logger.warning(
               "No ADMIN_USERNAME/ADMIN_PASSWORD configured; created superadmin '%s'",
               DEFAULT_SUPERADMIN_USERNAME,
          )
          # Shown once on the console only, never through the log handlers
          print(
               f"Initial superadmin '{DEFAULT_SUPERADMIN_USERNAME}' password: {password}",
               file=sys.stderr,
          )

     db.commit()
     logger.info("Seeded %d admin account(s)", created)
     return created
