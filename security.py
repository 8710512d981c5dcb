# security.py
"""
Bearer token authentication for the admin API.

Tokens are HS256 JWTs carrying the admin's username ("sub") and role.
Logging out is client side: the token simply stops being sent.
"""
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

load_dotenv()

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("JWT_SECRET")
if not SECRET_KEY:
     SECRET_KEY = secrets.token_urlsafe(32)
     logger.warning("JWT_SECRET is not set; tokens will not survive a restart")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_access_token(username: str, role: str, expires_minutes: Optional[int] = None) -> str:
     minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
     payload = {
          "sub": username,
          "role": role,
          "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
     }
     return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def _bearer_token(request: Request) -> Optional[str]:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          return None
     return auth.split(" ", 1)[1].strip()


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     token = _bearer_token(request)
     if not token:
          raise HTTPException(status_code=401, detail="Authentication required")
     try:
          return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
     except JWTError:
          raise HTTPException(status_code=401, detail="Invalid or expired token")


def optional_token(request: Request) -> Optional[dict]:
     """Token payload when a valid bearer token was sent, otherwise None."""
     token = _bearer_token(request)
     if not token:
          return None
     try:
          return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
     except JWTError:
          return None


def require_superadmin(token: dict = Depends(verify_token)) -> dict:
     if token.get("role") != "superadmin":
          raise HTTPException(status_code=403, detail="Superadmin access required")
     return token
