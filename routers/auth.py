# routers/auth.py
"""
Admin authentication routes.

Login returns a bearer token; send it as "Authorization: Bearer <token>"
on every admin route.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from schemas.auth import (
     AuthStatusResponse,
     ChangeCredentialsRequest,
     ChangeCredentialsResponse,
     LoginRequest,
     LoginResponse,
)
from schemas.donation import MessageResponse
from security import create_access_token, optional_token, verify_token
from services.credential_store import CredentialError, CredentialStore, get_credential_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, store: CredentialStore = Depends(get_credential_store)):
     admin = store.validate(body.username, body.password)
     if admin is None:
          logger.warning("Failed login for %s", body.username)
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

     logger.info("Admin %s logged in", admin.username)
     return LoginResponse(
          token=create_access_token(admin.username, admin.role),
          username=admin.username,
          role=admin.role,
     )


@router.post("/logout", response_model=MessageResponse)
def logout():
     # Tokens are stateless; the client discards its copy
     return MessageResponse(message="Logged out successfully")


@router.get("/status", response_model=AuthStatusResponse)
def auth_status(token: Optional[dict] = Depends(optional_token)):
     if token is None:
          return AuthStatusResponse(is_authenticated=False)
     return AuthStatusResponse(
          is_authenticated=True,
          username=token.get("sub"),
          role=token.get("role"),
     )


@router.post("/change-credentials", response_model=ChangeCredentialsResponse)
def change_credentials(
     body: ChangeCredentialsRequest,
     store: CredentialStore = Depends(get_credential_store),
     token: dict = Depends(verify_token),
):
     current_username = token.get("sub")
     if store.validate(current_username, body.current_password) is None:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

     try:
          admin = store.update_credentials(current_username, body.new_username, body.new_password)
     except CredentialError as e:
          return JSONResponse(
               status_code=status.HTTP_400_BAD_REQUEST,
               content={"error": str(e), "details": e.errors},
          )

     return ChangeCredentialsResponse(
          message="Credentials updated successfully! Please use your new credentials for future logins.",
          token=create_access_token(admin.username, admin.role),
     )
