# schemas/auth.py
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .base import CamelModel


class LoginRequest(CamelModel):
     username: str = Field(..., min_length=1)
     password: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
     success: bool = True
     token: str
     username: str
     role: str


class AuthStatusResponse(CamelModel):
     is_authenticated: bool
     username: Optional[str] = None
     role: Optional[str] = None


class ChangeCredentialsRequest(CamelModel):
     """Change the signed-in admin's username and password."""
     current_password: str = Field(..., min_length=1)
     new_username: str = Field(..., min_length=1)
     new_password: str = Field(..., min_length=1)

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "currentPassword": "Old#Passw0rd",
                    "newUsername": "templeadmin",
                    "newPassword": "N3w!Temple-Pass",
               }
          },
     )


class ChangeCredentialsResponse(CamelModel):
     success: bool = True
     message: str
     token: str
