from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Both fields are optional here so the service can report them as missing."""
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
