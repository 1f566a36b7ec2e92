import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from leaveflow.core.database import get_db
from leaveflow.core.security import Principal, authenticated, bearer_token
from leaveflow.schemas.authSchema import LoginRequest, LoginResponse
from leaveflow.services.AuthService import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


# -----------------------------
# Login
# -----------------------------
@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer token valid for one hour
    """
    token = AuthService(db).login(payload.email, payload.password)
    return {"token": token}


# -----------------------------
# Get Current User
# -----------------------------
@router.get("/me")
def get_me(
    request: Request,
    principal: Principal = Depends(authenticated),
    db: Session = Depends(get_db)
):
    """
    Return current authenticated user info
    """
    profile = AuthService(db).get_current_user(bearer_token(request))
    return {
        "message": "Current user profile",
        "data": profile,
    }
