"""Authentication API — login and current-account lookup."""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlmodel import Session

from backend.api.deps import get_current_user
from backend.database import get_session
from backend.models.user import User
from backend.services.auth import AuthenticationError, authenticate, create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str
    totp_code: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: str
    is_admin: bool = False


class AccountRead(BaseModel):
    account: str
    is_admin: bool


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, session: Session = Depends(get_session)):
    try:
        user = authenticate(session, body.username, body.password, body.totp_code)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.reason)

    token = create_access_token(subject=user.username)
    return LoginResponse(access_token=token, account=user.username, is_admin=user.is_admin)


@router.get("/me", response_model=AccountRead)
def me(user: User = Depends(get_current_user)):
    """The account identity positions are recorded under."""
    return AccountRead(account=user.username, is_admin=user.is_admin)
