"""Authentication: bcrypt passwords, JWT bearer tokens, TOTP second factor.

The JWT subject is the username, which is also the account identity that
positions are recorded under.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
import pyotp
from sqlmodel import Session, select

from backend.config import settings
from backend.models.user import User


class AuthenticationError(Exception):
    """Login rejected; ``reason`` is safe to show the caller."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    pw = plain.encode("utf-8")[:72]
    return bcrypt.checkpw(pw, hashed.encode("utf-8"))


def create_access_token(subject: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Decode JWT and return the subject (username). Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload.get("sub")
    except JWTError:
        return None


def verify_totp(secret: str, code: str) -> bool:
    return pyotp.TOTP(secret).verify(code, valid_window=1)


def generate_totp_secret() -> str:
    return pyotp.random_base32()


def get_totp_uri(secret: str, username: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(
        name=username,
        issuer_name="Short Vault",
    )


def authenticate(session: Session, username: str, password: str, totp_code: str) -> User:
    """Check all three login factors and return the active user."""
    user = session.exec(select(User).where(User.username == username)).first()
    if not user or not user.is_active:
        raise AuthenticationError("Invalid credentials")
    if not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not verify_totp(user.totp_secret, totp_code):
        raise AuthenticationError("Invalid TOTP code")
    return user
