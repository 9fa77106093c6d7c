"""User model for authentication. Account identity is the username."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    hashed_password: str
    totp_secret: str
    is_active: bool = Field(default=True)
    is_admin: bool = Field(default=False)  # vault owner
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
