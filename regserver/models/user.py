"""
regserver/models/user.py

Purpose: User document models

- UserCreate: a registration candidate as submitted (plaintext password)
- UserDocument: what is persisted (bcrypt hash only)
- UserPublic: the listing projection (no password material)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

# Fields returned by the listing; anything else stays in the store
PUBLIC_PROJECTION = {"_id": 0, "name": 1, "email": 1, "username": 1}


class UserCreate(BaseModel):
    name: str
    username: str
    email: str
    password: str = Field(repr=False)

    @field_validator("name", "username", "email")
    @classmethod
    def strip_and_require(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("password")
    @classmethod
    def require_password(cls, v: str) -> str:
        # Passwords are taken verbatim; only presence is checked
        if not v:
            raise ValueError("must not be blank")
        return v


class UserDocument(BaseModel):
    name: str
    email: str
    username: str
    password_hash: str = Field(repr=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()


class UserPublic(BaseModel):
    name: str
    email: str
    username: str
