from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from domain.errors import ValidationError
from domain.order import utcnow


class Role(str, Enum):
    USER = "user"
    VENDOR = "vendor"
    ADMIN = "admin"


ROLES = frozenset(r.value for r in Role)


def normalize_email(email: str) -> str:
    return str(email).strip().lower()


class User:
    def __init__(
        self,
        user_id: Optional[str],
        name: str,
        email: str,
        password_hash: str,
        role: str = Role.USER.value,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.user_id = user_id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.role = role
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        password_hash: str,
        role: str = Role.USER.value,
        now: Optional[datetime] = None,
    ) -> "User":
        name = str(name).strip()
        email = normalize_email(email)
        if not name or not email:
            raise ValidationError("Name, email and password are required")
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")

        now = now or utcnow()
        return cls(
            user_id=None,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
        )
