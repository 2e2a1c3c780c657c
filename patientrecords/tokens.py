"""Signed access tokens for authenticated users."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import jwt

from patientrecords.models import User


@dataclass
class JWTManager:
    """Issues HS256 tokens that carry a user's id and role."""

    secret_key: str = field(repr=False)
    token_duration: timedelta

    def generate(self, user: User) -> str:
        """Return a signed token for ``user`` that expires after ``token_duration``."""
        expires = datetime.now(timezone.utc) + self.token_duration
        claims = {
            "user_id": str(user.id),
            "role": user.role,
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(claims, self.secret_key, algorithm="HS256")