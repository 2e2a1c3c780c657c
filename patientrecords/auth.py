"""Registration and sign-in of staff users."""

from __future__ import annotations

import uuid

import bcrypt

from patientrecords.models import User
from patientrecords.tokens import JWTManager
from patientrecords.users import UserRepository

DEFAULT_COST = 10


class AuthenticationError(Exception):
    """Raised when a sign-in attempt is rejected."""


class AuthService:
    """Registers users with hashed passwords and signs them in with tokens."""

    def __init__(
        self,
        repo: UserRepository,
        jwt_manager: JWTManager,
        *,
        cost: int = DEFAULT_COST,
    ) -> None:
        self._repo = repo
        self._jwt_manager = jwt_manager
        self._cost = cost

    def register(self, user: User) -> None:
        """Hash the user's password, give the user a fresh id and store it.

        ``user`` is updated in place with the hash and the new id.
        """
        hashed = bcrypt.hashpw(user.password.encode(), bcrypt.gensalt(rounds=self._cost))
        user.password = hashed.decode()
        user.id = uuid.uuid4()
        self._repo.create_user(user)

    def login(self, username: str, password: str) -> tuple[User, str]:
        """Check the credentials and return the user with a signed token."""
        try:
            user = self._repo.get_user_by_username(username)
        except Exception as exc:
            raise AuthenticationError("invalid username or password") from exc
        if user is None:
            raise AuthenticationError("invalid username or password")

        try:
            matches = bcrypt.checkpw(password.encode(), user.password.encode())
        except ValueError:
            matches = False
        if not matches:
            raise AuthenticationError("invalid username or password")

        token = self._jwt_manager.generate(user)
        return user, token