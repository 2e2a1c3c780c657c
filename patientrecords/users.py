"""Storage of staff user accounts in the clinic database."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

from patientrecords.database import RepositoryError
from patientrecords.models import User

T = TypeVar("T")

_USER_COLUMNS = "id, name, role, username, password, phone_number"


class UserRepository(Protocol):
    """Operations on stored staff users."""

    def create_user(self, user: User) -> None: ...

    def delete_user(self, user_id: str) -> User | None: ...

    def update_user(self, user: User) -> User: ...

    def get_user_by_id(self, user_id: str) -> User | None: ...

    def get_user_by_username(self, username: str) -> User | None: ...

    def get_all_users(self) -> list[User]: ...

    def get_all_users_by_role(self, role: str) -> list[User]: ...

    def get_user_by_phone_number(self, phone_number: str) -> User | None: ...

    def get_username_and_password_by_id(self, user_id: str) -> tuple[str, str] | None: ...


@contextmanager
def _cursor(connection: Any) -> Iterator[Any]:
    cursor = connection.cursor()
    try:
        yield cursor
    finally:
        cursor.close()


def _as_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _user_from_row(row: Sequence[Any]) -> User:
    return User(
        id=_as_uuid(row[0]),
        name=row[1],
        role=row[2],
        username=row[3],
        password=row[4],
        phone_number=row[5],
    )


def _user_without_phone_from_row(row: Sequence[Any]) -> User:
    return User(
        id=_as_uuid(row[0]),
        name=row[1],
        role=row[2],
        username=row[3],
        password=row[4],
    )


class UserStorage:
    """User repository backed by a PostgreSQL DB-API connection."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    def _rollback(self) -> None:
        rollback = getattr(self._connection, "rollback", None)
        if rollback is not None:
            try:
                rollback()
            except Exception:
                pass

    def _execute(
        self,
        action: str,
        query: str,
        params: Sequence[Any],
        read: Callable[[Any], T],
        *,
        commit: bool = False,
    ) -> T:
        try:
            with _cursor(self._connection) as cursor:
                cursor.execute(query, tuple(params))
                result = read(cursor)
            if commit:
                self._connection.commit()
        except Exception as exc:
            self._rollback()
            raise RepositoryError(f"failed to {action}: {exc}") from exc
        return result

    def _one(
        self,
        action: str,
        query: str,
        params: Sequence[Any],
        convert: Callable[[Sequence[Any]], T],
        *,
        commit: bool = False,
    ) -> T | None:
        def read(cursor: Any) -> T | None:
            row = cursor.fetchone()
            return None if row is None else convert(row)

        return self._execute(action, query, params, read, commit=commit)

    def _all(
        self,
        action: str,
        query: str,
        params: Sequence[Any],
        convert: Callable[[Sequence[Any]], T],
    ) -> list[T]:
        def read(cursor: Any) -> list[T]:
            return [convert(row) for row in cursor.fetchall()]

        return self._execute(action, query, params, read)

    def create_user(self, user: User) -> None:
        """Insert ``user`` as a new row."""
        query = (
            "INSERT INTO users (id, name, role, username, password, phone_number) "
            "VALUES (%s, %s, %s, %s, %s, %s)"
        )
        params = (
            str(user.id),
            user.name,
            user.role,
            user.username,
            user.password,
            user.phone_number,
        )
        self._execute("create user", query, params, lambda cursor: None, commit=True)

    def delete_user(self, user_id: str) -> User | None:
        """Delete the user with ``user_id``; return it, or None if there was none."""
        query = f"DELETE FROM users WHERE id = %s RETURNING {_USER_COLUMNS}"
        return self._one(
            "delete user", query, (str(user_id),), _user_from_row, commit=True
        )

    def update_user(self, user: User) -> User:
        """Overwrite the stored user with the same id and return the stored row."""
        query = (
            "UPDATE users SET name = %s, role = %s, username = %s, password = %s, "
            "phone_number = %s, updated_at = NOW() "
            f"WHERE id = %s RETURNING {_USER_COLUMNS}"
        )
        params = (
            user.name,
            user.role,
            user.username,
            user.password,
            user.phone_number,
            str(user.id),
        )
        updated = self._one("update user", query, params, _user_from_row, commit=True)
        if updated is None:
            raise RepositoryError(f"failed to update user: no user found with id: {user.id}")
        return updated

    def get_user_by_id(self, user_id: str) -> User | None:
        """Return the user with ``user_id``, or None."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        return self._one("get user by id", query, (str(user_id),), _user_from_row)

    def get_user_by_username(self, username: str) -> User | None:
        """Return the user with ``username``, or None."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE username = %s"
        return self._one("get user by username", query, (username,), _user_from_row)

    def get_user_id_by_username(self, username: str) -> str | None:
        """Return the id of the user with ``username`` as text, or None."""
        query = "SELECT id FROM users WHERE username = %s"
        return self._one(
            "get user id by username", query, (username,), lambda row: str(row[0])
        )

    def get_all_users(self) -> list[User]:
        """Return every stored user."""
        query = f"SELECT {_USER_COLUMNS} FROM users"
        return self._all("get all users", query, (), _user_from_row)

    def get_all_users_by_role(self, role: str) -> list[User]:
        """Return every user with ``role``."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE role = %s"
        return self._all("get users by role", query, (role,), _user_from_row)

    def get_username_and_password_by_id(self, user_id: str) -> tuple[str, str] | None:
        """Return the username and stored password hash of a user, or None."""
        query = "SELECT username, password FROM users WHERE id = %s"
        return self._one(
            "get username and password by id",
            query,
            (str(user_id),),
            lambda row: (row[0], row[1]),
        )

    def get_user_by_phone_number(self, phone_number: str) -> User | None:
        """Return the user with ``phone_number``, or None.

        The phone number itself is not read back, so it is left empty.
        """
        query = "SELECT id, name, role, username, password FROM users WHERE phone_number = %s"
        return self._one(
            "get user by phone number",
            query,
            (phone_number,),
            _user_without_phone_from_row,
        )