"""Connection to the PostgreSQL database and creation of its schema."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from patientrecords.config import DatabaseConfig


class DatabaseError(Exception):
    """Raised when the database cannot be reached or prepared."""


class RepositoryError(DatabaseError):
    """Raised when a repository operation fails."""


_SCHEMA: tuple[tuple[str, str], ...] = (
    (
        "gender enum",
        """DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'gender_type') THEN
        CREATE TYPE gender_type AS ENUM ('male', 'female', 'other');
    END IF;
END
$$;""",
    ),
    (
        "users table",
        """CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL,
    role TEXT NOT NULL CHECK (role IN ('doctor', 'receptionist')),
    username TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    phone_number TEXT UNIQUE NOT NULL,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);""",
    ),
    (
        "patient table",
        """CREATE TABLE IF NOT EXISTS patient (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL,
    age INT NOT NULL CHECK (age >= 0),
    gender gender_type DEFAULT 'other',
    phone_number TEXT UNIQUE NOT NULL,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);""",
    ),
    (
        "diagnosis table",
        """CREATE TABLE IF NOT EXISTS diagnosis (
    id SERIAL PRIMARY KEY,
    patient_id UUID NOT NULL REFERENCES patient(id) ON DELETE CASCADE,
    doctor_id UUID NOT NULL REFERENCES users(id) ON DELETE SET NULL,
    description TEXT NOT NULL,
    created_at TIMESTAMPTZ DEFAULT NOW()
);""",
    ),
)

# The PostgreSQL DB-API ``connect`` function in use; it takes a libpq connection string.
_drivers: dict[str, Callable[[str], Any]] = {}


@contextmanager
def _using_driver(connect: Callable[[str], Any]) -> Iterator[None]:
    """Make ``connect`` the driver used by ``load_database`` within the block."""
    previous = _drivers.get("postgres")
    _drivers["postgres"] = connect
    try:
        yield
    finally:
        if previous is None:
            _drivers.pop("postgres", None)
        else:
            _drivers["postgres"] = previous


def _connection_string(config: DatabaseConfig) -> str:
    return (
        f"host={config.host} port={config.port} dbname={config.db_name} "
        f"user={config.user} password={config.password} sslmode=disable"
    )


def _execute(connection: Any, statement: str) -> None:
    cursor = connection.cursor()
    try:
        cursor.execute(statement)
    finally:
        cursor.close()


def _rollback(connection: Any) -> None:
    rollback = getattr(connection, "rollback", None)
    if rollback is not None:
        try:
            rollback()
        except Exception:
            pass


@dataclass
class DatabaseConnection:
    """An open DB-API connection to the clinic database."""

    connection: Any

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()

    def __enter__(self) -> DatabaseConnection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def create_schema(connection: Any) -> None:
    """Create the gender type and the users, patient and diagnosis tables if absent."""
    for what, statement in _SCHEMA:
        try:
            _execute(connection, statement)
        except Exception as exc:
            _rollback(connection)
            raise DatabaseError(f"failed to create {what}: {exc}") from exc
    connection.commit()


def load_database(config: DatabaseConfig) -> DatabaseConnection:
    """Connect with the installed PostgreSQL driver, check and prepare the database."""
    connect = _drivers.get("postgres")
    if connect is None:
        raise DatabaseError("failed to connect: no database driver was provided")
    try:
        raw = connect(_connection_string(config))
    except Exception as exc:
        raise DatabaseError(f"failed to connect: {exc}") from exc

    try:
        _execute(raw, "SELECT 1")
    except Exception as exc:
        raw.close()
        raise DatabaseError(f"failed to ping db: {exc}") from exc

    try:
        create_schema(raw)
    except DatabaseError:
        raw.close()
        raise
    return DatabaseConnection(raw)