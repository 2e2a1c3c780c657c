"""Storage of diagnoses in the clinic database."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

from patientrecords.database import RepositoryError
from patientrecords.models import Diagnosis

T = TypeVar("T")

_DIAGNOSIS_COLUMNS = "id, patient_id, doctor_id, description"


class DiagnosisRepository(Protocol):
    """Operations on stored diagnoses."""

    def create_diagnosis(self, diagnosis: Diagnosis) -> None: ...

    def delete_diagnosis(self, diagnosis_id: str) -> Diagnosis: ...

    def update_diagnosis(self, diagnosis: Diagnosis) -> Diagnosis: ...

    def get_diagnosis_by_patient_id(self, patient_id: str) -> list[Diagnosis]: ...


@contextmanager
def _cursor(connection: Any) -> Iterator[Any]:
    cursor = connection.cursor()
    try:
        yield cursor
    finally:
        cursor.close()


def _as_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _diagnosis_from_row(row: Sequence[Any]) -> Diagnosis:
    return Diagnosis(
        id=int(row[0]),
        patient_id=_as_uuid(row[1]),
        doctor_id=_as_uuid(row[2]),
        description=row[3],
    )


class DiagnosisStorage:
    """Diagnosis repository backed by a PostgreSQL DB-API connection."""

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
        self, action: str, query: str, params: Sequence[Any], *, commit: bool = False
    ) -> Diagnosis | None:
        def read(cursor: Any) -> Diagnosis | None:
            row = cursor.fetchone()
            return None if row is None else _diagnosis_from_row(row)

        return self._execute(action, query, params, read, commit=commit)

    def create_diagnosis(self, diagnosis: Diagnosis) -> None:
        """Insert ``diagnosis`` as a new row."""
        query = (
            "INSERT INTO diagnoses (id, patient_id, description, created_at) "
            "VALUES (%s, %s, %s, NOW())"
        )
        params = (diagnosis.id, str(diagnosis.patient_id), diagnosis.description)
        self._execute(
            "create diagnosis", query, params, lambda cursor: None, commit=True
        )

    def delete_diagnosis(self, diagnosis_id: str) -> Diagnosis:
        """Delete the diagnosis with ``diagnosis_id`` and return it."""
        query = f"DELETE FROM diagnoses WHERE id = %s RETURNING {_DIAGNOSIS_COLUMNS}"
        deleted = self._one(
            "delete diagnosis", query, (str(diagnosis_id),), commit=True
        )
        if deleted is None:
            raise RepositoryError(f"no diagnosis found with id: {diagnosis_id}")
        return deleted

    def update_diagnosis(self, diagnosis: Diagnosis) -> Diagnosis:
        """Overwrite the stored diagnosis with the same id and return the stored row."""
        query = (
            "UPDATE diagnoses SET patient_id = %s, doctor_id = %s, description = %s, "
            f"updated_at = NOW() WHERE id = %s RETURNING {_DIAGNOSIS_COLUMNS}"
        )
        params = (
            str(diagnosis.patient_id),
            str(diagnosis.doctor_id),
            diagnosis.description,
            diagnosis.id,
        )
        updated = self._one("update diagnosis", query, params, commit=True)
        if updated is None:
            raise RepositoryError(
                f"failed to update diagnosis: no diagnosis found with id: {diagnosis.id}"
            )
        return updated

    def get_diagnosis_by_patient_id(self, patient_id: str) -> list[Diagnosis]:
        """Return every diagnosis recorded for ``patient_id``."""
        query = f"SELECT {_DIAGNOSIS_COLUMNS} FROM diagnoses WHERE patient_id = %s"

        def read(cursor: Any) -> list[Diagnosis]:
            return [_diagnosis_from_row(row) for row in cursor.fetchall()]

        return self._execute(
            "get diagnoses by patient ID", query, (str(patient_id),), read
        )