"""Storage of patients in the clinic database."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

from patientrecords.database import RepositoryError
from patientrecords.models import Patient

T = TypeVar("T")

_PATIENT_COLUMNS = "id, name, age, phone_number, gender"


class PatientRepository(Protocol):
    """Operations on stored patients."""

    def create_patient(self, patient: Patient) -> None: ...

    def delete_patient(self, patient_id: str) -> Patient | None: ...

    def update_patient(self, patient: Patient) -> Patient: ...

    def get_patient_by_id(self, patient_id: str) -> Patient | None: ...

    def get_patient_by_phone_number(self, phone_number: str) -> Patient | None: ...

    def get_all_patients(self) -> list[Patient]: ...

    def get_patients_by_name(self, name: str) -> list[Patient]: ...


@contextmanager
def _cursor(connection: Any) -> Iterator[Any]:
    cursor = connection.cursor()
    try:
        yield cursor
    finally:
        cursor.close()


def _patient_from_row(row: Sequence[Any]) -> Patient:
    raw_id = row[0]
    return Patient(
        id=raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id)),
        name=row[1],
        age=int(row[2]),
        phone_number=row[3],
        gender=row[4],
    )


class PatientStorage:
    """Patient repository backed by a PostgreSQL DB-API connection."""

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
    ) -> Patient | None:
        def read(cursor: Any) -> Patient | None:
            row = cursor.fetchone()
            return None if row is None else _patient_from_row(row)

        return self._execute(action, query, params, read, commit=commit)

    def _all(self, action: str, query: str, params: Sequence[Any]) -> list[Patient]:
        def read(cursor: Any) -> list[Patient]:
            return [_patient_from_row(row) for row in cursor.fetchall()]

        return self._execute(action, query, params, read)

    def create_patient(self, patient: Patient) -> None:
        """Insert ``patient`` as a new row."""
        query = (
            "INSERT INTO patients (id, name, age, gender, phone_number) "
            "VALUES (%s, %s, %s, %s, %s)"
        )
        params = (
            str(patient.id),
            patient.name,
            patient.age,
            patient.gender,
            patient.phone_number,
        )
        self._execute("create patient", query, params, lambda cursor: None, commit=True)

    def delete_patient(self, patient_id: str) -> Patient | None:
        """Delete the patient with ``patient_id``; return it, or None if there was none."""
        query = f"DELETE FROM patients WHERE id = %s RETURNING {_PATIENT_COLUMNS}"
        return self._one("delete patient", query, (str(patient_id),), commit=True)

    def update_patient(self, patient: Patient) -> Patient:
        """Overwrite the stored patient with the same id and return the stored row."""
        query = (
            "UPDATE patients SET name = %s, age = %s, phone_number = %s, gender = %s, "
            f"updated_at = NOW() WHERE id = %s RETURNING {_PATIENT_COLUMNS}"
        )
        params = (
            patient.name,
            patient.age,
            patient.phone_number,
            patient.gender,
            str(patient.id),
        )
        updated = self._one("update patient", query, params, commit=True)
        if updated is None:
            raise RepositoryError(
                f"failed to update patient: no patient found with id: {patient.id}"
            )
        return updated

    def get_patient_by_id(self, patient_id: str) -> Patient | None:
        """Return the patient with ``patient_id``, or None."""
        query = f"SELECT {_PATIENT_COLUMNS} FROM patients WHERE id = %s"
        return self._one("get patient by ID", query, (str(patient_id),))

    def get_patient_by_phone_number(self, phone_number: str) -> Patient | None:
        """Return the patient with ``phone_number``, or None."""
        query = f"SELECT {_PATIENT_COLUMNS} FROM patients WHERE phone_number = %s"
        return self._one("get patient by phone number", query, (phone_number,))

    def get_all_patients(self) -> list[Patient]:
        """Return every stored patient."""
        query = f"SELECT {_PATIENT_COLUMNS} FROM patients"
        return self._all("get all patients", query, ())

    def get_patients_by_name(self, name: str) -> list[Patient]:
        """Return patients whose name contains ``name``, ignoring case."""
        query = f"SELECT {_PATIENT_COLUMNS} FROM patients WHERE name ILIKE %s"
        return self._all("get patients by name", query, (f"%{name}%",))