import uuid

import pytest

from patientrecords.database import RepositoryError
from patientrecords.models import Patient
from patientrecords.patients import PatientStorage


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.rows = []

    def execute(self, query, params=None):
        self.connection.executed.append((query, params))
        if self.connection.error is not None:
            raise self.connection.error
        self.rows = self.connection.results.pop(0) if self.connection.results else []

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)

    def close(self):
        self.connection.closed_cursors += 1


class FakeConnection:
    def __init__(self, results=(), error=None):
        self.results = [list(r) for r in results]
        self.error = error
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed_cursors = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def make_row(patient_id=None, name="Carl", age=40, phone="phone-c", gender="male"):
    return (str(patient_id or uuid.uuid4()), name, age, phone, gender)


def test_create_patient_sends_fields_in_order_and_commits():
    conn = FakeConnection()
    patient_id = uuid.uuid4()
    patient = Patient(id=patient_id, name="Carl", age=40, gender="male", phone_number="phone-c")
    PatientStorage(conn).create_patient(patient)
    query, params = conn.executed[0]
    assert "INSERT INTO patients" in query
    assert params == (str(patient_id), "Carl", 40, "male", "phone-c")
    assert conn.commits == 1
    assert conn.closed_cursors == 1


def test_create_patient_failure_is_wrapped():
    conn = FakeConnection(error=RuntimeError("age check"))
    with pytest.raises(RepositoryError, match="failed to create patient: age check"):
        PatientStorage(conn).create_patient(Patient(age=-1))
    assert conn.rollbacks == 1


def test_delete_patient_returns_row():
    patient_id = uuid.uuid4()
    conn = FakeConnection(results=[[make_row(patient_id)]])
    deleted = PatientStorage(conn).delete_patient(str(patient_id))
    assert deleted == Patient(
        id=patient_id, name="Carl", age=40, gender="male", phone_number="phone-c"
    )
    assert conn.commits == 1


def test_delete_missing_patient_returns_none():
    assert PatientStorage(FakeConnection(results=[[]])).delete_patient("x") is None


def test_update_patient_round_trip():
    patient_id = uuid.uuid4()
    patient = Patient(id=patient_id, name="Dora", age=7, gender="female", phone_number="phone-d")
    conn = FakeConnection(results=[[make_row(patient_id, "Dora", 7, "phone-d", "female")]])
    assert PatientStorage(conn).update_patient(patient) == patient
    assert conn.executed[0][1] == ("Dora", 7, "phone-d", "female", str(patient_id))


def test_update_missing_patient_raises():
    with pytest.raises(RepositoryError):
        PatientStorage(FakeConnection(results=[[]])).update_patient(Patient(id=uuid.uuid4()))


def test_get_patient_by_id_and_phone():
    patient_id = uuid.uuid4()
    conn = FakeConnection(results=[[make_row(patient_id)], [make_row(patient_id)], []])
    storage = PatientStorage(conn)
    assert storage.get_patient_by_id(str(patient_id)).id == patient_id
    assert storage.get_patient_by_phone_number("phone-c").phone_number == "phone-c"
    assert storage.get_patient_by_phone_number("phone-z") is None


def test_get_all_patients_keeps_order():
    rows = [make_row(name="A"), make_row(name="B")]
    patients = PatientStorage(FakeConnection(results=[rows])).get_all_patients()
    assert [p.name for p in patients] == ["A", "B"]


def test_get_all_patients_empty():
    assert PatientStorage(FakeConnection(results=[[]])).get_all_patients() == []


def test_get_patients_by_name_uses_substring_pattern():
    conn = FakeConnection(results=[[make_row(name="Carla")]])
    patients = PatientStorage(conn).get_patients_by_name("carl")
    assert [p.name for p in patients] == ["Carla"]
    query, params = conn.executed[0]
    assert "ILIKE" in query
    assert params == ("%carl%",)


def test_age_is_read_as_integer():
    conn = FakeConnection(results=[[make_row(age="12")]])
    assert PatientStorage(conn).get_all_patients()[0].age == 12


def test_bad_row_is_wrapped():
    conn = FakeConnection(results=[[("bad-id", "A", 1, "p", "male")]])
    with pytest.raises(RepositoryError, match="failed to get patient by ID"):
        PatientStorage(conn).get_patient_by_id("bad-id")