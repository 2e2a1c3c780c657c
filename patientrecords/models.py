"""Records kept by the clinic: staff users, patients and their diagnoses."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

NIL_UUID = uuid.UUID(int=0)


@dataclass
class User:
    """A member of staff who can sign in: a doctor or a receptionist."""

    id: uuid.UUID = NIL_UUID
    name: str = ""
    role: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    phone_number: str = ""


@dataclass
class Patient:
    """A patient registered with the clinic."""

    id: uuid.UUID = NIL_UUID
    name: str = ""
    age: int = 0
    gender: str = ""
    phone_number: str = ""


@dataclass
class Diagnosis:
    """A diagnosis written by a doctor for a patient."""

    id: int = 0
    patient_id: uuid.UUID = NIL_UUID
    doctor_id: uuid.UUID = NIL_UUID
    description: str = ""