"""Clinic records: staff, patients and diagnoses, with login and access tokens."""

__version__ = "0.1.0"