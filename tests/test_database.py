import pytest

from patientrecords import database as database_module
from patientrecords.config import DatabaseConfig
from patientrecords.database import (
    DatabaseConnection,
    DatabaseError,
    create_schema,
    load_database,
)


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection

    def execute(self, statement, params=None):
        self.connection.statements.append(statement)
        if self.connection.fail_on and self.connection.fail_on in statement:
            raise RuntimeError("boom")

    def close(self):
        self.connection.cursors_closed += 1


class FakeConnection:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.statements = []
        self.commits = 0
        self.rolled_back = False
        self.closed = False
        self.cursors_closed = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


def make_config():
    password = "password"
    return DatabaseConfig(
        host="db.example.com", port=5432, db_name="clinic", user="user", password=password
    )


def load_with(connect):
    with database_module._using_driver(connect):
        return load_database(make_config())


def test_load_database_builds_connection_string():
    received = []
    fake = FakeConnection()

    def connect(dsn):
        received.append(dsn)
        return fake

    database = load_with(connect)
    assert received == [
        "host=db.example.com port=5432 dbname=clinic user=user password=password sslmode=disable"
    ]
    assert database.connection is fake


def test_load_database_pings_and_prepares_schema():
    fake = FakeConnection()
    database = load_with(lambda dsn: fake)
    assert isinstance(database, DatabaseConnection)
    assert database.connection is fake
    assert fake.statements[0] == "SELECT 1"
    assert len(fake.statements) == 5
    assert fake.commits == 1
    assert fake.cursors_closed == 5


def test_load_database_without_driver_fails():
    with pytest.raises(DatabaseError, match="failed to connect"):
        load_database(make_config())


def test_driver_is_removed_after_block():
    fake = FakeConnection()
    load_with(lambda dsn: fake)
    with pytest.raises(DatabaseError, match="no database driver"):
        load_database(make_config())


def test_load_database_wraps_connect_error():
    def connect(dsn):
        raise OSError("refused")

    with pytest.raises(DatabaseError, match="failed to connect: refused"):
        load_with(connect)


def test_load_database_reports_failed_ping():
    fake = FakeConnection(fail_on="SELECT 1")
    with pytest.raises(DatabaseError, match="failed to ping db"):
        load_with(lambda dsn: fake)
    assert fake.closed is True


def test_load_database_closes_on_schema_failure():
    fake = FakeConnection(fail_on="CREATE TABLE IF NOT EXISTS patient")
    with pytest.raises(DatabaseError, match="failed to create patient table"):
        load_with(lambda dsn: fake)
    assert fake.closed is True


def test_create_schema_order():
    fake = FakeConnection()
    create_schema(fake)
    assert "gender_type" in fake.statements[0]
    assert "CREATE TABLE IF NOT EXISTS users" in fake.statements[1]
    assert "CREATE TABLE IF NOT EXISTS patient" in fake.statements[2]
    assert "CREATE TABLE IF NOT EXISTS diagnosis" in fake.statements[3]
    assert fake.commits == 1


@pytest.mark.parametrize(
    "fail_on, message",
    [
        ("gender_type", "failed to create gender enum"),
        ("CREATE TABLE IF NOT EXISTS users", "failed to create users table"),
        ("CREATE TABLE IF NOT EXISTS patient", "failed to create patient table"),
        ("CREATE TABLE IF NOT EXISTS diagnosis", "failed to create diagnosis table"),
    ],
)
def test_create_schema_wraps_errors(fail_on, message):
    fake = FakeConnection(fail_on=fail_on)
    with pytest.raises(DatabaseError, match=message) as info:
        create_schema(fake)
    assert isinstance(info.value.__cause__, RuntimeError)
    assert fake.rolled_back is True
    assert fake.commits == 0


def test_database_connection_context_manager_closes():
    fake = FakeConnection()
    with DatabaseConnection(fake) as database:
        assert database.connection is fake
        assert fake.closed is False
    assert fake.closed is True