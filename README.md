# patientrecords

Record keeping for a small clinic: staff accounts (doctors and
receptionists), patients, and the diagnoses doctors write for them. Records
live in a SQL database. Staff log in with a username and a password, which
are checked against a bcrypt hash, and receive a signed access token.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Configuration

Settings are read from a YAML file:

```yaml
env: development
description: Clinic records
http_server:
  host: localhost:8080
database:
  host: localhost
  port: 5432
  db_name: clinic
  user: user
  password: password
```

`load_config(path)` in `patientrecords.config` reads such a file into a
`Config` (with its `HTTPServerConfig` and `DatabaseConfig` parts). A missing
or unreadable file raises `ConfigError`.

## Command line

```
patientrecords --config config.yaml
```

The command loads the configuration, prints the environment, the
description and the HTTP server address, then opens the database and makes
sure its schema is in place, reporting whether the connection succeeded.

## Using the library

- `patientrecords.models` holds the records: `User`, `Patient` and
  `Diagnosis`.
- `patientrecords.database` opens a connection with `load_database(config)`
  and creates the tables with `create_schema(connection)`. Failures raise
  `DatabaseError`; failed queries in the repositories raise
  `RepositoryError`.
- `patientrecords.users`, `patientrecords.patients` and
  `patientrecords.diagnoses` provide `UserStorage`, `PatientStorage` and
  `DiagnosisStorage`, which create, update, delete and look up records.
  Lookups that find nothing return `None`.
- `patientrecords.tokens` provides `JWTManager`, which signs HS256 tokens
  carrying the user's id, role and an expiry time.
- `patientrecords.auth` provides `AuthService`: `register(user)` hashes the
  password, gives the user a fresh id and stores it; `login(username,
  password)` returns the user together with a token, or raises
  `AuthenticationError` for an unknown username or a wrong password.