[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "patientrecords"
version = "0.1.0"
description = "Patient, staff and diagnosis records for a small clinic, stored in a SQL database, with password login and signed access tokens."
requires-python = ">=3.10"
keywords = ["clinic", "patients", "diagnosis", "records", "authentication", "jwt"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Healthcare Industry",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
    "Topic :: Database",
]
dependencies = [
    "pyyaml>=6.0",
    "pyjwt>=2.8",
    "bcrypt>=4.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[project.scripts]
patientrecords = "patientrecords.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["patientrecords"]

[tool.hatch.build.targets.sdist]
include = ["patientrecords", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
