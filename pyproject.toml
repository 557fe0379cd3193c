[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hockeypuck"
version = "1.0.0"
description = "OpenPGP key server building blocks: configuration, logging, HKP request parsing and routing, raw packet reading and index formatting"
requires-python = ">=3.11"
keywords = ["openpgp", "keyserver", "hkp", "pgp", "sks", "wsgi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "jinja2>=3.1",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[tool.hatch.build.targets.wheel]
packages = ["hockeypuck"]

[tool.hatch.build.targets.sdist]
include = ["hockeypuck", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
