"""Shared test fixtures for specir.

Provides reusable fixtures for loading document fixtures, resolving them into
the IR, creating isolated config environments, managing output state, and
running CLI commands. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from specir.models import Client
from specir.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test, the cached references become stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def _load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


@pytest.fixture
def petstore_v2_raw() -> dict[str, Any]:
    """Raw Swagger 2.0 petstore document."""
    return _load_fixture("petstore_v2.json")


@pytest.fixture
def petstore_v3_raw() -> dict[str, Any]:
    """Raw OpenAPI 3.0 petstore document."""
    return _load_fixture("petstore_v3.json")


@pytest.fixture
def petstore_v2_path() -> Path:
    return FIXTURES_DIR / "petstore_v2.json"


@pytest.fixture
def petstore_v3_path() -> Path:
    return FIXTURES_DIR / "petstore_v3.json"


# ---------------------------------------------------------------------------
# Resolved IR fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_v2_client(petstore_v2_raw: dict[str, Any]) -> Client:
    """Resolved IR of the Swagger 2.0 petstore."""
    from specir.parser.extractor import extract_client

    return extract_client(petstore_v2_raw)


@pytest.fixture
def petstore_v3_client(petstore_v3_raw: dict[str, Any]) -> Client:
    """Resolved IR of the OpenAPI 3.0 petstore."""
    from specir.parser.extractor import extract_client

    return extract_client(petstore_v3_raw)


@pytest.fixture
def minimal_v3() -> dict[str, Any]:
    """Smallest valid OpenAPI 3 document; tests add schemas and paths to a copy."""
    return copy.deepcopy(
        {
            "openapi": "3.0.0",
            "info": {"title": "Minimal", "version": "1.0.0"},
            "paths": {},
            "components": {"schemas": {}},
        }
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears all SPECIR_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specir.config._is_xdg_platform", lambda: True)

    for var in ["SPECIR_DEFAULT_TAG", "SPECIR_EXCLUDE_PARAMETERS"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
