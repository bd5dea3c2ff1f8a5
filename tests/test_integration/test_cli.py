"""End-to-end CLI tests: resolve, inspect and config through the Typer app."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from specir import __version__
from specir.app import app
from specir.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNRESOLVABLE_REFERENCE,
    EXIT_UNSUPPORTED_DIALECT,
)


def _write(path: Path, document: dict[str, Any]) -> str:
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRootOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specir {__version__}" in result.stdout

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "resolve" in result.output


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolveCommand:
    """``specir resolve`` prints the camelCase IR."""

    def test_resolve_json(self, cli_runner, isolated_config: Path, petstore_v3_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "resolve", str(petstore_v3_path)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["version"] == "2.1.0"
        assert data["server"] == "https://prod.example.com/api"
        assert [s["name"] for s in data["services"]] == ["Default", "Pets"]
        operation = data["services"][1]["operations"][0]
        assert operation["name"] == "list"
        assert operation["parametersQuery"][0]["in"] == "query"

    def test_resolve_to_file(self, cli_runner, isolated_config: Path, petstore_v2_path: Path) -> None:
        target = isolated_config / "ir.json"
        result = cli_runner.invoke(app, ["-o", str(target), "resolve", str(petstore_v2_path)])
        assert result.exit_code == 0, result.output
        data = json.loads(target.read_text())
        assert data["version"] == "1.0.5"

    def test_exclude_param_option(
        self, cli_runner, isolated_config: Path, petstore_v2_path: Path
    ) -> None:
        result = cli_runner.invoke(
            app, ["--json", "resolve", str(petstore_v2_path), "--exclude-param", "limit"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        pets = next(s for s in data["services"] if s["name"] == "Pets")
        list_pets = pets["operations"][0]
        assert [p["prop"] for p in list_pets["parameters"]] == ["X-Request-ID"]

    def test_default_tag_from_project_config(
        self, cli_runner, isolated_config: Path, petstore_v2_path: Path
    ) -> None:
        (isolated_config / "specir.json").write_text(
            json.dumps({"resolver": {"default_tag": "misc"}})
        )
        result = cli_runner.invoke(app, ["--json", "resolve", str(petstore_v2_path)])
        assert result.exit_code == 0, result.output
        names = [s["name"] for s in json.loads(result.stdout)["services"]]
        assert "Misc" in names
        assert "Default" not in names

    def test_dangling_reference_exit_code(
        self, cli_runner, isolated_config: Path, petstore_v2_raw: dict[str, Any]
    ) -> None:
        document = copy.deepcopy(petstore_v2_raw)
        del document["definitions"]["Category"]
        source = _write(isolated_config / "broken.json", document)
        result = cli_runner.invoke(app, ["--no-color", "resolve", source])
        assert result.exit_code == EXIT_UNRESOLVABLE_REFERENCE
        assert "#/definitions/Category" in result.output

    def test_unsupported_dialect_exit_code(self, cli_runner, isolated_config: Path) -> None:
        source = _write(isolated_config / "v4.json", {"openapi": "4.0.0", "paths": {}})
        result = cli_runner.invoke(app, ["--no-color", "resolve", source])
        assert result.exit_code == EXIT_UNSUPPORTED_DIALECT

    def test_missing_file_exit_code(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "resolve", "nope.json"])
        assert result.exit_code == EXIT_SPEC_PARSE_ERROR
        assert "Document not found" in result.output

    def test_stdin(self, cli_runner, isolated_config: Path, petstore_v3_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "resolve", "-"], input=petstore_v3_path.read_text()
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["version"] == "2.1.0"


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspectCommands:
    def test_info(self, cli_runner, isolated_config: Path, petstore_v2_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "inspect", "info", str(petstore_v2_path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "version": "1.0.5",
            "server": "https://petstore.swagger.io/v2",
            "models": 7,
            "services": 3,
            "operations": 9,
        }

    def test_models_plain(self, cli_runner, isolated_config: Path, petstore_v3_path: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "inspect", "models", str(petstore_v3_path)])
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0] == "Model\tExport\tType\tProperties"
        assert "Status\tenumeration\tstring\t" in lines
        assert any(line.startswith("NewPet\trecord\tany\tname, tag") for line in lines)

    def test_services_json(self, cli_runner, isolated_config: Path, petstore_v3_path: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "inspect", "services", str(petstore_v3_path)])
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        health = next(r for r in rows if r["Path"] == "/health")
        assert health == {
            "Service": "Default",
            "Operation": "get",
            "Method": "GET",
            "Path": "/health",
            "Returns": "string",
        }

    def test_models_empty(self, cli_runner, isolated_config: Path, minimal_v3: dict[str, Any]) -> None:
        source = _write(isolated_config / "minimal.json", minimal_v3)
        result = cli_runner.invoke(app, ["--no-color", "inspect", "models", source])
        assert result.exit_code == 0
        assert "No models defined" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_defaults(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["resolver"]["default_tag"] == "Default"

    def test_set_scalar(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "resolver.default_tag", "Api"])
        assert result.exit_code == 0, result.output
        shown = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert json.loads(shown.stdout)["resolver"]["default_tag"] == "Api"

    def test_set_list(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["config", "set", "resolver.excluded_parameters", "X-Trace, X-Tenant"]
        )
        assert result.exit_code == 0, result.output
        shown = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert json.loads(shown.stdout)["resolver"]["excluded_parameters"] == [
            "X-Trace",
            "X-Tenant",
        ]

    @pytest.mark.parametrize("key", ["resolver.nope", "nope.default_tag", "resolver"])
    def test_set_unknown_key(self, cli_runner, isolated_config: Path, key: str) -> None:
        result = cli_runner.invoke(app, ["config", "set", key, "x"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_global_config_used_by_resolve(
        self, cli_runner, isolated_config: Path, petstore_v2_path: Path
    ) -> None:
        cli_runner.invoke(app, ["config", "set", "resolver.default_tag", "general"])
        result = cli_runner.invoke(app, ["--json", "resolve", str(petstore_v2_path)])
        names = [s["name"] for s in json.loads(result.stdout)["services"]]
        assert "General" in names

    def test_reset_force(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "resolver.default_tag", "Api"])
        result = cli_runner.invoke(app, ["--force", "config", "reset"])
        assert result.exit_code == 0, result.output
        shown = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert json.loads(shown.stdout)["resolver"]["default_tag"] == "Default"

    def test_reset_declined(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "resolver.default_tag", "Api"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        shown = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert json.loads(shown.stdout)["resolver"]["default_tag"] == "Api"
