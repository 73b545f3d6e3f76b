#!/usr/bin/env python3
"""
Test CLI commands end to end through cli.main.main.

These tests verify that:
1. stdout carries exactly one JSON document per command
2. Exit codes distinguish success, stale/failed work and config errors
3. Human-readable output stays on stderr
"""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from barrelkeep.core.header import HEADER_LINE
from cli.main import EXIT_CONFIG, build_parser, main

CONFIG = "formatter: false\nextensions: none\nrules:\n  - dirs: src\n"


def run_cli(capsys, *argv):
    """Run the CLI; return (exit_code, parsed stdout JSON, stderr)."""
    code = 0
    try:
        main(list(argv))
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
    out, err = capsys.readouterr()
    return code, json.loads(out), err


@pytest.fixture
def project(tmp_path, write_tree):
    write_tree(tmp_path, {
        "barrelkeep.config.yaml": CONFIG,
        "src/auth.ts": "",
        "src/billing.ts": "",
    })
    return tmp_path


class TestGenerate:
    def test_generate_writes_barrels(self, project, capsys):
        code, data, err = run_cli(capsys, "generate", "--cwd", str(project))

        assert code == 0
        assert data["ok"] is True
        assert data["counts"]["create"] == 1
        assert data["actions"] == [{"action": "create", "path": "src/index.ts"}]
        assert "CREATE" in err
        assert (project / "src" / "index.ts").read_text() == (
            HEADER_LINE + "export * from './auth';\nexport * from './billing';\n"
        )

    def test_second_run_is_up_to_date(self, project, capsys):
        run_cli(capsys, "generate", "--cwd", str(project))
        code, data, _ = run_cli(capsys, "generate", "--cwd", str(project))
        assert code == 0
        assert data["written"] == []
        assert data["actions"][0] == {"action": "skip", "path": "src/index.ts", "reason": "up-to-date"}

    def test_dry_run_writes_nothing(self, project, capsys):
        code, data, err = run_cli(capsys, "generate", "--dry-run", "--cwd", str(project))
        assert code == 0
        assert data["dry_run"] is True
        assert not (project / "src" / "index.ts").exists()
        assert not (project / "node_modules").exists()
        assert "1 would change" in err

    def test_no_cache_skips_cache_file(self, project, capsys):
        run_cli(capsys, "generate", "--no-cache", "--cwd", str(project))
        assert not (project / "node_modules").exists()

    def test_conflict_is_reported_not_overwritten(self, project, capsys):
        (project / "src" / "index.ts").write_text("export const mine = 1\n")
        code, data, err = run_cli(capsys, "generate", "--cwd", str(project))
        assert code == 0
        assert data["counts"]["conflict"] == 1
        assert "CONFLICT" in err
        assert (project / "src" / "index.ts").read_text() == "export const mine = 1\n"

    def test_directory_error_exits_one(self, project, capsys):
        (project / "src" / "foo-bar.ts").write_text("")
        (project / "src" / "foo_bar.ts").write_text("")
        (project / "barrelkeep.config.yaml").write_text(CONFIG + "    default_style: namespace\n")
        code, data, _ = run_cli(capsys, "generate", "--cwd", str(project))
        assert code == 1
        assert data["errors"][0]["type"] == "NamespaceCollision"

    def test_formatter_runs_on_written_files(self, project, capsys):
        (project / "barrelkeep.config.yaml").write_text(CONFIG.replace("formatter: false", "formatter: biome"))
        with patch("cli.commands.generate.format_files", return_value=True) as fmt:
            code, data, _ = run_cli(capsys, "generate", "--cwd", str(project))
        assert code == 0
        assert data["formatter"] == "biome"
        fmt.assert_called_once_with("biome", [str(project / "src" / "index.ts")], str(project))


class TestCheck:
    def test_check_fails_when_stale(self, project, capsys):
        code, data, err = run_cli(capsys, "check", "--cwd", str(project))
        assert code == 1
        assert data["stale"] == 1
        assert "is stale" in err
        assert not (project / "src" / "index.ts").exists()

    def test_check_passes_after_generate(self, project, capsys):
        run_cli(capsys, "generate", "--cwd", str(project))
        code, data, _ = run_cli(capsys, "check", "--cwd", str(project))
        assert code == 0
        assert data["ok"] is True


class TestConfigErrors:
    def test_missing_config_exits_two(self, tmp_path, capsys):
        code, data, err = run_cli(capsys, "generate", "--cwd", str(tmp_path))
        assert code == EXIT_CONFIG
        assert data == {"ok": False, "error": data["error"], "type": "ConfigNotFound"}
        assert "No config found" in err

    def test_invalid_config_exits_two(self, tmp_path, capsys):
        (tmp_path / "barrelkeep.config.yaml").write_text("rules: 3\n")
        code, data, _ = run_cli(capsys, "check", "--cwd", str(tmp_path))
        assert code == EXIT_CONFIG
        assert data["type"] == "ConfigInvalid"

    def test_explicit_config_path(self, project, capsys):
        (project / "barrelkeep.config.yaml").rename(project / "barrels.yaml")
        code, data, _ = run_cli(capsys, "generate", "-c", "barrels.yaml", "--cwd", str(project))
        assert code == 0
        assert data["ok"] is True

    def test_unexpected_error_exits_one(self, project, capsys):
        with patch("cli.commands.generate.plan_with_cache", side_effect=RuntimeError("boom")):
            code, data, _ = run_cli(capsys, "generate", "--cwd", str(project))
        assert code == 1
        assert data == {"ok": False, "error": "boom"}


class TestInitAndDoctor:
    def test_init_creates_starter_config(self, tmp_path, capsys):
        code, data, _ = run_cli(capsys, "init", "--cwd", str(tmp_path))
        assert code == 0
        assert data == {"ok": True, "created": "barrelkeep.config.yaml"}
        assert (tmp_path / "barrelkeep.config.yaml").is_file()

    def test_init_refuses_to_overwrite(self, project, capsys):
        code, data, _ = run_cli(capsys, "init", "--cwd", str(project))
        assert code == 0
        assert data["ok"] is False
        assert (project / "barrelkeep.config.yaml").read_text() == CONFIG

    def test_doctor_reports_stale_then_fix(self, project, capsys):
        code, data, err = run_cli(capsys, "doctor", "--cwd", str(project))
        assert code == 1
        assert any(c["status"] == "fail" and c["category"] == "lint" for c in data["checks"])
        assert "Setup" in err

        code, data, _ = run_cli(capsys, "doctor", "--fix", "--cwd", str(project))
        assert code == 0
        assert data["fixed"] == [str(project / "src" / "index.ts")]

    def test_doctor_without_config_still_reports(self, tmp_path, capsys):
        code, data, _ = run_cli(capsys, "doctor", "--cwd", str(tmp_path))
        assert code == 1
        assert data["checks"][0]["message"] == "No config file found"


class TestDaemonCommand:
    def test_status_when_not_running(self, project, capsys):
        code, data, _ = run_cli(capsys, "daemon", "status", "--cwd", str(project))
        assert code == 0
        assert data["running"] is False

    def test_start_requires_config(self, tmp_path, capsys):
        code, data, _ = run_cli(capsys, "daemon", "start", "--cwd", str(tmp_path))
        assert code == EXIT_CONFIG


def test_parser_rejects_unknown_daemon_action():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["daemon", "restart"])
