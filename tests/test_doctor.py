import json

import pytest

from barrelkeep.config.schema import build_config
from barrelkeep.core import doctor
from barrelkeep.core.doctor import Fail, Pass, Suggestion
from barrelkeep.core.header import HEADER_LINE
from barrelkeep.core.listing import OsDirectoryLister

pytestmark = pytest.mark.unit


def _messages(checks, kind=None):
    return [c.message for c in checks if kind is None or isinstance(c, kind)]


def test_missing_config_fails_with_fix(tmp_path):
    (check,) = doctor.check_config(str(tmp_path))
    assert isinstance(check, Fail)
    assert "init" in check.fix


def test_invalid_config_reports_parse_error(tmp_path):
    (tmp_path / "barrelkeep.config.yaml").write_text("nope: 1\n")
    found, parsed = doctor.check_config(str(tmp_path))
    assert isinstance(found, Pass)
    assert isinstance(parsed, Fail)
    assert parsed.message.startswith("Config parse error")


def test_valid_config_counts_rules(tmp_path):
    (tmp_path / "barrelkeep.config.yaml").write_text("rules:\n  - dirs: src\n  - dirs: lib\n")
    checks = doctor.check_config(str(tmp_path))
    assert _messages(checks) == ["Config file found", "Config valid (2 rules)"]


def test_zero_rules_fail():
    assert isinstance(doctor.check_rules_exist(build_config({})), Fail)


def test_rule_matching_nothing_fails(tmp_path, write_tree):
    write_tree(tmp_path, {"src/a.ts": ""})
    config = build_config({"rules": [{"dirs": "src"}, {"dirs": "missing/*"}]})
    ok, bad = (doctor.check_rule_dirs_match(r, str(tmp_path), OsDirectoryLister()) for r in config.rules)
    assert isinstance(ok, Pass)
    assert isinstance(bad, Fail)
    assert "missing/*" in bad.message


def test_formatter_checks(tmp_path):
    assert doctor.check_formatter(build_config({"formatter": False}), str(tmp_path)).message.endswith("disabled (config)")
    assert doctor.check_formatter(build_config({"formatter": "biome"}), str(tmp_path)).message == "Formatter: biome (config)"
    assert isinstance(doctor.check_formatter(build_config({}), str(tmp_path)), Fail)
    (tmp_path / "package.json").write_text(json.dumps({"devDependencies": {"prettier": "^3"}}))
    assert doctor.check_formatter(build_config({}), str(tmp_path)).message == "Formatter: prettier"


def test_staleness_counts_creates_and_updates(tmp_path, write_tree):
    write_tree(tmp_path, {"a/x.ts": "", "b/y.ts": "", "b/index.ts": HEADER_LINE})
    config = build_config({"extensions": "none", "rules": [{"dirs": "*"}]})
    check = doctor.check_staleness(config, str(tmp_path), OsDirectoryLister())
    assert isinstance(check, Fail)
    assert check.message == "2 index files are stale (1 to create, 1 to update)"


def test_namespace_collisions_reported(tmp_path, write_tree):
    write_tree(tmp_path, {"src/foo-bar.ts": "", "src/foo_bar.ts": ""})
    config = build_config({"rules": [{"dirs": "src", "default_style": "namespace"}]})
    (check,) = doctor.check_namespace_collisions(config, str(tmp_path), OsDirectoryLister())
    assert isinstance(check, Fail)
    assert "FooBar" in check.message


def test_unmanaged_directory_suggestion(tmp_path, write_tree):
    write_tree(tmp_path, {"src/a.ts": "", "src/lib/b.ts": "", "src/lib/c.tsx": ""})
    config = build_config({"rules": [{"dirs": "src"}]})
    checks = doctor.check_unmanaged_directories(config, str(tmp_path), OsDirectoryLister())
    assert _messages(checks) == ["src/lib/ has 2 .ts files with no index.ts, consider adding a rule"]


def test_hand_written_barrel_suggestion(tmp_path, write_tree):
    write_tree(tmp_path, {
        "src/a.ts": "",
        "src/index.ts": "// barrel\nexport * from './a'\n",
        "lib/index.ts": "export const x = 1\nconsole.log(x)\n",
    })
    config = build_config({"rules": [{"dirs": "src"}, {"dirs": "lib"}]})
    checks = doctor.check_hand_written_barrels(config, str(tmp_path), OsDirectoryLister())
    assert len(checks) == 1
    assert checks[0].message.startswith("src/index.ts looks like a hand-written barrel")


@pytest.mark.parametrize(
    "content,expected",
    [
        ("export * from './a'\n", True),
        ("// comment\n\nexport { a } from './a'\n", True),
        ("", False),
        ("import x from 'y'\nexport default x\n", False),
    ],
)
def test_looks_like_barrel(content, expected):
    assert doctor.looks_like_barrel(content) is expected


def test_run_doctor_on_healthy_project(tmp_path, write_tree):
    write_tree(tmp_path, {
        "barrelkeep.config.yaml": "formatter: false\nextensions: none\nrules:\n  - dirs: src\n",
        "src/a.ts": "",
        "src/index.ts": HEADER_LINE + "export * from './a';\n",
    })
    from barrelkeep.config.loader import load_resolved_config

    checks = doctor.run_doctor(load_resolved_config(str(tmp_path)), str(tmp_path))
    assert not doctor.has_failures(checks)
    assert "1 managed index files, all up-to-date" in _messages(checks, Pass)


def test_format_doctor_results_groups_by_category():
    checks = [
        Suggestion(doctor.SUGGESTION, "maybe"),
        Pass(doctor.SETUP, "ok"),
        Fail(doctor.LINT, "broken", "fix it"),
    ]
    text = doctor.format_doctor_results(checks)
    assert text.index("Setup") < text.index("Lint") < text.index("Suggestions")
    assert "✗ broken\n      → fix it" in text
    assert text.rstrip().endswith("1 passed, 1 failed, 1 suggestions")


def test_check_to_dict():
    assert doctor.check_to_dict(Fail(doctor.LINT, "m", "f")) == {
        "status": "fail", "category": "lint", "message": "m", "fix": "f",
    }
    assert doctor.check_to_dict(Pass(doctor.SETUP, "m")) == {"status": "pass", "category": "setup", "message": "m"}
