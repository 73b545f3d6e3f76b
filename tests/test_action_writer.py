import pytest

from barrelkeep.core.action import Conflict, Create, Skip, Update, action_kind, is_writable, match_action
from barrelkeep.core.header import HEADER_LINE
from barrelkeep.core.writer import execute_write, plan_write

pytestmark = pytest.mark.unit


def test_match_action_dispatches_every_variant():
    handlers = dict(
        create=lambda a: "c",
        update=lambda a: "u",
        skip=lambda a: "s",
        conflict=lambda a: "x",
    )
    assert match_action(Create("p", "x"), **handlers) == "c"
    assert match_action(Update("p", "x"), **handlers) == "u"
    assert match_action(Skip("p", "r"), **handlers) == "s"
    assert match_action(Conflict("p", "r"), **handlers) == "x"
    with pytest.raises(TypeError):
        match_action("nope", **handlers)


def test_action_kind_and_writable():
    assert action_kind(Create("p", "")) == "create"
    assert is_writable(Update("p", ""))
    assert not is_writable(Skip("p", "up-to-date"))
    assert not is_writable(Conflict("p", "hand-written"))


def test_plan_write_missing_file_creates(tmp_path):
    target = tmp_path / "index.ts"
    assert plan_write(str(target), HEADER_LINE) == Create(str(target), HEADER_LINE)


def test_plan_write_foreign_file_conflicts(tmp_path):
    target = tmp_path / "index.ts"
    target.write_text("export * from './mine'\n")
    assert plan_write(str(target), HEADER_LINE) == Conflict(str(target), "hand-written")


def test_plan_write_header_must_be_exact_first_line(tmp_path):
    target = tmp_path / "index.ts"
    target.write_text("\n" + HEADER_LINE)
    assert isinstance(plan_write(str(target), HEADER_LINE), Conflict)


def test_plan_write_identical_skips(tmp_path):
    target = tmp_path / "index.ts"
    content = HEADER_LINE + "export * from './a'\n"
    target.write_text(content)
    assert plan_write(str(target), content) == Skip(str(target), "up-to-date")


def test_plan_write_whitespace_difference_updates(tmp_path):
    target = tmp_path / "index.ts"
    content = HEADER_LINE + "export * from './a'\n"
    target.write_bytes((HEADER_LINE + "export * from './a'\r\n").encode("utf-8"))
    assert plan_write(str(target), content) == Update(str(target), content)


def test_plan_write_binary_file_conflicts(tmp_path):
    target = tmp_path / "index.ts"
    target.write_bytes(b"\xff\xfe\x00binary")
    assert isinstance(plan_write(str(target), HEADER_LINE), Conflict)


def test_execute_write_calls_hook_before_writing(tmp_path):
    target = tmp_path / "index.ts"
    seen = []

    def hook(path):
        seen.append((path, target.exists()))

    assert execute_write(Create(str(target), HEADER_LINE), hook) is True
    assert seen == [(str(target), False)]
    assert target.read_text() == HEADER_LINE


def test_execute_write_ignores_skip_and_conflict(tmp_path):
    target = tmp_path / "index.ts"
    target.write_text("hand written\n")
    hook_calls = []
    assert execute_write(Conflict(str(target), "hand-written"), hook_calls.append) is False
    assert execute_write(Skip(str(target), "up-to-date"), hook_calls.append) is False
    assert hook_calls == []
    assert target.read_text() == "hand written\n"
