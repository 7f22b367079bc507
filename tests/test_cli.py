from pathlib import Path

import pytest

from object_store.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main, run_script
from object_store.impl.memory import MemoryObjectStore

SCRIPT = """\
# build a small history
add readme "hello world"
commit "Initial commit"
branch create dev
branch checkout dev
add notes draft
commit 'Add notes'
show readme
branch list
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("OBJECT_STORE_DEFAULT_BRANCH", raising=False)
    monkeypatch.delenv("OBJECT_STORE_HASH_MODE", raising=False)


def test_run_script(store: MemoryObjectStore, capsys):
    code = run_script(store, SCRIPT.splitlines())

    out, err = capsys.readouterr()
    assert code == EXIT_OK
    assert err == ""
    assert out.splitlines() == [
        "Added readme to stage.",
        "Initial commit",
        "\t1 objects changed",
        "Created branch dev.",
        "Switched to branch dev.",
        "Added notes to stage.",
        "Add notes",
        "\t1 objects changed",
        "hello world",
        "* dev",
        "  master",
    ]


def test_run_script_stops_on_failure(store: MemoryObjectStore, capsys):
    lines = ["commit empty", "add f 1"]

    code = run_script(store, lines)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert out == ""
    assert err == "error: Nothing to commit, working directory clean.\n"
    assert store.stage.is_empty(), "Second line must not run"


def test_run_script_keep_going(store: MemoryObjectStore, capsys):
    lines = ["get missing", "add f 1", "commit m1", "get f"]

    code = run_script(store, lines, keep_going=True)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert "error: Object missing is not committed." in err
    assert out.endswith("Found object f.\n")


@pytest.mark.parametrize("line", ["frobnicate", "add onlyname", "branch rename a", "log extra"])
def test_run_script_usage_errors(store: MemoryObjectStore, capsys, line):
    code = run_script(store, [line])

    _, err = capsys.readouterr()
    assert code == EXIT_USAGE
    assert err.startswith("error: line 1:")


def test_main_reads_script_file(tmp_path: Path, capsys):
    script = tmp_path / "script.txt"
    script.write_text("add f 1\ncommit m1\nlog\n")

    code = main([str(script), "--hash-mode", "content", "--default-branch", "main"])

    out, _ = capsys.readouterr()
    assert code == EXIT_OK
    assert "Commit " in out
    assert "\tm1" in out


def test_main_branch_override(tmp_path: Path, capsys):
    script = tmp_path / "script.txt"
    script.write_text("branch list\nbranch remove main\n")

    code = main([str(script), "--default-branch", "main"])

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert out == "* main\n"
    assert err == "error: Cannot remove current branch.\n"


def test_main_rejects_unknown_hash_mode(tmp_path: Path):
    script = tmp_path / "script.txt"
    script.write_text("")

    with pytest.raises(SystemExit) as excinfo:
        main([str(script), "--hash-mode", "md5"])

    assert excinfo.value.code == 2
