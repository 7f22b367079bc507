import pytest

from object_store.impl.memory import Branch, BranchManager, Commit, Stage
from object_store.result import ErrorKind


def test_starts_with_master():
    manager = BranchManager()

    assert manager.names() == ["master"]
    assert manager.current.name == "master"
    assert manager.current.commits == []


def test_create_forks_current_commits():
    manager = BranchManager()
    stage = Stage()
    stage.add("a", 1)
    root = Commit("root", None, stage)
    manager.current.commit(root)

    result = manager.create("dev")

    assert result.is_success()
    assert result.message == "Created branch dev."
    assert result.result is None
    assert manager.current.name == "master", "create must not switch branches"
    assert manager.branches["dev"].commits == [root]
    assert manager.branches["dev"].commits is not manager.current.commits


def test_create_existing_branch_fails():
    manager = BranchManager()
    manager.create("dev")

    result = manager.create("dev")

    assert result.error is ErrorKind.ALREADY_EXISTS
    assert result.message == "Branch dev already exists."
    assert manager.create("master").error is ErrorKind.ALREADY_EXISTS


def test_remove():
    manager = BranchManager()
    manager.create("dev")

    result = manager.remove("dev")

    assert result.is_success()
    assert result.message == "Removed branch dev."
    assert manager.names() == ["master"]


def test_remove_missing_branch():
    result = BranchManager().remove("ghost")

    assert result.error is ErrorKind.NOT_FOUND
    assert result.message == "Branch ghost does not exist."


def test_remove_current_branch():
    manager = BranchManager()
    manager.create("dev")
    manager.checkout("dev")

    result = manager.remove("dev")

    assert result.error is ErrorKind.CANNOT_REMOVE_CURRENT
    assert result.message == "Cannot remove current branch."
    assert manager.exists("dev")
    assert manager.remove("master").is_success()


def test_checkout_calls_hook():
    switched = []
    manager = BranchManager(on_checkout=switched.append)
    manager.create("dev")

    result = manager.checkout("dev")

    assert result.is_success()
    assert result.result is manager.branches["dev"]
    assert manager.is_current("dev")
    assert switched == [manager.branches["dev"]]


def test_checkout_missing_branch():
    manager = BranchManager()

    result = manager.checkout("ghost")

    assert result.error is ErrorKind.NOT_FOUND
    assert result.message == "Branch ghost does not exist."
    assert manager.is_current("master")


@pytest.mark.parametrize(
    "branches, current, expected",
    [
        (["zeta", "alpha"], "alpha", "* alpha\n  master\n  zeta"),
        ([], "master", "* master"),
        (["b", "a"], "master", "  a\n  b\n* master"),
    ],
)
def test_list_is_sorted_and_marks_current(branches, current, expected):
    manager = BranchManager()
    for name in branches:
        manager.create(name)
    manager.checkout(current)

    result = manager.list()

    assert result.is_success()
    assert result.message == expected


def test_branch_find():
    stage = Stage()
    stage.add("a", 1)
    first = Commit("first", None, stage)
    second = Commit("second", first, Stage())
    branch = Branch("dev", [first, second])

    assert branch.last_commit is second
    assert branch.find(second.hash) == 1
    assert branch.find("nope") is None
    assert Branch("empty").last_commit is None
