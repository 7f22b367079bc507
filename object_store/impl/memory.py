import functools
import hashlib
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Iterator

from object_store.base import Blob, BranchRegistry, ObjectData, ObjectRepo
from object_store.config import HashMode, ObjectStoreConfig
from object_store.result import ErrorKind, Result

logger = logging.getLogger(__name__)

DATE_FORMAT = "%a %b %d %H:%M %Y %z"

# Every commit at a depth divisible by this keeps its resolved objects.
CHECKPOINT_INTERVAL = 32


class Stage:
    """
    Pending changes not yet committed: objects to add and names to remove.

    The stage remembers the commit it was started from, so `get` answers what
    a name would resolve to once the stage is committed.
    """

    def __init__(self, base: "Commit | None" = None) -> None:
        self.base = base
        self.added_objects: ObjectData = {}
        self.removed_objects: set[str] = set()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Stage(...)")
        else:
            with p.group(4, "Stage(", ")"):
                p.breakable()
                p.text(f"base={self.base.hash[:7] if self.base else None},")
                p.breakable()
                p.text("added=")
                p.pretty(self.added_objects)
                p.text(",")
                p.breakable()
                p.text(f"removed={sorted(self.removed_objects)},")
                p.breakable()

    def add(self, name: str, value: Blob) -> None:
        self.removed_objects.discard(name)
        self.added_objects[name] = value

    def remove(self, name: str) -> None:
        self.added_objects.pop(name, None)
        self.removed_objects.add(name)

    def get(self, name: str) -> Blob | None:
        if name in self.added_objects:
            return self.added_objects[name]
        if name in self.removed_objects or self.base is None:
            return None
        return self.base.object(name)

    def is_empty(self) -> bool:
        return not self.added_objects and not self.removed_objects

    def size(self) -> int:
        return len(self.added_objects) + len(self.removed_objects)


class Commit:
    """
    Immutable snapshot node.

    A commit stores only the changes staged for it; the objects visible at a
    commit are its parent's objects overlaid with its own additions, minus
    its own removals. Resolved mappings are kept on checkpoint commits and in a
    small shared cache of recent lookups.
    """

    def __init__(
        self,
        message: str,
        parent: "Commit | None",
        stage: Stage,
        *,
        date: datetime | None = None,
        hash_mode: HashMode = HashMode.LEGACY,
    ) -> None:
        self._message = message
        self._parent = parent
        self._added = MappingProxyType(dict(stage.added_objects))
        self._removed = frozenset(stage.removed_objects)
        self._depth = parent._depth + 1 if parent else 0
        self._date = date or datetime.now().astimezone()
        self._objects: ObjectData | None = None
        self._hash = self._compute_hash(hash_mode)

    def _compute_hash(self, hash_mode: HashMode) -> str:
        if hash_mode is HashMode.LEGACY:
            return hashlib.sha1(
                f"{self.formatted_date}{self._message}".encode("utf-8")
            ).hexdigest()

        digest = hashlib.sha1()
        parts = [
            self.formatted_date,
            self._message,
            self._parent.hash if self._parent else "",
        ]
        for name in sorted(self._added):
            parts.append(f"+{name}={self._added[name]!r}")
        for name in sorted(self._removed):
            parts.append(f"-{name}")
        for part in parts:
            digest.update(part.encode("utf-8"))
            digest.update(b"\0")
        return digest.hexdigest()

    @property
    def message(self) -> str:
        return self._message

    @property
    def parent(self) -> "Commit | None":
        return self._parent

    @property
    def stage(self) -> Stage:
        """A detached copy of the changes this commit applied."""
        stage = Stage(self._parent)
        stage.added_objects = dict(self._added)
        stage.removed_objects = set(self._removed)
        return stage

    @property
    def added_objects(self) -> "MappingProxyType[str, Blob]":
        return self._added

    @property
    def removed_objects(self) -> frozenset[str]:
        return self._removed

    @property
    def depth(self) -> int:
        return self._depth

    def is_checkpoint(self) -> bool:
        return self._depth % CHECKPOINT_INTERVAL == 0

    @property
    def date(self) -> datetime:
        return self._date

    @property
    def hash(self) -> str:
        return self._hash

    @property
    def formatted_date(self) -> str:
        return self._date.strftime(DATE_FORMAT)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Commit(...)")
        else:
            with p.group(4, "Commit(", ")"):
                p.breakable()
                p.text(f"hash={self._hash[:7]},")
                p.breakable()
                p.text(f"message={self._message!r},")
                p.breakable()
                p.text(f"parent={self._parent.hash[:7] if self._parent else None},")
                p.breakable()
                p.text("added=")
                p.pretty(dict(self._added))
                p.text(",")
                p.breakable()
                p.text(f"removed={sorted(self._removed)},")
                p.breakable()

    def __str__(self) -> str:
        return f"Commit {self._hash}\nDate: {self.formatted_date}\n\n\t{self._message}"

    def ancestors(self) -> Iterator["Commit"]:
        """Yield this commit and then each parent up to the root."""
        commit: Commit | None = self
        while commit is not None:
            yield commit
            commit = commit._parent

    def _merged(self) -> ObjectData:
        if self._objects is not None:
            return self._objects
        return _resolve(self)

    def objects(self) -> ObjectData:
        return dict(self._merged())

    def values(self) -> list[Blob]:
        return list(self._merged().values())

    def object(self, name: str) -> Blob | None:
        return self._merged().get(name)

    def has_object(self, name: str) -> bool:
        return name in self._merged()


@functools.lru_cache(maxsize=128)
def _resolve(commit: Commit) -> ObjectData:
    # Walk up to the nearest checkpoint holding its objects, then overlay downwards.
    pending = []
    merged: ObjectData = {}
    for ancestor in commit.ancestors():
        if ancestor._objects is not None:
            merged = dict(ancestor._objects)
            break
        pending.append(ancestor)

    for ancestor in reversed(pending):
        merged.update(ancestor._added)
        for name in ancestor._removed:
            merged.pop(name, None)
        if ancestor.is_checkpoint():
            ancestor._objects = dict(merged)

    return merged


class Branch:
    def __init__(self, name: str, commits: list[Commit] | None = None) -> None:
        self.name = name
        self.commits: list[Commit] = list(commits or [])

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Branch(...)")
        else:
            with p.group(4, "Branch(", ")"):
                p.breakable()
                p.text(f"name='{self.name}',")
                p.breakable()
                p.text(f"commits={[commit.hash[:7] for commit in self.commits]},")
                p.breakable()

    @property
    def last_commit(self) -> Commit | None:
        return self.commits[-1] if self.commits else None

    def commit(self, commit: Commit) -> None:
        self.commits.append(commit)

    def find(self, commit_hash: str) -> int | None:
        for index, commit in enumerate(self.commits):
            if commit.hash == commit_hash:
                return index
        return None


class BranchManager(BranchRegistry):
    def __init__(
        self,
        default_branch: str = "master",
        on_checkout: Callable[[Branch], None] | None = None,
    ) -> None:
        self.current_branch = Branch(default_branch)
        self.branches: dict[str, Branch] = {default_branch: self.current_branch}
        self.on_checkout = on_checkout

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("BranchManager(...)")
        else:
            with p.group(4, "BranchManager(", ")"):
                p.breakable()
                p.text(f"current='{self.current_branch.name}',")
                p.breakable()
                p.text("branches=")
                p.pretty([self.branches[name] for name in self.names()])
                p.breakable()

    @property
    def current(self) -> Branch:
        return self.current_branch

    def exists(self, name: str) -> bool:
        return name in self.branches

    def is_current(self, name: str) -> bool:
        return self.current_branch.name == name

    def names(self) -> list[str]:
        return sorted(self.branches)

    def create(self, name: str) -> Result:
        if self.exists(name):
            return Result.failure(
                ErrorKind.ALREADY_EXISTS, f"Branch {name} already exists."
            )

        self.branches[name] = Branch(name, self.current_branch.commits)
        logger.debug(
            "Created branch %s from %s at %d commits",
            name,
            self.current_branch.name,
            len(self.current_branch.commits),
        )
        return Result.success(f"Created branch {name}.")

    def remove(self, name: str) -> Result:
        if not self.exists(name):
            return Result.failure(ErrorKind.NOT_FOUND, f"Branch {name} does not exist.")
        if self.is_current(name):
            return Result.failure(
                ErrorKind.CANNOT_REMOVE_CURRENT, "Cannot remove current branch."
            )

        del self.branches[name]
        logger.debug("Removed branch %s", name)
        return Result.success(f"Removed branch {name}.")

    def checkout(self, name: str) -> Result:
        if not self.exists(name):
            return Result.failure(ErrorKind.NOT_FOUND, f"Branch {name} does not exist.")

        self.current_branch = self.branches[name]
        if self.on_checkout is not None:
            self.on_checkout(self.current_branch)
        logger.debug("Switched to branch %s", name)
        return Result.success(f"Switched to branch {name}.", self.current_branch)

    def list(self) -> Result:
        lines = [
            f"* {name}" if self.is_current(name) else f"  {name}"
            for name in self.names()
        ]
        return Result.success("\n".join(lines))


class MemoryObjectStore(ObjectRepo):
    """
    Object store living in process memory.

    Holds the stage of pending changes and the branch manager; commits are
    created here and appended to the current branch.
    """

    @classmethod
    def init(
        cls,
        setup: "Callable[[MemoryObjectStore], Any] | None" = None,
        config: ObjectStoreConfig | None = None,
    ) -> "MemoryObjectStore":
        """
        Create a fresh store and run `setup` against it.

        `setup` is a plain function issuing calls on the store's public API,
        which makes it easy to describe a starting history declaratively.
        """
        store = cls(config)
        if setup is not None:
            setup(store)
        return store

    def __init__(self, config: ObjectStoreConfig | None = None) -> None:
        self.config = config or ObjectStoreConfig()
        self._stage = Stage()
        self._branch_manager = BranchManager(
            self.config.default_branch, on_checkout=self._reset_stage
        )

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryObjectStore(...)")
        else:
            with p.group(4, "MemoryObjectStore(", ")"):
                p.breakable()
                p.text(f"branch='{self.current_branch.name}',")
                p.breakable()
                p.text("head=")
                p.pretty(self.last_commit)
                p.text(",")
                p.breakable()
                p.text("stage=")
                p.pretty(self._stage)
                p.text(",")
                p.breakable()

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def branch_manager(self) -> BranchManager:
        return self._branch_manager

    @property
    def branch(self) -> BranchManager:
        return self._branch_manager

    @property
    def current_branch(self) -> Branch:
        return self._branch_manager.current_branch

    @property
    def last_commit(self) -> Commit | None:
        return self.current_branch.last_commit

    def _reset_stage(self, branch: Branch) -> None:
        self._stage = Stage(branch.last_commit)

    def _no_commits(self) -> Result:
        return Result.failure(
            ErrorKind.NO_COMMITS_YET,
            f"Branch {self.current_branch.name} does not have any commits yet.",
        )

    def add(self, name: str, value: Blob) -> Result:
        self._stage.add(name, value)
        return Result.success(f"Added {name} to stage.", value)

    def remove(self, name: str) -> Result:
        last_commit = self.last_commit
        if last_commit is None or not last_commit.has_object(name):
            return Result.failure(
                ErrorKind.NOT_COMMITTED, f"Object {name} is not committed."
            )

        self._stage.remove(name)
        return Result.success(
            f"Added {name} for removal.", last_commit.object(name)
        )

    def commit(self, message: str) -> Result:
        if self._stage.is_empty():
            return Result.failure(
                ErrorKind.NOTHING_TO_COMMIT,
                "Nothing to commit, working directory clean.",
            )

        changed = self._stage.size()
        commit = Commit(
            message,
            self.last_commit,
            self._stage,
            date=self.config.clock(),
            hash_mode=self.config.hash_mode,
        )
        self.current_branch.commit(commit)
        self._stage = Stage(commit)

        logger.debug(
            "Committed %s on %s (%d objects changed)",
            commit.hash[:7],
            self.current_branch.name,
            changed,
        )
        return Result.success(f"{message}\n\t{changed} objects changed", commit)

    def head(self) -> Result:
        last_commit = self.last_commit
        if last_commit is None:
            return self._no_commits()
        return Result.success(last_commit.message, last_commit)

    def log(self) -> Result:
        commits = self.current_branch.commits
        if not commits:
            return self._no_commits()
        return Result.success("\n\n".join(str(commit) for commit in reversed(commits)))

    def checkout(self, commit_hash: str) -> Result:
        branch = self.current_branch
        index = branch.find(commit_hash)
        if index is None:
            return Result.failure(
                ErrorKind.COMMIT_NOT_FOUND, f"Commit {commit_hash} does not exist."
            )

        dropped = len(branch.commits) - index - 1
        branch.commits = branch.commits[: index + 1]
        self._reset_stage(branch)

        logger.debug(
            "Reset %s to %s, dropped %d commits", branch.name, commit_hash[:7], dropped
        )
        return Result.success(f"HEAD is now at {commit_hash}.", branch.last_commit)

    def get(self, name: str) -> Result:
        last_commit = self.last_commit
        if last_commit is None or not last_commit.has_object(name):
            return Result.failure(
                ErrorKind.NOT_COMMITTED, f"Object {name} is not committed."
            )
        return Result.success(f"Found object {name}.", last_commit.object(name))


def create_memory_object_store(
    setup: Callable[[MemoryObjectStore], Any] | None = None,
    config: ObjectStoreConfig | None = None,
) -> MemoryObjectStore:
    return MemoryObjectStore.init(setup, config)
