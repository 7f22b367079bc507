from typing import Any

from object_store.result import Result

Blob = Any
ObjectData = dict[str, Blob]


class BranchRegistry:
    """
    Set of named branches with exactly one of them checked out.
    """

    def create(self, name: str) -> Result:
        """Fork a new branch from the current one without switching to it."""
        raise NotImplementedError()

    def remove(self, name: str) -> Result:
        """Delete a branch other than the current one."""
        raise NotImplementedError()

    def checkout(self, name: str) -> Result:
        """Make the named branch the current one."""
        raise NotImplementedError()

    def list(self) -> Result:
        """Render all branch names sorted, marking the current branch."""
        raise NotImplementedError()


class ObjectRepo:
    """
    Repository of named objects with a staging area and per-branch history.

    Every operation returns a Result instead of raising on domain errors.
    """

    def add(self, name: str, value: Blob) -> Result:
        """Stage an object for addition."""
        raise NotImplementedError()

    def remove(self, name: str) -> Result:
        """Stage a committed object for removal."""
        raise NotImplementedError()

    def commit(self, message: str) -> Result:
        """Fold the staged changes into a new commit on the current branch."""
        raise NotImplementedError()

    def head(self) -> Result:
        """Return the latest commit of the current branch."""
        raise NotImplementedError()

    def log(self) -> Result:
        """Render the history of the current branch, newest first."""
        raise NotImplementedError()

    def checkout(self, commit_hash: str) -> Result:
        """Reset the current branch to an earlier commit, dropping later ones."""
        raise NotImplementedError()

    def get(self, name: str) -> Result:
        """Look up an object in the latest commit of the current branch."""
        raise NotImplementedError()

    @property
    def branch(self) -> BranchRegistry:
        """Branch operations: create, remove, checkout and list."""
        raise NotImplementedError()
