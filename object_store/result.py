from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    ALREADY_EXISTS = "AlreadyExists"
    NOT_FOUND = "NotFound"
    CANNOT_REMOVE_CURRENT = "CannotRemoveCurrent"
    NOT_COMMITTED = "NotCommitted"
    NOTHING_TO_COMMIT = "NothingToCommit"
    NO_COMMITS_YET = "NoCommitsYet"
    COMMIT_NOT_FOUND = "CommitNotFound"


class ObjectStoreError(Exception):
    """Raised by Result.unwrap() when the result is a failure."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class Result:
    """
    Outcome of a store operation.

    Successes carry a message and an optional payload in `result`.
    Failures carry a message and an `error` kind, never a payload.
    """

    ok: bool
    message: str
    result: Any = None
    error: ErrorKind | None = None

    def __post_init__(self) -> None:
        if self.ok and self.error is not None:
            raise ValueError("A successful result cannot carry an error kind")
        if not self.ok and self.error is None:
            raise ValueError("A failed result needs an error kind")
        if not self.ok and self.result is not None:
            raise ValueError("A failed result cannot carry a payload")

    @classmethod
    def success(cls, message: str, result: Any = None) -> "Result":
        return cls(ok=True, message=message, result=result)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Result":
        return cls(ok=False, message=message, error=error)

    def is_success(self) -> bool:
        return self.ok

    def is_error(self) -> bool:
        return not self.ok

    def unwrap(self) -> Any:
        if not self.ok:
            assert self.error is not None
            raise ObjectStoreError(self.error, self.message)
        return self.result

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        name = "Success" if self.ok else "Failure"
        if cycle:
            p.text(f"{name}(...)")
        else:
            with p.group(4, f"{name}(", ")"):
                p.breakable()
                p.text(f"message={self.message!r},")
                p.breakable()
                if self.ok:
                    p.text("result=")
                    p.pretty(self.result)
                else:
                    assert self.error is not None
                    p.text(f"error={self.error.value}")
                p.breakable()
