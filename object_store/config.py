import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable


class HashMode(Enum):
    """
    How a commit hash is derived.

    LEGACY hashes the formatted commit date and the message only, so two
    commits made within the same minute with the same message share a hash.
    CONTENT also covers the parent hash and the staged changes.
    """

    LEGACY = "legacy"
    CONTENT = "content"


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class ObjectStoreConfig:
    default_branch: str = "master"
    hash_mode: HashMode = HashMode.LEGACY
    clock: Callable[[], datetime] = field(default=local_now)

    def __post_init__(self) -> None:
        if not isinstance(self.hash_mode, HashMode):
            self.hash_mode = parse_hash_mode(self.hash_mode)
        if not self.default_branch:
            raise ValueError("Default branch name must not be empty")

    @classmethod
    def from_env(cls) -> "ObjectStoreConfig":
        """
        Build a config from environment variables.

        OBJECT_STORE_DEFAULT_BRANCH overrides the initial branch name and
        OBJECT_STORE_HASH_MODE selects "legacy" or "content" hashing.
        """
        return cls(
            default_branch=os.environ.get("OBJECT_STORE_DEFAULT_BRANCH", "master"),
            hash_mode=parse_hash_mode(
                os.environ.get("OBJECT_STORE_HASH_MODE", HashMode.LEGACY.value)
            ),
        )


def parse_hash_mode(value: str) -> HashMode:
    try:
        return HashMode(value.lower())
    except (ValueError, AttributeError):
        choices = ", ".join(mode.value for mode in HashMode)
        raise ValueError(f"Unknown hash mode '{value}' (expected one of: {choices})")
