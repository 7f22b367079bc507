from .base import Blob, BranchRegistry, ObjectRepo
from .config import HashMode, ObjectStoreConfig
from .result import ErrorKind, ObjectStoreError, Result
from .impl.memory import (
    Branch,
    BranchManager,
    Commit,
    MemoryObjectStore,
    Stage,
    create_memory_object_store,
)

__all__ = [
    "Blob",
    "BranchRegistry",
    "ObjectRepo",
    "HashMode",
    "ObjectStoreConfig",
    "ErrorKind",
    "ObjectStoreError",
    "Result",
    "Branch",
    "BranchManager",
    "Commit",
    "MemoryObjectStore",
    "Stage",
    "create_memory_object_store",
]
