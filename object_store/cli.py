import argparse
import logging
import shlex
import sys
from typing import Iterable, TextIO

from object_store.config import HashMode, ObjectStoreConfig, parse_hash_mode
from object_store.impl.memory import MemoryObjectStore, create_memory_object_store
from object_store.result import Result

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class UsageError(Exception):
    pass


def _expect(args: list[str], count: int, usage: str) -> None:
    if len(args) != count:
        raise UsageError(f"usage: {usage}")


def run_command(store: MemoryObjectStore, tokens: list[str]) -> Result:
    """Dispatch one tokenized script line to the store."""
    command, args = tokens[0], tokens[1:]

    if command == "add":
        _expect(args, 2, "add NAME VALUE")
        return store.add(args[0], args[1])
    if command == "remove":
        _expect(args, 1, "remove NAME")
        return store.remove(args[0])
    if command == "commit":
        _expect(args, 1, "commit MESSAGE")
        return store.commit(args[0])
    if command == "head":
        _expect(args, 0, "head")
        return store.head()
    if command == "log":
        _expect(args, 0, "log")
        return store.log()
    if command == "checkout":
        _expect(args, 1, "checkout HASH")
        return store.checkout(args[0])
    if command in ("get", "show"):
        _expect(args, 1, f"{command} NAME")
        result = store.get(args[0])
        if command == "show" and result.is_success():
            return Result.success(str(result.result), result.result)
        return result
    if command == "branch":
        if args == ["list"]:
            return store.branch.list()
        if len(args) == 2 and args[0] in ("create", "remove", "checkout"):
            return getattr(store.branch, args[0])(args[1])
        raise UsageError("usage: branch create|remove|checkout NAME | branch list")

    raise UsageError(f"unknown command '{command}'")


def run_script(
    store: MemoryObjectStore,
    lines: Iterable[str],
    keep_going: bool = False,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    exit_code = EXIT_OK

    for lineno, line in enumerate(lines, start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            print(f"error: line {lineno}: {e}", file=err)
            return EXIT_USAGE
        if not tokens:
            continue

        try:
            result = run_command(store, tokens)
        except UsageError as e:
            print(f"error: line {lineno}: {e}", file=err)
            return EXIT_USAGE

        if result.is_success():
            print(result.message, file=out)
            continue

        logger.debug("Line %d failed with %s", lineno, result.error)
        print(f"error: {result.message}", file=err)
        exit_code = EXIT_FAILURE
        if not keep_going:
            break

    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run a script of object store commands against a fresh store"
    )
    parser.add_argument(
        "script",
        nargs="?",
        default=None,
        help="Script file, one command per line (default: stdin)",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue after a failed command",
    )
    parser.add_argument(
        "--hash-mode",
        type=parse_hash_mode,
        default=None,
        help=f"Commit hash derivation: {', '.join(m.value for m in HashMode)}",
    )
    parser.add_argument("--default-branch", default=None, help="Initial branch name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    config = ObjectStoreConfig.from_env()
    if args.hash_mode is not None:
        config.hash_mode = args.hash_mode
    if args.default_branch:
        config.default_branch = args.default_branch

    store = create_memory_object_store(config=config)
    if args.script is None:
        return run_script(store, sys.stdin, keep_going=args.keep_going)
    with open(args.script) as f:
        return run_script(store, f, keep_going=args.keep_going)


if __name__ == "__main__":
    sys.exit(main())
