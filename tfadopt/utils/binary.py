import shutil
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any


class BinaryNotFoundError(Exception):
    pass


def ensure_binaries(binaries: Iterable[str]) -> None:
    for b in binaries:
        if not shutil.which(b):
            raise BinaryNotFoundError(
                f"Aborting: Could not find binary: {b}. "
                + f"Hint: https://command-not-found.com/{b}"
            )


def binary_option(option: str) -> Callable:
    """Check that the binary named by a command option exists before execution."""

    def deco_binary(f: Callable) -> Callable:
        @wraps(f)
        def f_binary(*args: Any, **kwargs: Any) -> Any:
            ensure_binaries([kwargs[option]])
            return f(*args, **kwargs)

        return f_binary

    return deco_binary
