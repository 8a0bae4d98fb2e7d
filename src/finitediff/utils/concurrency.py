"""Worker configuration and thread-based execution for derivative computations."""

from __future__ import annotations

import contextvars
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Sequence, Tuple

__all__ = [
    "WORKERS_ENV_VAR",
    "set_default_workers",
    "use_workers",
    "normalize_workers",
    "resolve_workers",
    "split_into_chunks",
    "parallel_execute",
]


#: Environment variable consulted when no worker count is configured.
WORKERS_ENV_VAR = "FINITEDIFF_NUM_WORKERS"

# Context-var and default
_workers_var: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "finitediff_workers", default=None
)
_DEFAULT_WORKERS: int | None = None


def set_default_workers(n: int | None) -> None:
    """Sets the module-wide default number of workers.

    Args:
        n: Number of workers, or None to fall back to the environment.

    Returns:
        None
    """
    global _DEFAULT_WORKERS
    _DEFAULT_WORKERS = None if n is None else normalize_workers(n)


@contextmanager
def use_workers(n: int | None) -> Iterator[int | None]:
    """Temporarily sets the number of workers used when a call passes ``n_workers=None``.

    Args:
        n: Number of workers, or ``None`` to defer to the module default.

    Yields:
        int | None: The previous setting (restored on exit).
    """
    prev = _workers_var.get()
    token = _workers_var.set(None if n is None else normalize_workers(n))
    try:
        yield prev
    finally:
        _workers_var.reset(token)


def _int_env(name: str) -> int | None:
    """Reads a positive integer from an environment variable, or None if unset/invalid.

    Args:
        name: Environment variable name.

    Returns:
        Positive integer value, or None.
    """
    v = os.getenv(name)
    if not v:
        return None
    try:
        i = int(v)
        return i if i > 0 else None
    except ValueError:
        return None


def normalize_workers(
    n_workers: Any
) -> int:
    """Ensures n_workers is a positive integer, defaulting to 1.

    Args:
        n_workers: Input number of workers (can be None, float, negative, etc.)

    Returns:
        int: A positive integer number of workers (at least 1).
    """
    try:
        n = int(n_workers)
    except (TypeError, ValueError):
        n = 1
    return 1 if n < 1 else n


def resolve_workers(n_workers: Any = None) -> int:
    """Decides how many workers a derivative call uses.

    An explicit ``n_workers`` always wins. ``None`` resolves, in order, to the
    value set with :func:`use_workers`, the default set with
    :func:`set_default_workers`, the ``FINITEDIFF_NUM_WORKERS`` environment
    variable and finally 1.

    Args:
        n_workers: Requested number of workers or None.

    Returns:
        A positive number of workers.
    """
    if n_workers is not None:
        return normalize_workers(n_workers)
    w = _workers_var.get()
    if w is not None:
        return w
    if _DEFAULT_WORKERS is not None:
        return _DEFAULT_WORKERS
    env = _int_env(WORKERS_ENV_VAR)
    if env is not None:
        return env
    return 1


def split_into_chunks(items: Sequence[Any], n_chunks: int) -> list[list[Any]]:
    """Splits ``items`` into at most ``n_chunks`` contiguous, non-empty chunks.

    Chunk sizes differ by at most one and the concatenation of the chunks
    equals ``items``.
    """
    items = list(items)
    if not items:
        return []
    n = max(1, min(int(n_chunks), len(items)))
    base, extra = divmod(len(items), n)
    chunks = []
    start = 0
    for k in range(n):
        stop = start + base + (1 if k < extra else 0)
        chunks.append(items[start:stop])
        start = stop
    return chunks


def parallel_execute(
    worker: Callable[..., Any],
    arg_tuples: Sequence[Tuple[Any, ...]],
    *,
    n_workers: int = 1,
) -> list[Any]:
    """Runs ``worker(*args)`` for each tuple in arg_tuples, using threads when ``n_workers > 1``.

    Results are returned in the order of ``arg_tuples``. An exception raised
    by any task propagates to the caller.
    """
    if n_workers > 1 and len(arg_tuples) > 1:
        with ThreadPoolExecutor(max_workers=min(n_workers, len(arg_tuples))) as ex:
            futures = []
            for args in arg_tuples:
                # Each task gets its own copy of the current context
                ctx = contextvars.copy_context()
                futures.append(ex.submit(ctx.run, worker, *args))
            return [f.result() for f in futures]
    return [worker(*args) for args in arg_tuples]
