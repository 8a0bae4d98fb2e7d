"""Pytest configuration file with shared fixtures."""

import os

# BLAS pools are sized when numpy is first imported.
for _var in (
    "OMP_NUM_THREADS",
    "OPENBLAS_NUM_THREADS",
    "MKL_NUM_THREADS",
    "VECLIB_MAXIMUM_THREADS",
    "NUMEXPR_NUM_THREADS",
):
    os.environ.setdefault(_var, "1")

from concurrent.futures import ThreadPoolExecutor, TimeoutError  # noqa: E402

import numpy as np  # noqa: E402
import pytest  # noqa: E402

import finitediff.utils.concurrency as conc  # noqa: E402

__all__ = ["extra_threads_ok"]


@pytest.fixture(autouse=True)
def _reset_worker_config(monkeypatch):
    """Start every test without a configured worker default."""
    monkeypatch.setattr(conc, "_DEFAULT_WORKERS", None, raising=False)
    monkeypatch.delenv(conc.WORKERS_ENV_VAR, raising=False)


@pytest.fixture
def rng():
    """Seeded generator so random inputs are reproducible."""
    return np.random.default_rng(20240611)


@pytest.fixture(scope="session")
def threads_ok():
    """Return a callable that checks thread-spawning capability.

    The returned function has signature `check(n=2, timeout=1.0) -> bool` and
    returns True if at least `n` threads can be started and joined within `timeout`.
    """
    def _can_spawn(n: int = 2, timeout: float = 1.0) -> bool:
        try:
            with ThreadPoolExecutor(max_workers=n) as ex:
                futs = [ex.submit(lambda: None) for _ in range(n)]
                for f in futs:
                    f.result(timeout=timeout)
            return True
        except (RuntimeError, MemoryError, OSError, TimeoutError):
            return False
    return _can_spawn


@pytest.fixture(scope="session")
def extra_threads_ok(threads_ok):
    """Convenience: True iff we can start >= 2 threads (common case)."""
    return threads_ok(2)
