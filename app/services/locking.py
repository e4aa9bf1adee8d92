"""
Per-project locks for TCO recomputation.

Recalculation overwrites summaries and then reranks the whole project, so
two recomputes for the same project must not interleave. Reads of already
computed summaries do not take the lock.
"""

import threading
from contextlib import contextmanager

_registry_lock = threading.Lock()
_project_locks = {}


def get_project_lock(project_id: int) -> threading.RLock:
    """Return the re-entrant lock for a project, creating it on first use."""
    with _registry_lock:
        lock = _project_locks.get(project_id)
        if lock is None:
            lock = threading.RLock()
            _project_locks[project_id] = lock
        return lock


@contextmanager
def project_lock(project_id: int):
    lock = get_project_lock(project_id)
    with lock:
        yield
