# Overview: Store-level concurrency primitives used by the task state machine.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError

from ..extensions import db


def compare_and_swap(query, values: dict) -> int:
    """
    Apply ``values`` to every row matched by ``query`` in one UPDATE.

    The query's filters are the expected prior state (id, status, owner).
    The store evaluates them and writes in a single statement, so two callers
    racing on the same row cannot both match. Returns the number of rows
    changed; 0 means the expected state no longer holds.
    """
    return query.update(values, synchronize_session=False)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on transient lock failures.

    Retries on OperationalError (database locked, deadlock) after rolling
    the session back.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
