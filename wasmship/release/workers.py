"""Fail-fast fan-out over per-contract tasks."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from wasmship.core.result import Err, Ok, Result
from wasmship.release.errors import RunCancelled


def run_fail_fast[I, T, E](
    items: Sequence[I],
    task: Callable[[I], Result[T, E]],
    *,
    jobs: int = 0,
    cancel: threading.Event | None = None,
) -> Result[list[T], E | RunCancelled]:
    """Run `task` over `items` in a thread pool; the first Err wins.

    Results come back in input order whatever the completion order. Once a
    task fails, or `cancel` is set, no further task starts. Tasks already
    running are allowed to finish (their subprocesses cannot be interrupted
    safely) and their results are discarded. A run cut short by `cancel`
    alone returns RunCancelled.

    Args:
        jobs: Maximum workers; 0 means one per item.
        cancel: Set by the caller to stop the run from outside.
    """
    if not items:
        return Ok([])

    workers = min(jobs if jobs > 0 else len(items), len(items))
    failed = threading.Event()
    done: dict[int, T] = {}

    def guarded(item: I) -> Result[T, E] | None:
        if failed.is_set() or (cancel is not None and cancel.is_set()):
            return None
        outcome = task(item)
        if isinstance(outcome, Err):
            # Set before returning so a free worker never picks up the next item.
            failed.set()
        return outcome

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wasmship")
    try:
        futures: dict[Future[Result[T, E] | None], int] = {
            pool.submit(guarded, item): index for index, item in enumerate(items)
        }
        for future in as_completed(futures):
            outcome = future.result()
            if outcome is None:
                continue
            if isinstance(outcome, Err):
                for pending in futures:
                    pending.cancel()
                return outcome
            done[futures[future]] = outcome.value
    finally:
        pool.shutdown(wait=True, cancel_futures=True)

    if len(done) < len(items):
        return Err(RunCancelled())
    return Ok([done[i] for i in range(len(items))])
