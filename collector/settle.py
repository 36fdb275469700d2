"""Run a batch of blocking calls concurrently and settle every one of them.

``settle_all`` never fails fast: each call produces a ``Settled`` holding
either its return value or the exception it raised (or a ``TimeoutError``
when it did not finish in time). Results come back in call order.
"""

import math
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence


@dataclass(frozen=True)
class Settled:
    value: Any = None
    error: BaseException = None

    @property
    def ok(self) -> bool:
        return self.error is None


def settle_all(calls: Sequence[Callable[[], Any]], timeout: float = None,
               max_workers: int = None, name: str = "settle") -> List[Settled]:
    """
    Run every call on a worker thread and wait for all of them.

    ``timeout`` bounds a single call. With fewer workers than calls the
    batch runs in waves, so the overall wait is ``timeout`` per wave.
    Calls still running at the deadline are abandoned, not interrupted;
    give them their own transport timeout.
    """
    if not calls:
        return []

    workers = min(max_workers or len(calls), len(calls))
    deadline = None
    if timeout is not None:
        deadline = timeout * math.ceil(len(calls) / workers)

    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
    try:
        futures = [executor.submit(call) for call in calls]
        done, _ = wait(futures, timeout=deadline)

        results = []
        for future in futures:
            if future not in done:
                future.cancel()
                results.append(Settled(error=TimeoutError(f"no result within {timeout}s")))
                continue
            error = future.exception()
            if error is not None:
                results.append(Settled(error=error))
            else:
                results.append(Settled(value=future.result()))
        return results
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
