#!/usr/bin/env python3
"""
Background Runner - detached work whose failures are only logged.

Used for read-path auto-refresh and event-triggered recalculations: the
caller submits and moves on, nothing is awaited and nothing propagates back.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundRunner:
    def __init__(self, max_workers: int = 4, name: str = "ranking-bg"):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._shutdown = False

    def submit(self, description: str, fn: Callable[..., Any], *args, **kwargs) -> Optional[Future]:
        """Run `fn` detached. Returns the future, or None once shut down."""
        with self._lock:
            if self._shutdown:
                logger.warning(f"Background runner is shut down; skipping {description}")
                return None
            future = self._executor.submit(self._run, description, fn, *args, **kwargs)
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    @staticmethod
    def _run(description: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            logger.exception(f"Background task failed: {description}")
            return None

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def wait_idle(self, timeout: Optional[float] = None) -> None:
        """Block until no task is pending, including ones submitted while waiting."""
        while True:
            with self._lock:
                pending = list(self._pending)
            if not pending:
                return
            for future in pending:
                future.exception(timeout=timeout)
            # Done callbacks can lag the result; drop finished futures here too
            with self._lock:
                self._pending.difference_update(f for f in pending if f.done())

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._shutdown = True
        self._executor.shutdown(wait=wait)
