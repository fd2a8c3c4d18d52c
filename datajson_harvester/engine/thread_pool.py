"""Bounded worker pools with a fan-out/fan-in barrier."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Generic, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[T, R]):
    """Result of one unit of work; exactly one of ``value``/``error`` is meaningful."""

    item: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ThreadPoolManager:
    """Manage one named executor per pipeline stage."""

    def __init__(self, default_workers: int = 4) -> None:
        self.default_workers = default_workers
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, name: str, max_workers: int | None = None) -> ThreadPoolExecutor:
        with self._lock:
            if name not in self._executors:
                workers = max_workers or self.default_workers
                self._executors[name] = ThreadPoolExecutor(
                    max_workers=workers, thread_name_prefix=f"harvester-{name}"
                )
            return self._executors[name]

    def run_all(
        self,
        name: str,
        func: Callable[[T], R],
        items: Iterable[T],
        max_workers: int | None = None,
        on_settled: Callable[[TaskOutcome[T, R]], None] | None = None,
    ) -> list[TaskOutcome[T, R]]:
        """Run ``func`` over ``items`` on the named pool and wait for every task.

        Outcomes come back in submission order. Exceptions raised by ``func``
        are captured in the outcome instead of propagating.
        """

        executor = self.get(name, max_workers)
        pending: list[tuple[T, Future[R]]] = []
        for item in items:
            pending.append((item, executor.submit(func, item)))
        future_to_item = {future: item for item, future in pending}
        # on_settled runs here in the caller thread, so it has finished for
        # every task before run_all returns.
        for future in as_completed(future_to_item):
            if on_settled is not None:
                on_settled(_outcome(future_to_item[future], future))
        return [_outcome(item, future) for item, future in pending]

    def shutdown(self) -> None:
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=True)
            self._executors.clear()


def _outcome(item: T, future: Future) -> TaskOutcome:
    error = future.exception()
    if error is not None:
        return TaskOutcome(item=item, error=error)
    return TaskOutcome(item=item, value=future.result())


__all__ = ["TaskOutcome", "ThreadPoolManager"]
