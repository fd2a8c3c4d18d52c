from __future__ import annotations

import threading
import time

from datajson_harvester.engine import ThreadPoolManager


def test_thread_pool_manager_reuses_named_executors() -> None:
    manager = ThreadPoolManager(default_workers=2)
    probe = manager.get("probe", max_workers=5)
    assert manager.get("probe") is probe
    assert manager.get("download", max_workers=4) is not probe
    manager.shutdown()


def test_run_all_keeps_submission_order_and_captures_errors() -> None:
    manager = ThreadPoolManager()

    def work(value: int) -> int:
        time.sleep(0.01 * (5 - value))
        if value == 3:
            raise ValueError("boom")
        return value * 10

    outcomes = manager.run_all("test", work, range(5), max_workers=3)
    manager.shutdown()

    assert [outcome.item for outcome in outcomes] == [0, 1, 2, 3, 4]
    assert [outcome.value for outcome in outcomes if outcome.ok] == [0, 10, 20, 40]
    failed = [outcome for outcome in outcomes if not outcome.ok]
    assert len(failed) == 1
    assert isinstance(failed[0].error, ValueError)


def test_run_all_bounds_concurrency() -> None:
    manager = ThreadPoolManager()
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    def work(_: int) -> None:
        with lock:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.02)
        with lock:
            state["active"] -= 1

    settled: list[int] = []
    manager.run_all("bounded", work, range(12), max_workers=4, on_settled=lambda o: settled.append(o.item))
    manager.shutdown()

    assert state["peak"] <= 4
    assert sorted(settled) == list(range(12))


def test_run_all_returns_after_slow_callbacks_finish() -> None:
    manager = ThreadPoolManager()
    settled: list[int] = []
    callback_threads: list[str] = []

    def work(value: int) -> int:
        time.sleep(0.05)
        return value

    def slow_callback(outcome) -> None:
        time.sleep(0.2)
        callback_threads.append(threading.current_thread().name)
        settled.append(outcome.item)

    manager.run_all("slow", work, [1], on_settled=slow_callback)

    assert settled == [1]
    assert callback_threads == [threading.current_thread().name]
    manager.shutdown()
