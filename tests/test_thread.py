import threading

import pytest

from devglue.thread import Once, cond_wait_timeout, start_thread, thread_alive


def test_once_runs_single_time():
    calls = []
    once = Once()
    once.run(lambda: calls.append(1))
    once.run(lambda: calls.append(2))
    assert calls == [1]


def test_once_across_threads():
    calls = []
    lock = threading.Lock()
    once = Once()
    barrier = threading.Barrier(8)

    def routine():
        with lock:
            calls.append(threading.get_ident())

    def worker():
        barrier.wait()
        once.run(routine)

    threads = [start_thread(worker) for _ in range(8)]
    for t in threads:
        t.join()
    assert [thread_alive(t) for t in threads] == [False] * 8
    assert len(calls) == 1


def test_once_retries_after_failure():
    once = Once()
    calls = []

    def failing():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        once.run(failing)
    once.run(lambda: calls.append("ok"))
    assert calls == ["ok"]


def test_start_thread_passes_arguments():
    results = []
    thread = start_thread(results.append, 42)
    thread.join()
    assert results == [42]


def test_thread_alive_none():
    assert thread_alive(None) is False


def test_thread_alive_lifecycle():
    release = threading.Event()
    thread = start_thread(release.wait)
    try:
        assert thread_alive(thread) is True
    finally:
        release.set()
        thread.join()
    assert thread_alive(thread) is False


def test_cond_wait_timeout_expires():
    cond = threading.Condition()
    with cond:
        assert cond_wait_timeout(cond, 20) is False


def test_cond_wait_timeout_notified():
    cond = threading.Condition()
    ready = threading.Event()

    def notifier():
        ready.wait()
        with cond:
            cond.notify()

    with cond:
        thread = start_thread(notifier)
        ready.set()
        woken = cond_wait_timeout(cond, 5000)
    thread.join()
    assert woken is True


def test_cond_wait_timeout_negative():
    cond = threading.Condition()
    with cond:
        with pytest.raises(ValueError):
            cond_wait_timeout(cond, -1)