import pytest
import time
import logging
import threading

from vocaltrainer.services.dispatcher import StateDispatcher
from vocaltrainer.services.timers import PeriodicTimer

logger = logging.getLogger(__name__)


def test_jobs_applied_in_submission_order(dispatcher):
    applied = []
    for i in range(50):
        dispatcher.submit(applied.append, i)
    dispatcher.join()

    assert applied == list(range(50))


def test_jobs_run_on_the_dispatcher_thread(dispatcher):
    seen = []
    dispatcher.submit(lambda: seen.append(dispatcher.is_dispatch_thread()))
    dispatcher.join()

    assert seen == [True]
    assert dispatcher.is_dispatch_thread() is False


def test_failing_job_is_logged_and_loop_continues(dispatcher, caplog):
    applied = []

    def boom():
        raise RuntimeError("bad update")

    with caplog.at_level(logging.ERROR):
        dispatcher.submit(boom)
        dispatcher.submit(applied.append, "after")
        dispatcher.join()

    assert applied == ["after"]
    assert "bad update" in caplog.text


def test_concurrent_producers_are_serialized(dispatcher):
    """
    Tests that jobs posted from several producer threads are applied one at a
    time, so an unsynchronized counter ends up exact.
    """
    counter = {"value": 0}

    def increment():
        current = counter["value"]
        time.sleep(0)
        counter["value"] = current + 1

    def producer():
        for _ in range(200):
            dispatcher.submit(increment)

    threads = [threading.Thread(target=producer) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    dispatcher.join()

    assert counter["value"] == 800


def test_shutdown_drains_queue_and_drops_later_jobs():
    dispatcher = StateDispatcher(name="ShutdownTest")
    applied = []
    for i in range(5):
        dispatcher.submit(applied.append, i)

    assert dispatcher.shutdown(timeout=5.0)
    dispatcher.submit(applied.append, "late")

    assert applied == [0, 1, 2, 3, 4]
    assert not dispatcher.thread.is_alive()
    # Second shutdown is harmless
    assert dispatcher.shutdown()


def test_join_from_dispatcher_thread_is_rejected(dispatcher):
    errors = []

    def nested_join():
        try:
            dispatcher.join()
        except RuntimeError as e:
            errors.append(e)

    dispatcher.submit(nested_join)
    dispatcher.join()
    assert len(errors) == 1


def test_periodic_timer_ticks_until_cancelled():
    ticks = threading.Semaphore(0)
    timer = PeriodicTimer(0.01, ticks.release, name="TestTimer")
    timer.start()

    for _ in range(3):
        assert ticks.acquire(timeout=2.0)
    timer.cancel()
    assert timer.is_cancelled
    assert not timer.thread.is_alive()

    # Drain anything that raced the cancel, then make sure nothing follows
    while ticks.acquire(timeout=0.05):
        pass
    assert not ticks.acquire(timeout=0.1)


def test_periodic_timer_can_cancel_itself():
    holder = {}
    fired = []

    def tick():
        fired.append(1)
        holder["timer"].cancel()

    timer = PeriodicTimer(0.01, tick, name="SelfCancel")
    holder["timer"] = timer
    timer.start()
    timer.thread.join(timeout=2.0)

    assert fired == [1]
    assert not timer.thread.is_alive()
    timer.cancel()


def test_periodic_timer_rejects_bad_interval():
    with pytest.raises(ValueError):
        PeriodicTimer(0, lambda: None)
