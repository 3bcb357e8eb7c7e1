"""Tests for deferred tasks on the simulation clock."""

from scheduler import Scheduler


def test_tasks_run_only_when_due(clock):
    scheduler = Scheduler(clock)
    calls = []
    scheduler.call_later(100, lambda: calls.append("a"))

    assert scheduler.run_due() == 0
    clock.advance(99)
    assert scheduler.run_due() == 0
    clock.advance(1)
    assert scheduler.run_due() == 1
    assert calls == ["a"]
    assert scheduler.pending == 0


def test_due_order_then_scheduling_order(clock):
    scheduler = Scheduler(clock)
    calls = []
    scheduler.call_later(200, lambda: calls.append("late"))
    scheduler.call_later(100, lambda: calls.append("first"))
    scheduler.call_later(100, lambda: calls.append("second"))

    scheduler.run_due(500)
    assert calls == ["first", "second", "late"]


def test_cancelled_tasks_never_run(clock):
    scheduler = Scheduler(clock)
    calls = []
    task = scheduler.call_later(10, lambda: calls.append("x"))
    task.cancel()

    assert scheduler.pending == 0
    assert scheduler.run_due(100) == 0
    assert calls == []
    assert not task.done


def test_cancel_all(clock):
    scheduler = Scheduler(clock)
    tasks = [scheduler.call_later(10 * i, lambda: None) for i in range(3)]
    scheduler.cancel_all()
    assert all(t.cancelled for t in tasks)
    assert scheduler.run_due(1000) == 0
