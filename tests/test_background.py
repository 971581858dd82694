"""
Tests for the periodic task runner.
"""
import asyncio

from scan2order.background import PeriodicTask


def test_run_once_returns_action_result():
    task = PeriodicTask("t", 10, lambda: 42)
    assert task.run_once() == 42


def test_run_once_logs_and_swallows_errors(caplog):
    def boom():
        raise RuntimeError("kaput")

    task = PeriodicTask("boom", 10, boom)
    assert task.run_once() is None
    assert "Error in boom task" in caplog.text


def test_loop_runs_repeatedly_until_stopped():
    calls = []

    async def scenario():
        task = PeriodicTask("tick", 0.01, lambda: calls.append(1))
        await task.start()
        assert task.running
        await asyncio.sleep(0.05)
        await task.stop()
        assert not task.running

    asyncio.run(scenario())
    assert len(calls) >= 2


def test_run_at_start_false_waits_one_interval():
    calls = []

    async def scenario():
        task = PeriodicTask("later", 10, lambda: calls.append(1), run_at_start=False)
        await task.start()
        await asyncio.sleep(0)
        await task.stop()

    asyncio.run(scenario())
    assert calls == []
