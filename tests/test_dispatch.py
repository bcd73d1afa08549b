"""
Tests for per-key job serialization
"""

import asyncio

import pytest

from nodegroup_autoscaler.core.dispatch import KeyedDispatcher


def test_same_key_jobs_run_one_at_a_time_in_order():
    async def scenario():
        dispatcher = KeyedDispatcher()
        state = {"running": 0, "max_running": 0}
        order = []

        async def job(i):
            state["running"] += 1
            state["max_running"] = max(state["max_running"], state["running"])
            await asyncio.sleep(0.01)
            order.append(i)
            state["running"] -= 1
            return i

        results = await asyncio.gather(
            *(dispatcher.submit("web-pool", lambda i=i: job(i)) for i in range(3))
        )
        return results, order, state["max_running"], dispatcher.active_keys()

    results, order, max_running, active = asyncio.run(scenario())
    assert results == [0, 1, 2]
    assert order == [0, 1, 2]
    assert max_running == 1
    assert active == []


def test_different_keys_do_not_block_each_other():
    async def scenario():
        dispatcher = KeyedDispatcher()
        gate = asyncio.Event()

        async def waits_for_gate():
            await gate.wait()
            return "web-pool"

        async def opens_gate():
            gate.set()
            return "batch-pool"

        return await asyncio.wait_for(
            asyncio.gather(
                dispatcher.submit("web-pool", waits_for_gate),
                dispatcher.submit("batch-pool", opens_gate),
            ),
            timeout=1
        )

    assert asyncio.run(scenario()) == ["web-pool", "batch-pool"]


def test_job_exception_reaches_submitter_and_worker_continues():
    async def scenario():
        dispatcher = KeyedDispatcher()

        async def boom():
            raise RuntimeError("metrics-server unavailable")

        async def ok():
            return "done"

        failing = asyncio.ensure_future(dispatcher.submit("web-pool", boom))
        following = asyncio.ensure_future(dispatcher.submit("web-pool", ok))
        with pytest.raises(RuntimeError):
            await failing
        return await following

    assert asyncio.run(scenario()) == "done"


def test_close_cancels_running_and_queued_jobs():
    async def scenario():
        dispatcher = KeyedDispatcher()
        started = asyncio.Event()

        async def blocks_forever():
            started.set()
            await asyncio.Event().wait()

        async def never_runs():
            return "ran"

        running = asyncio.ensure_future(dispatcher.submit("web-pool", blocks_forever))
        queued = asyncio.ensure_future(dispatcher.submit("web-pool", never_runs))
        await started.wait()
        assert dispatcher.active_keys() == ["web-pool"]
        assert dispatcher.pending("web-pool") == 1

        await dispatcher.close()
        results = await asyncio.gather(running, queued, return_exceptions=True)
        return results, dispatcher.active_keys()

    results, active = asyncio.run(scenario())
    assert all(isinstance(r, asyncio.CancelledError) for r in results)
    assert active == []
