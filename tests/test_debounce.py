"""Tests for the debounce scheduler."""

import asyncio
import logging

import pytest

from character_search.debounce import DebouncedCall, schedule


@pytest.mark.asyncio
async def test_burst_runs_once_with_last_arguments():
    calls: list[str] = []
    trigger = schedule(calls.append, 20)

    trigger("R")
    trigger("Ri")
    trigger("Rick")

    assert calls == []  # never runs synchronously
    assert trigger.pending

    await asyncio.sleep(0.1)

    assert calls == ["Rick"]
    assert not trigger.pending


@pytest.mark.asyncio
async def test_separate_bursts_run_separately():
    calls: list[str] = []
    trigger = schedule(calls.append, 10)

    trigger("a")
    await asyncio.sleep(0.05)
    trigger("b")
    await asyncio.sleep(0.05)

    assert calls == ["a", "b"]


@pytest.mark.asyncio
async def test_keyword_arguments_are_forwarded():
    seen: list[tuple] = []
    trigger = schedule(lambda *args, **kwargs: seen.append((args, kwargs)), 5)

    trigger(1, flag=True)
    await asyncio.sleep(0.03)

    assert seen == [((1,), {"flag": True})]


@pytest.mark.asyncio
async def test_coroutine_work_is_awaited_by_wait():
    done: list[str] = []

    async def work(value: str) -> None:
        await asyncio.sleep(0.01)
        done.append(value)

    trigger = schedule(work, 10)
    trigger("x")
    await trigger.wait()

    assert done == ["x"]
    assert not trigger.running


@pytest.mark.asyncio
async def test_wait_follows_a_rearmed_timer():
    calls: list[str] = []
    trigger = schedule(calls.append, 30)
    trigger("first")

    async def retype():
        await asyncio.sleep(0.01)
        trigger("second")

    await asyncio.gather(trigger.wait(), retype())

    assert calls == ["second"]


@pytest.mark.asyncio
async def test_wait_without_pending_returns_immediately():
    trigger = schedule(lambda: None, 1000)
    await asyncio.wait_for(trigger.wait(), timeout=0.5)


@pytest.mark.asyncio
async def test_cancel_prevents_execution():
    calls: list[str] = []
    trigger = schedule(calls.append, 10)

    trigger("never")
    trigger.cancel()
    await asyncio.sleep(0.05)

    assert calls == []
    assert not trigger.pending


@pytest.mark.asyncio
async def test_errors_in_work_are_logged(caplog):
    async def boom() -> None:
        raise RuntimeError("kaboom")

    trigger = schedule(boom, 5)
    with caplog.at_level(logging.ERROR, logger="character_search.debounce"):
        trigger()
        await trigger.wait()

    assert any("kaboom" in (r.exc_text or "") or r.exc_info for r in caplog.records)


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        DebouncedCall(lambda: None, -1)


def test_trigger_requires_running_loop():
    trigger = schedule(lambda: None, 10)
    with pytest.raises(RuntimeError):
        trigger()


@pytest.mark.asyncio
async def test_aclose_cancels_every_running_execution():
    started: list[str] = []
    finished: list[str] = []
    never = asyncio.Event()

    async def slow(tag: str) -> None:
        started.append(tag)
        await never.wait()
        finished.append(tag)

    trigger = schedule(slow, 5)
    trigger("first")
    await asyncio.sleep(0.03)
    trigger("second")
    await asyncio.sleep(0.03)
    assert started == ["first", "second"]
    assert trigger.running

    await trigger.aclose()

    assert not trigger.running
    assert not trigger.pending
    assert finished == []
