"""
Unit tests for level control: the command bridge and the signal source.
"""

import asyncio
import os
import signal

import pytest

from gclog.control import LevelCommand, LevelControlBridge, SignalControlSource, default_signal_map
from gclog.levels import LogLevel

requires_usr_signals = pytest.mark.skipif(
    not hasattr(signal, "SIGUSR1"), reason="SIGUSR1/SIGUSR2 not available on this platform"
)


@pytest.fixture
def bridge(service):
    return LevelControlBridge(service)


async def start_consumer(bridge: LevelControlBridge) -> asyncio.Task:
    task = asyncio.create_task(bridge.run())
    await asyncio.sleep(0)  # Let run() start
    return task


async def stop_consumer(task: asyncio.Task) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


# ============================================================================
# LevelControlBridge
# ============================================================================


class TestBridge:
    def test_apply(self, bridge, service):
        assert bridge.apply(LevelCommand.UP) is LogLevel.WARNING
        assert bridge.apply(LevelCommand.DOWN) is LogLevel.NOTICE
        assert bridge.apply(LevelCommand.DOWN) is LogLevel.INFO
        assert service.level is LogLevel.INFO

    def test_command_from_string(self, bridge, service):
        bridge.apply(LevelCommand("up"))
        assert service.level is LogLevel.WARNING

    def test_submit_threadsafe_without_consumer_applies_now(self, bridge, service):
        bridge.submit_threadsafe(LevelCommand.DOWN)
        assert service.level is LogLevel.INFO

    @pytest.mark.asyncio
    async def test_run_applies_in_order(self, bridge, service):
        task = await start_consumer(bridge)
        assert bridge.running is True

        bridge.submit(LevelCommand.DOWN)
        bridge.submit(LevelCommand.DOWN)
        bridge.submit(LevelCommand.UP)
        await bridge.queue.join()

        assert service.level is LogLevel.INFO
        await stop_consumer(task)
        assert bridge.running is False

    @pytest.mark.asyncio
    async def test_burst_is_clamped(self, bridge, service):
        """Test N commands give up to N changes, stopping at the bound."""
        task = await start_consumer(bridge)

        for _ in range(10):
            bridge.submit(LevelCommand.UP)
        await bridge.queue.join()

        assert service.level is LogLevel.ERROR
        await stop_consumer(task)

    @pytest.mark.asyncio
    async def test_submit_threadsafe_from_worker_thread(self, bridge, service):
        task = await start_consumer(bridge)

        await asyncio.to_thread(bridge.submit_threadsafe, LevelCommand.DOWN)
        await asyncio.sleep(0.01)
        await bridge.queue.join()

        assert service.level is LogLevel.INFO
        await stop_consumer(task)

    @pytest.mark.asyncio
    async def test_failing_command_does_not_stop_loop(self, bridge, service, console, monkeypatch):
        task = await start_consumer(bridge)
        real_level_up = service.level_up
        calls = []

        def flaky_level_up():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return real_level_up()

        monkeypatch.setattr(service, "level_up", flaky_level_up)

        bridge.submit(LevelCommand.UP)
        bridge.submit(LevelCommand.UP)
        await bridge.queue.join()

        assert service.level is LogLevel.WARNING
        assert "[ERROR] level control command up failed: boom" in console.getvalue()
        await stop_consumer(task)


# ============================================================================
# SignalControlSource
# ============================================================================


@requires_usr_signals
def test_default_signal_map():
    mapping = default_signal_map()
    assert mapping[signal.SIGUSR1] is LevelCommand.UP
    assert mapping[signal.SIGUSR2] is LevelCommand.DOWN


@requires_usr_signals
@pytest.mark.asyncio
async def test_signals_change_level(bridge, service, console):
    """Test SIGUSR1 raises and SIGUSR2 lowers the threshold."""
    task = await start_consumer(bridge)
    source = SignalControlSource()
    assert source.attach(bridge) is True

    try:
        os.kill(os.getpid(), signal.SIGUSR2)
        await asyncio.sleep(0.05)
        await bridge.queue.join()
        assert service.level is LogLevel.INFO

        os.kill(os.getpid(), signal.SIGUSR1)
        await asyncio.sleep(0.05)
        await bridge.queue.join()
        assert service.level is LogLevel.NOTICE
    finally:
        source.detach()
        await stop_consumer(task)

    assert "[WARNING] receive signal SIGUSR2" in console.getvalue()


@requires_usr_signals
@pytest.mark.asyncio
async def test_unmapped_signal_ignored(bridge):
    source = SignalControlSource(signal_map={signal.SIGUSR1: LevelCommand.UP})
    source.attach(bridge)

    source._on_signal(signal.SIGHUP)

    assert bridge.queue.empty()
    source.detach()


@pytest.mark.asyncio
async def test_detach_without_attach(bridge):
    SignalControlSource().detach()


@requires_usr_signals
@pytest.mark.asyncio
async def test_signal_burst_no_debounce(bridge, service):
    """Test every delivered signal is handled as its own command."""
    source = SignalControlSource()
    source.attach(bridge)

    for _ in range(3):
        source._on_signal(signal.SIGUSR2)

    assert bridge.queue.qsize() == 3
    source.detach()
