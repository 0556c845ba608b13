"""Level control channel: commands from any source, applied by one task."""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Optional

from gclog.levels import LogLevel

if TYPE_CHECKING:
    from gclog.writer import GcLogger


class LevelCommand(str, Enum):
    """A relative level change requested by a control source."""

    UP = "up"  # Threshold +1 (quieter)
    DOWN = "down"  # Threshold -1 (more verbose)

    def __str__(self) -> str:
        return self.value


class LevelControlBridge:
    """
    Queue of level commands consumed by a dedicated task.

    Sources (OS signals, the admin API) only enqueue; ``run()`` applies the
    commands one at a time in arrival order. There is no debouncing: N
    commands give up to N level changes, clamped at the bounds.
    """

    def __init__(self, service: "GcLogger"):
        self.service = service
        self.queue: asyncio.Queue[LevelCommand] = asyncio.Queue()
        self.running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def submit(self, command: LevelCommand) -> None:
        """Enqueue a command. Must be called from the event loop thread."""
        self.queue.put_nowait(LevelCommand(command))

    def submit_threadsafe(self, command: LevelCommand) -> None:
        """
        Enqueue a command from another thread.

        When the consumer task is not running the command is applied
        immediately, since the level operations are thread-safe on their own.
        """
        loop = self._loop
        if loop is None or not self.running:
            self.apply(LevelCommand(command))
            return
        loop.call_soon_threadsafe(self.submit, command)

    def apply(self, command: LevelCommand) -> Optional[LogLevel]:
        """Apply one command now. Returns the new level, or None at a bound."""
        if command is LevelCommand.UP:
            return self.service.level_up()
        return self.service.level_down()

    async def run(self) -> None:
        """Consume commands until cancelled."""
        self._loop = asyncio.get_running_loop()
        self.running = True
        self.service.verbose("level control loop started")

        try:
            while True:
                command = await self.queue.get()
                try:
                    self.apply(command)
                except Exception as e:
                    self.service.error("level control command %s failed: %s", command, e)
                finally:
                    self.queue.task_done()
        except asyncio.CancelledError:
            pass
        finally:
            self.running = False
            self._loop = None
            self.service.verbose("level control loop stopped")
