"""
Log Daemon - runs the background loops of a GcLogger.

The daemon owns the tasks that run beside normal log calls:
1. Rotation scheduler (checks the log file every poll interval)
2. Level control consumer (applies SIGUSR1/SIGUSR2 and admin API commands)
3. Admin API server (optional)
4. Line pump (optional, pipe mode: stdin lines are logged)

All tasks are cancellable; ``stop()`` ends them and closes the log file.

Usage:
    # Pipe a program's output into a rotating log
    my_server 2>&1 | python -m gclog --file /var/log/my_server.log
"""

import asyncio
import os
import signal
import stat
from typing import IO, AsyncIterator, List, Optional

from gclog.control.bridge import LevelControlBridge
from gclog.control.signals import SignalControlSource
from gclog.levels import LogLevel
from gclog.rotation import RotationPolicy, RotationScheduler
from gclog.utils.config import GcLogConfig
from gclog.writer import GcLogger

# Longest input line accepted in pipe mode
MAX_INPUT_LINE = 1024 * 1024


def _is_pipe(stream: IO[str]) -> bool:
    """Whether ``stream`` is backed by a pipe, socket or terminal."""
    try:
        fd = stream.fileno()
        mode = os.fstat(fd).st_mode
    except (AttributeError, OSError, ValueError):
        return False
    return stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode) or os.isatty(fd)


def build_service(config: GcLogConfig) -> GcLogger:
    """Create a GcLogger with the level and rotation policy from ``config``."""
    policy = RotationPolicy(
        slice_interval=config.slice_interval,
        storage_time=config.storage_time,
        strict_match=config.strict_retention,
    )
    return GcLogger(level=config.log_level, policy=policy)


class LogDaemon:
    """
    Runs rotation and level control for one GcLogger until shut down.

    The daemon does not own log calls: any thread may keep logging through
    the service while the daemon runs, before it starts and after it stops.
    """

    def __init__(self, config: GcLogConfig, service: Optional[GcLogger] = None):
        """
        Initialize the daemon.

        Args:
            config: GcLogConfig with file, policy and admin settings
            service: Existing GcLogger to drive (default: built from config)
        """
        self.config = config
        self.service = service or build_service(config)
        self.scheduler = RotationScheduler(self.service, poll_interval=config.poll_interval)
        self.bridge = LevelControlBridge(self.service)
        self.signal_source = SignalControlSource()

        # State
        self.running = False
        self.scheduler_task: Optional[asyncio.Task] = None
        self.bridge_task: Optional[asyncio.Task] = None
        self.api_task: Optional[asyncio.Task] = None
        self.pump_task: Optional[asyncio.Task] = None
        self.shutdown_event = asyncio.Event()
        self._shutdown_signals: List[signal.Signals] = []

    async def _iter_lines(self, stream: IO[str]) -> AsyncIterator[str]:
        """
        Yield lines from ``stream`` until EOF.

        Pipes, sockets and terminals are read through the event loop, so
        cancelling the pump stops the read and shutdown never waits for more
        input. Other streams (regular files, in-memory buffers) cannot block
        indefinitely and are read in a worker thread.
        """
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=MAX_INPUT_LINE)
        transport: Optional[asyncio.BaseTransport] = None
        fd = -1
        was_blocking = True

        if _is_pipe(stream):
            fd = stream.fileno()
            # The descriptor shares its blocking flag with the stream; restored on exit.
            was_blocking = os.get_blocking(fd)
            # Own descriptor, so closing the transport leaves the stream open
            pipe = os.fdopen(os.dup(fd), "rb", buffering=0)
            try:
                transport, _ = await loop.connect_read_pipe(
                    lambda: asyncio.StreamReaderProtocol(reader), pipe
                )
            except (NotImplementedError, OSError, ValueError) as e:
                os.set_blocking(fd, was_blocking)
                pipe.close()
                self.service.verbose("reading input in a worker thread: %s", e)

        if transport is None:
            while True:
                line = await asyncio.to_thread(stream.readline)
                if not line:
                    return
                yield line

        encoding = getattr(stream, "encoding", None) or "utf-8"
        try:
            while True:
                try:
                    raw = await reader.readline()
                except ValueError:
                    self.service.warning(
                        "input line longer than %d bytes dropped", MAX_INPUT_LINE
                    )
                    continue
                if not raw:
                    return
                yield raw.decode(encoding, errors="replace")
        finally:
            os.set_blocking(fd, was_blocking)
            transport.close()

    async def _pump_lines(self, stream: IO[str], level: LogLevel) -> None:
        """
        Log every line read from ``stream`` at ``level`` until EOF.

        EOF shuts the daemon down.
        """
        self.service.verbose("line pump started at level %s", level)

        try:
            async for line in self._iter_lines(stream):
                self.service.log(level, "%s", line.rstrip("\n"))
        except asyncio.CancelledError:
            return

        self.service.verbose("line pump reached end of input")
        if self.running:
            await self.stop()

    async def _run_api_server(self) -> None:
        """
        Run the admin FastAPI app with uvicorn until cancelled.
        """
        import uvicorn

        from gclog.api.server import create_app

        self.service.notice(
            "starting admin API on http://%s:%d", self.config.admin_host, self.config.admin_port
        )

        app = create_app(self.service, self.bridge, self.config)
        config = uvicorn.Config(
            app,
            host=self.config.admin_host,
            port=self.config.admin_port,
            log_level="warning",
            access_log=False,
            log_config=None,  # Keep uvicorn on the handlers set up by setup_logging
        )
        server = uvicorn.Server(config)

        try:
            await server.serve()
        except asyncio.CancelledError:
            self.service.verbose("admin API cancelled, shutting down")
        except Exception as e:
            self.service.error("admin API error: %s", e)

        self.service.verbose("admin API stopped")

    def _register_signal_handlers(self) -> None:
        """
        Register SIGTERM and SIGINT handlers for graceful shutdown, and the
        SIGUSR1/SIGUSR2 level control source.
        """
        loop = asyncio.get_running_loop()

        def create_shutdown_task(s: signal.Signals) -> asyncio.Task[None]:
            return asyncio.create_task(self.stop(s))

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, create_shutdown_task, sig)
            except (NotImplementedError, RuntimeError):
                continue
            self._shutdown_signals.append(sig)

        self.signal_source.attach(self.bridge)

    def _unregister_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._shutdown_signals:
            loop.remove_signal_handler(sig)
        self._shutdown_signals = []
        self.signal_source.detach()

    async def stop(self, sig: Optional[signal.Signals] = None) -> None:
        """
        Stop all background tasks and close the log file.

        Shutdown process:
        1. Stop the loops (running=False)
        2. Cancel and await every task
        3. Remove signal handlers
        4. Close the log file (later log calls go to the console)

        Args:
            sig: The signal that triggered shutdown, if any
        """
        if not self.running:
            return

        if sig is not None:
            self.service.notice("received %s, shutting down", sig.name)
        self.running = False
        self.scheduler.running = False

        for task in (self.pump_task, self.api_task, self.bridge_task, self.scheduler_task):
            if task is None or task is asyncio.current_task():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._unregister_signal_handlers()
        self.service.close_file()

        self.shutdown_event.set()
        self.service.verbose("shutdown complete")

    async def start(
        self,
        input_stream: Optional[IO[str]] = None,
        input_level: LogLevel = LogLevel.NOTICE,
    ) -> None:
        """
        Start the daemon (blocks until shutdown).

        Args:
            input_stream: Optional text stream to pump into the log (pipe mode)
            input_level: Level for pumped lines

        Raises:
            OSError: If the configured log file cannot be opened
        """
        if self.config.log_file:
            self.service.init_log_file(self.config.log_file)

        self.running = True
        self.service.notice(
            "gclog daemon started: file=%s level=%s policy=%r",
            self.config.log_file,
            self.service.level,
            self.service.policy,
        )

        self._register_signal_handlers()

        self.scheduler_task = asyncio.create_task(self.scheduler.run(), name="gclog-rotation")
        self.bridge_task = asyncio.create_task(self.bridge.run(), name="gclog-level-control")
        if self.config.admin_enabled:
            self.api_task = asyncio.create_task(self._run_api_server(), name="gclog-admin-api")
        if input_stream is not None:
            self.pump_task = asyncio.create_task(
                self._pump_lines(input_stream, input_level), name="gclog-pump"
            )

        await self.shutdown_event.wait()
