"""
File Target - the sink that log lines are written to.

Owns the open log file handle, its path and the time of the last rotation.
Every access to the handle goes through the target's lock, so a write can
never land on a handle that rotation is closing or renaming.

On-disk layout:
    app.log                     live file, always at the configured path
    app_2018_04_08_16.log       archives, one per rotation
"""

import os
import sys
import threading
from datetime import datetime
from typing import IO, Callable, Optional, Tuple

from gclog.levels import LogLevel

DEFAULT_SUFFIX = ".log"

Clock = Callable[[], datetime]
Reporter = Callable[..., None]


def split_log_path(path: str) -> Tuple[str, str, str]:
    """
    Split a log path into (directory, base name, suffix).

    The directory defaults to "." when the path has none. The suffix runs
    from the last "." of the file name, so a dotfile such as ".log" has an
    empty base; it defaults to ".log" when the name has no ".".

    Examples:
        >>> split_log_path("/var/log/app.log")
        ('/var/log', 'app', '.log')
        >>> split_log_path("service")
        ('.', 'service', '.log')
        >>> split_log_path("logs/.log")
        ('logs', '', '.log')
    """
    directory, file_name = os.path.split(path)
    dot = file_name.rfind(".")
    if dot == -1:
        return directory or ".", file_name, DEFAULT_SUFFIX
    return directory or ".", file_name[:dot], file_name[dot:]


def archive_name(path: str, when: datetime) -> str:
    """Archive path for ``path`` rotated at ``when``: <dir>/<base>_<Y>_<M>_<D>_<H><suffix>."""
    directory, base, suffix = split_log_path(path)
    stamp = f"{when.year:04d}_{when.month:02d}_{when.day:02d}_{when.hour:02d}"
    return os.path.join(directory, f"{base}_{stamp}{suffix}")


def floor_to_hour(when: datetime) -> datetime:
    return when.replace(minute=0, second=0, microsecond=0)


def _ignore(*args, **kwargs) -> None:
    pass


class FileTarget:
    """
    Lock-guarded file sink with console fallback.

    Invariant: while ``active`` is True, ``_handle`` is an open append handle
    for ``path``. While it is False, writes go to the console stream.
    """

    def __init__(
        self,
        clock: Clock = datetime.now,
        console: Optional[IO[str]] = None,
        report: Reporter = _ignore,
    ):
        """
        Args:
            clock: Returns the current local time; injected for tests
            console: Fallback stream (default: the current sys.stderr)
            report: Called as report(level, msg, *args) for rotation diagnostics
        """
        self._lock = threading.RLock()
        self._handle: Optional[IO[str]] = None
        self._clock = clock
        self._console = console
        self._report = report
        # Bumped by initialize() and close() so rotate() can tell it was superseded.
        self._epoch = 0

        self.path: Optional[str] = None
        self.active = False
        self.last_rotation_time: Optional[datetime] = None

    @property
    def console(self) -> IO[str]:
        return self._console if self._console is not None else sys.stderr

    def initialize(self, path: str) -> None:
        """
        Open ``path`` for append, creating it if missing, and make it the sink.

        Raises:
            OSError: If the file cannot be opened; the previous state is kept
        """
        with self._lock:
            handle = open(path, "a", encoding="utf-8")

            if self._handle is not None:
                self._handle.close()

            self._handle = handle
            self._epoch += 1
            self.path = path
            self.active = True
            self.last_rotation_time = floor_to_hour(self._clock())

    def close(self) -> None:
        """Close the file; later writes fall back to the console."""
        with self._lock:
            self.active = False
            self._epoch += 1
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    def rotate(self) -> Optional[str]:
        """
        Rename the live file to its timestamped archive name and reopen the
        original path.

        A failed rename is reported and rotation carries on, reopening the
        original path so the live file name never changes. A failed reopen
        leaves the target inactive (console output). If ``close()`` or
        ``initialize()`` ran while the rename was in progress, the original
        path is not reopened.

        Archive names have hour resolution, so a second rotation within the
        same hour replaces the earlier archive; this is reported as a warning.

        Returns:
            The archive path on success, None if nothing was archived
        """
        with self._lock:
            # Writers that arrive from here on go to the console.
            self.active = False
            if self.path is None:
                return None

            path = self.path
            epoch = self._epoch
            new_name = archive_name(path, self._clock())

            if self._handle is not None:
                self._handle.close()
                self._handle = None

            if os.path.exists(new_name):
                self._report(
                    LogLevel.WARNING, "archive file %s already exists, replacing it", new_name
                )

            archived: Optional[str] = new_name
            try:
                os.rename(path, new_name)
            except OSError as e:
                self._report(
                    LogLevel.WARNING, "rename file %s to %s failed, because %s", path, new_name, e
                )
                archived = None

        with self._lock:
            if self._epoch != epoch:
                return archived
            try:
                self.initialize(path)
            except OSError as e:
                self._report(LogLevel.WARNING, "reopen log file %s failed, because %s", path, e)

        return archived

    def write(self, line: str) -> None:
        """
        Write one formatted line to the active sink.

        The inactive check happens before taking the lock so console writes
        never wait behind a rotation in progress. The flag is checked again
        under the lock before touching the handle.
        """
        if self.active:
            with self._lock:
                if self.active and self._handle is not None:
                    self._handle.write(line + "\n")
                    self._handle.flush()
                    return

        console = self.console
        console.write(line + "\n")
        console.flush()
