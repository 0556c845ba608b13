"""
Rotation Scheduler - time-based log slicing and retention pruning.

Every poll interval (30 seconds by default) the scheduler checks whether the
live log file is older than the slice interval. When it is, expired archives
are pruned first and then the live file is rotated:

    app.log  ->  app_2018_04_08_16.log   (archive)
    app.log                              (fresh file, same path)

Archives whose modification time is older than
``last_rotation_time - storage_time`` are deleted. The live file name
``<base><suffix>`` and the file at the configured path are never deleted.
"""

import asyncio
import os
import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, List, Optional

from gclog.file_target import split_log_path
from gclog.levels import LogLevel

if TYPE_CHECKING:
    from gclog.writer import GcLogger

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_SLICE_INTERVAL = timedelta(days=1)
DEFAULT_STORAGE_TIME = timedelta(days=7)


class RotationPolicy:
    """
    When to rotate and how long to keep archives.

    Attributes are plain reads with last-write-wins semantics; a change made
    while a tick is running applies from the next tick at the latest.
    """

    def __init__(
        self,
        slice_interval: timedelta = DEFAULT_SLICE_INTERVAL,
        storage_time: timedelta = DEFAULT_STORAGE_TIME,
        strict_match: bool = False,
    ):
        self.slice_interval = slice_interval
        self.storage_time = storage_time
        # False: any name containing both base and suffix is an archive.
        # True: only <base>_YYYY_MM_DD_HH<suffix> is.
        self.strict_match = strict_match

    @property
    def storage_time(self) -> timedelta:
        return self._storage_time

    @storage_time.setter
    def storage_time(self, value: timedelta) -> None:
        self._storage_time = abs(value)

    def __repr__(self) -> str:
        return (
            f"<RotationPolicy(slice_interval={self.slice_interval}, "
            f"storage_time={self.storage_time}, strict_match={self.strict_match})>"
        )


def is_archive_name(name: str, base: str, suffix: str, strict: bool = False) -> bool:
    """
    Whether a directory entry looks like an archive of the ``base``/``suffix`` log.

    The default substring test also matches unrelated logs that share the base
    name or suffix in the same directory (e.g. "app" matches "myapp.log").
    Strict mode only accepts names produced by rotation.
    """
    if strict:
        pattern = re.escape(base) + r"_\d{4}_\d{2}_\d{2}_\d{2}" + re.escape(suffix)
        return re.fullmatch(pattern, name) is not None
    return base in name and suffix in name


class RotationScheduler:
    """
    Background loop that rotates the service's log file when it is due.

    ``tick()`` does one check synchronously and is what tests drive; ``run()``
    wraps it in a cancellable asyncio loop for the daemon.
    """

    def __init__(self, service: "GcLogger", poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.service = service
        self.poll_interval = poll_interval
        self.running = False

    def is_due(self, now: Optional[datetime] = None) -> bool:
        target = self.service.target
        if not target.active or target.last_rotation_time is None:
            return False
        now = now or self.service.clock()
        return now > target.last_rotation_time + self.service.policy.slice_interval

    def tick(self) -> bool:
        """
        Run one scheduler check.

        Returns:
            True if a rotation happened
        """
        service = self.service
        if not service.target.active:
            service.verbose("log file closed, nothing to rotate")
            return False

        if not self.is_due():
            return False

        self.prune()
        service.target.rotate()
        return True

    def prune(self) -> List[str]:
        """
        Delete archives older than the retention window.

        Runs without the file lock: it only touches directory entries, and the
        live file is skipped by name.

        Returns:
            Paths that were deleted
        """
        service = self.service
        target = service.target
        path = target.path
        if path is None or target.last_rotation_time is None:
            return []

        directory, base, suffix = split_log_path(path)
        live_names = {base + suffix, os.path.basename(path)}
        cutoff = (target.last_rotation_time - service.policy.storage_time).timestamp()
        strict = service.policy.strict_match

        try:
            entries = list(os.scandir(directory))
        except OSError as e:
            service.warning("try to delete file, read dir %s failed, because %s", directory, e)
            return []

        deleted = []
        for entry in entries:
            if entry.name in live_names:
                continue
            if not is_archive_name(entry.name, base, suffix, strict):
                continue

            file_path = os.path.join(directory, entry.name)
            try:
                if not entry.is_file() or entry.stat().st_mtime >= cutoff:
                    continue
                os.remove(file_path)
            except OSError as e:
                service.warning("try to delete file %s failed, because %s", file_path, e)
                continue

            service.notice("try to delete file %s success", file_path)
            deleted.append(file_path)

        return deleted

    async def run(self) -> None:
        """
        Poll until cancelled.

        A failing tick is logged and the loop carries on; closing the log file
        leaves the loop idle rather than stopping it. Cancellation cannot stop a
        tick already running in its worker thread, so the loop waits for that
        tick to finish before returning.
        """
        self.running = True
        self.service.verbose("rotation loop started (poll every %.0fs)", self.poll_interval)

        while self.running:
            tick = asyncio.ensure_future(asyncio.to_thread(self.tick))
            try:
                await asyncio.shield(tick)
                await asyncio.sleep(self.poll_interval)
            except asyncio.CancelledError:
                if not tick.done():
                    await asyncio.wait([tick])
                break
            except Exception as e:
                self.service.log(LogLevel.ERROR, "rotation loop error: %s", e)
                await asyncio.sleep(self.poll_interval)

        self.running = False
        self.service.verbose("rotation loop stopped")
