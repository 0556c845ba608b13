"""OS signal control source (Unix only).

    kill -USR1 <pid>    raise the level threshold one step
    kill -USR2 <pid>    lower the level threshold one step
"""

import asyncio
import signal
from typing import Dict, List, Optional

from gclog.control.base import ControlSource
from gclog.control.bridge import LevelCommand, LevelControlBridge


def default_signal_map() -> Dict[signal.Signals, LevelCommand]:
    """SIGUSR1 -> UP, SIGUSR2 -> DOWN, for the signals this platform has."""
    mapping = {}
    for name, command in (("SIGUSR1", LevelCommand.UP), ("SIGUSR2", LevelCommand.DOWN)):
        sig = getattr(signal, name, None)
        if sig is not None:
            mapping[sig] = command
    return mapping


class SignalControlSource(ControlSource):
    """Translate process signals into level commands via the running event loop."""

    def __init__(self, signal_map: Optional[Dict[signal.Signals, LevelCommand]] = None):
        self.signal_map = signal_map if signal_map is not None else default_signal_map()
        self._bridge: Optional[LevelControlBridge] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed: List[signal.Signals] = []

    def attach(self, bridge: LevelControlBridge) -> bool:
        """
        Register the signal handlers on the running loop.

        Must be called from a coroutine running in the main thread. Returns
        False when the platform supports none of the signals.
        """
        self._bridge = bridge
        self._loop = asyncio.get_running_loop()

        for sig in self.signal_map:
            try:
                self._loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                bridge.service.verbose("signal %s not available: %s", sig.name, e)
                continue
            self._installed.append(sig)

        if self._installed:
            names = ", ".join(sig.name for sig in self._installed)
            bridge.service.verbose("level control signals registered (%s)", names)
        return bool(self._installed)

    def detach(self) -> None:
        if self._loop is not None:
            for sig in self._installed:
                self._loop.remove_signal_handler(sig)
        self._installed = []
        self._loop = None
        self._bridge = None

    def _on_signal(self, sig: signal.Signals) -> None:
        bridge = self._bridge
        command = self.signal_map.get(sig)
        if bridge is None or command is None:
            return
        bridge.service.warning("receive signal %s", sig.name)
        bridge.submit(command)
