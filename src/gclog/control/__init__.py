"""
Level Control

Runtime verbosity changes from outside the process: OS signals
(SIGUSR1/SIGUSR2) and the admin HTTP API both feed the same command queue.
"""

from .base import ControlSource
from .bridge import LevelCommand, LevelControlBridge
from .signals import SignalControlSource, default_signal_map

__all__ = [
    "ControlSource",
    "LevelCommand",
    "LevelControlBridge",
    "SignalControlSource",
    "default_signal_map",
]
