"""Base class for level control sources."""

from abc import ABC, abstractmethod

from gclog.control.bridge import LevelControlBridge


class ControlSource(ABC):
    """Something that turns outside events into level commands.

    Implementations must:
    - Only enqueue on the bridge, never change the level directly
    - Undo everything attach() set up when detach() is called
    """

    @abstractmethod
    def attach(self, bridge: LevelControlBridge) -> bool:
        """Start delivering commands to ``bridge``. Returns False if unsupported here."""
        ...

    @abstractmethod
    def detach(self) -> None:
        """Stop delivering commands."""
        ...
