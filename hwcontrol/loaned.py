"""A command interface lent out to a user, released through a callback."""

from typing import Callable, Optional


class LoanedCommandInterface:
    """Wraps a command interface and runs ``deleter`` once when the loan ends.

    The wrapped object must expose ``name``, ``interface_name``, ``full_name``
    and a readable, writable ``value``.
    """

    def __init__(self, command_interface, deleter: Optional[Callable[[], None]] = None):
        self._command_interface = command_interface
        self._deleter = deleter

    @property
    def name(self) -> str:
        return self._command_interface.name

    @property
    def interface_name(self) -> str:
        return self._command_interface.interface_name

    @property
    def full_name(self) -> str:
        return self._command_interface.full_name

    @property
    def value(self) -> float:
        return self._command_interface.value

    @value.setter
    def value(self, val: float) -> None:
        self._command_interface.value = val

    def release(self) -> None:
        """End the loan; the deleter runs at most once."""
        deleter, self._deleter = self._deleter, None
        if deleter is not None:
            deleter()

    def __enter__(self) -> "LoanedCommandInterface":
        return self

    def __exit__(self, *args) -> None:
        self.release()