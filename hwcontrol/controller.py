"""Base class for controllers with a managed lifecycle and a parameter node."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional

from hwcontrol.types import ACTIVE, FINALIZED, INACTIVE, UNCONFIGURED, ReturnType

PRIMARY_STATE_UNKNOWN = 0
PRIMARY_STATE_UNCONFIGURED = 1
PRIMARY_STATE_INACTIVE = 2
PRIMARY_STATE_ACTIVE = 3
PRIMARY_STATE_FINALIZED = 4


class InterfaceConfigurationType(IntEnum):
    """Which interfaces a controller claims: all, an individual set, or none."""

    ALL = 0
    INDIVIDUAL = 1
    NONE = 2


@dataclass
class InterfaceConfiguration:
    """What command or state interfaces to claim."""

    type: InterfaceConfigurationType
    names: List[str] = field(default_factory=list)


class CallbackReturn(IntEnum):
    """Result of a lifecycle transition callback."""

    SUCCESS = 97
    FAILURE = 98
    ERROR = 99


@dataclass(frozen=True)
class LifecycleState:
    """A primary lifecycle state: numeric id and label."""

    id: int = PRIMARY_STATE_UNKNOWN
    label: str = "unknown"


_UNCONFIGURED_STATE = LifecycleState(PRIMARY_STATE_UNCONFIGURED, UNCONFIGURED)
_INACTIVE_STATE = LifecycleState(PRIMARY_STATE_INACTIVE, INACTIVE)
_ACTIVE_STATE = LifecycleState(PRIMARY_STATE_ACTIVE, ACTIVE)
_FINALIZED_STATE = LifecycleState(PRIMARY_STATE_FINALIZED, FINALIZED)


class ControllerNode:
    """Named parameter store; overrides are declared automatically on creation."""

    def __init__(self, name: str, parameter_overrides: Optional[Mapping[str, Any]] = None):
        self.name = name
        self._parameters: Dict[str, Any] = dict(parameter_overrides or {})

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def declare_parameter(self, name: str, default_value: Any) -> Any:
        """Declare a parameter and return its value.

        Raises ValueError if the parameter is already declared.
        """
        if name in self._parameters:
            raise ValueError(f"parameter '{name}' has already been declared")
        self._parameters[name] = default_value
        return default_value

    def get_parameter(self, name: str) -> Any:
        """Return the value of a declared parameter; KeyError if it is not set."""
        try:
            return self._parameters[name]
        except KeyError:
            raise KeyError(f"parameter '{name}' is not set") from None


class ControllerInterface(ABC):
    """A controller whose lifecycle is driven only by its manager."""

    def __init__(self) -> None:
        self.command_interfaces: List[Any] = []
        self.state_interfaces: List[Any] = []
        self._node: Optional[ControllerNode] = None
        self._lifecycle_state = LifecycleState()

    @abstractmethod
    def command_interface_configuration(self) -> InterfaceConfiguration:
        """Command interfaces this controller wants to claim."""

    @abstractmethod
    def state_interface_configuration(self) -> InterfaceConfiguration:
        """State interfaces this controller wants to claim."""

    @abstractmethod
    def update(self) -> ReturnType:
        """Run one control cycle."""

    def init(
        self, controller_name: str, parameter_overrides: Optional[Mapping[str, Any]] = None
    ) -> ReturnType:
        """Create the node and enter the unconfigured state."""
        self._node = ControllerNode(controller_name, parameter_overrides)
        self._lifecycle_state = _UNCONFIGURED_STATE
        return ReturnType.OK

    def assign_interfaces(self, command_interfaces, state_interfaces) -> None:
        self.command_interfaces = list(command_interfaces)
        self.state_interfaces = list(state_interfaces)

    def release_interfaces(self) -> None:
        """Give back all loaned interfaces, ending each loan that can be ended."""
        for interface in (*self.command_interfaces, *self.state_interfaces):
            release = getattr(interface, "release", None)
            if callable(release):
                release()
        self.command_interfaces.clear()
        self.state_interfaces.clear()

    @property
    def node(self) -> ControllerNode:
        if self._node is None:
            raise RuntimeError("Node hasn't been initialized yet!")
        return self._node

    def auto_declare(self, name: str, default_value: Any) -> Any:
        """Declare ``name`` with ``default_value`` unless declared; return its value."""
        node = self.node
        if not node.has_parameter(name):
            return node.declare_parameter(name, default_value)
        return node.get_parameter(name)

    def _transition(self, result: CallbackReturn, success_state: LifecycleState) -> None:
        if result == CallbackReturn.SUCCESS:
            self._lifecycle_state = success_state
        elif result == CallbackReturn.ERROR:
            self.on_error(self._lifecycle_state)
            self._lifecycle_state = _FINALIZED_STATE

    def configure(self) -> LifecycleState:
        if self._lifecycle_state.id == PRIMARY_STATE_UNCONFIGURED:
            self._transition(self.on_configure(self._lifecycle_state), _INACTIVE_STATE)
        return self._lifecycle_state

    def cleanup(self) -> LifecycleState:
        self._transition(self.on_cleanup(self._lifecycle_state), _UNCONFIGURED_STATE)
        return self._lifecycle_state

    def deactivate(self) -> LifecycleState:
        self._transition(self.on_deactivate(self._lifecycle_state), _INACTIVE_STATE)
        return self._lifecycle_state

    def activate(self) -> LifecycleState:
        if self._lifecycle_state.id == PRIMARY_STATE_INACTIVE:
            self._transition(self.on_activate(self._lifecycle_state), _ACTIVE_STATE)
        return self._lifecycle_state

    def shutdown(self) -> LifecycleState:
        self._transition(self.on_shutdown(self._lifecycle_state), _FINALIZED_STATE)
        return self._lifecycle_state

    @property
    def current_state(self) -> LifecycleState:
        return self._lifecycle_state

    def on_configure(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS

    def on_cleanup(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS

    def on_activate(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS

    def on_deactivate(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS

    def on_shutdown(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS

    def on_error(self, previous_state: LifecycleState) -> CallbackReturn:
        return CallbackReturn.SUCCESS