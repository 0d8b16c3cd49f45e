"""Four-bar-linkage transmission between two actuators and two joints."""

from typing import Iterable, List, MutableSequence, Optional, Sequence, TypeVar

from hwcontrol.types import HW_IF_EFFORT, HW_IF_POSITION, HW_IF_VELOCITY


class TransmissionError(Exception):
    """Raised when a transmission is built or configured with invalid data."""


class _Handle:
    """A named value stored in a shared one-element cell.

    ``cell`` is a one-element mutable sequence owned elsewhere (for example
    ``[0.0]``); reads and writes go through it. A handle without a cell is
    invalid and evaluates as false.
    """

    def __init__(
        self,
        name: str,
        interface_name: str,
        cell: Optional[MutableSequence[float]] = None,
    ):
        self.name = name
        self.interface_name = interface_name
        self._cell = cell

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.interface_name}"

    @property
    def value(self) -> float:
        if self._cell is None:
            raise RuntimeError(f"handle '{self.full_name}' has no value cell")
        return self._cell[0]

    @value.setter
    def value(self, val: float) -> None:
        if self._cell is None:
            raise RuntimeError(f"handle '{self.full_name}' has no value cell")
        self._cell[0] = val

    def __bool__(self) -> bool:
        return self._cell is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.interface_name!r}, {self._cell!r})"


class ActuatorHandle(_Handle):
    """Handle to an actuator-space value."""

    def __init__(
        self,
        name: str,
        interface_name: str,
        cell: Optional[MutableSequence[float]] = None,
    ):
        super().__init__(name, interface_name, cell)

    @property
    def value(self) -> float:
        return _Handle.value.fget(self)

    @value.setter
    def value(self, val: float) -> None:
        _Handle.value.fset(self, val)

    def __bool__(self) -> bool:
        return super().__bool__()


class JointHandle(_Handle):
    """Handle to a joint-space value."""

    def __init__(
        self,
        name: str,
        interface_name: str,
        cell: Optional[MutableSequence[float]] = None,
    ):
        super().__init__(name, interface_name, cell)

    @property
    def value(self) -> float:
        return _Handle.value.fget(self)

    @value.setter
    def value(self, val: float) -> None:
        _Handle.value.fset(self, val)

    def __bool__(self) -> bool:
        return super().__bool__()


H = TypeVar("H", bound=_Handle)


def _unique_names(handles: Iterable[_Handle]) -> List[str]:
    return sorted({handle.name for handle in handles})


def _ordered_handles(handles: Sequence[H], names: Sequence[str], interface_type: str) -> List[H]:
    """Valid handles of ``interface_type``, ordered by ``names``."""
    return [
        handle
        for name in names
        for handle in handles
        if handle.name == name and handle.interface_name == interface_type and handle
    ]


def _format_names(names: Iterable[str]) -> str:
    return "[" + ", ".join(names) + "]"


class FourBarLinkageTransmission:
    """Two actuators driving two joints where joint 1 depends on actuator 1 only
    and joint 2 depends on both actuators.

    Reduction ratios may take any non-zero value; negative values flip direction.
    ``joint_offset`` is the offset between actuator and joint zeros, in joint
    position coordinates.
    """

    def __init__(
        self,
        actuator_reduction: Sequence[float],
        joint_reduction: Sequence[float],
        joint_offset: Sequence[float] = (0.0, 0.0),
    ):
        self._actuator_reduction = [float(v) for v in actuator_reduction]
        self._joint_reduction = [float(v) for v in joint_reduction]
        self._joint_offset = [float(v) for v in joint_offset]

        if (
            len(self._actuator_reduction) != self.num_actuators
            or len(self._joint_reduction) != self.num_joints
            or len(self._joint_offset) != self.num_joints
        ):
            raise TransmissionError("Reduction and offset vectors must have size 2.")
        if 0.0 in self._actuator_reduction or 0.0 in self._joint_reduction:
            raise TransmissionError("Transmission reduction ratios cannot be zero.")

        self._joint_position: List[JointHandle] = []
        self._joint_velocity: List[JointHandle] = []
        self._joint_effort: List[JointHandle] = []
        self._actuator_position: List[ActuatorHandle] = []
        self._actuator_velocity: List[ActuatorHandle] = []
        self._actuator_effort: List[ActuatorHandle] = []

    @property
    def num_actuators(self) -> int:
        return 2

    @property
    def num_joints(self) -> int:
        return 2

    @property
    def actuator_reduction(self) -> List[float]:
        return list(self._actuator_reduction)

    @property
    def joint_reduction(self) -> List[float]:
        return list(self._joint_reduction)

    @property
    def joint_offset(self) -> List[float]:
        return list(self._joint_offset)

    def configure(
        self,
        joint_handles: Sequence[JointHandle],
        actuator_handles: Sequence[ActuatorHandle],
    ) -> None:
        """Bind the transmission to joint and actuator handles.

        Raises TransmissionError unless exactly two joints and two actuators are
        named and at least one interface type is fully and consistently covered.
        """
        if not joint_handles:
            raise TransmissionError("No joint handles were passed in")
        if not actuator_handles:
            raise TransmissionError("No actuator handles were passed in")

        joint_names = _unique_names(joint_handles)
        if len(joint_names) != 2:
            raise TransmissionError(
                "There should be exactly two unique joint names but was given "
                + _format_names(joint_names)
            )
        actuator_names = _unique_names(actuator_handles)
        if len(actuator_names) != 2:
            raise TransmissionError(
                "There should be exactly two unique actuator names but was given "
                + _format_names(actuator_names)
            )

        self._joint_position = _ordered_handles(joint_handles, joint_names, HW_IF_POSITION)
        self._joint_velocity = _ordered_handles(joint_handles, joint_names, HW_IF_VELOCITY)
        self._joint_effort = _ordered_handles(joint_handles, joint_names, HW_IF_EFFORT)

        if (
            len(self._joint_position) != 2
            and len(self._joint_velocity) != 2
            and len(self._joint_effort) != 2
        ):
            raise TransmissionError("Not enough valid or required joint handles were presented.")

        self._actuator_position = _ordered_handles(actuator_handles, actuator_names, HW_IF_POSITION)
        self._actuator_velocity = _ordered_handles(actuator_handles, actuator_names, HW_IF_VELOCITY)
        self._actuator_effort = _ordered_handles(actuator_handles, actuator_names, HW_IF_EFFORT)

        if (
            len(self._actuator_position) != 2
            and len(self._actuator_velocity) != 2
            and len(self._actuator_effort) != 2
        ):
            raise TransmissionError(
                "Not enough valid or required actuator handles were presented. \n"
                + self.handles_info
            )

        if (
            len(self._joint_position) != len(self._actuator_position)
            and len(self._joint_velocity) != len(self._actuator_velocity)
            and len(self._joint_effort) != len(self._actuator_effort)
        ):
            raise TransmissionError("Pair-wise mismatch on interfaces. \n" + self.handles_info)

    def _complete(self, actuators: Sequence[_Handle], joints: Sequence[_Handle]) -> bool:
        return len(actuators) == self.num_actuators and len(joints) == self.num_joints

    def actuator_to_joint(self) -> None:
        """Map actuator position, velocity and effort values into joint space."""
        ar = self._actuator_reduction
        jr = self._joint_reduction
        off = self._joint_offset

        act, joint = self._actuator_position, self._joint_position
        if self._complete(act, joint):
            a0, a1 = act[0].value, act[1].value
            joint[0].value = a0 / (jr[0] * ar[0]) + off[0]
            joint[1].value = (a1 / ar[1] - a0 / (jr[0] * ar[0])) / jr[1] + off[1]

        act, joint = self._actuator_velocity, self._joint_velocity
        if self._complete(act, joint):
            a0, a1 = act[0].value, act[1].value
            joint[0].value = a0 / (jr[0] * ar[0])
            joint[1].value = (a1 / ar[1] - a0 / (jr[0] * ar[0])) / jr[1]

        act, joint = self._actuator_effort, self._joint_effort
        if self._complete(act, joint):
            a0, a1 = act[0].value, act[1].value
            joint[0].value = jr[0] * a0 * ar[0]
            joint[1].value = jr[1] * (a1 * ar[1] - a0 * ar[0] * jr[0])

    def joint_to_actuator(self) -> None:
        """Map joint position, velocity and effort values into actuator space."""
        ar = self._actuator_reduction
        jr = self._joint_reduction
        off = self._joint_offset

        act, joint = self._actuator_position, self._joint_position
        if self._complete(act, joint):
            j0 = joint[0].value - off[0]
            j1 = joint[1].value - off[1]
            act[0].value = j0 * jr[0] * ar[0]
            act[1].value = (j0 + j1 * jr[1]) * ar[1]

        act, joint = self._actuator_velocity, self._joint_velocity
        if self._complete(act, joint):
            j0, j1 = joint[0].value, joint[1].value
            act[0].value = j0 * jr[0] * ar[0]
            act[1].value = (j0 + j1 * jr[1]) * ar[1]

        act, joint = self._actuator_effort, self._joint_effort
        if self._complete(act, joint):
            j0, j1 = joint[0].value, joint[1].value
            act[0].value = j0 / (ar[0] * jr[0])
            act[1].value = (j0 + j1 / jr[1]) / ar[1]

    @property
    def handles_info(self) -> str:
        """Human-readable report of the bound handles."""

        def names(handles: Iterable[_Handle]) -> str:
            return _format_names(_unique_names(handles))

        return (
            "Got the following handles:\n"
            f"Joint position: {names(self._joint_position)}, "
            f"Actuator position: {names(self._actuator_position)}\n"
            f"Joint velocity: {names(self._joint_velocity)}, "
            f"Actuator velocity: {names(self._actuator_velocity)}\n"
            f"Joint effort: {names(self._joint_effort)}, "
            f"Actuator effort: {names(self._actuator_effort)}"
        )