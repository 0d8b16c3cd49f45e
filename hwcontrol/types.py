"""Shared enumerations and constant names used across hardware and controllers."""

from enum import IntEnum


class ReturnType(IntEnum):
    """Outcome reported by hardware components and controllers."""

    OK = 0
    ERROR = 1


class HardwareStatus(IntEnum):
    """Life-cycle status of a hardware component."""

    UNKNOWN = 0
    CONFIGURED = 1
    STARTED = 3
    STOPPED = 4


# Standard interface type names.
HW_IF_POSITION = "position"
HW_IF_VELOCITY = "velocity"
HW_IF_ACCELERATION = "acceleration"
HW_IF_EFFORT = "effort"

# Labels of the controller lifecycle states.
UNCONFIGURED = "unconfigured"
INACTIVE = "inactive"
ACTIVE = "active"
FINALIZED = "finalized"