"""Handles that enforce position, velocity, acceleration and effort limits on joint commands."""

import copy
import math
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

from hwcontrol.types import HW_IF_POSITION, HW_IF_VELOCITY

Period = Union[float, int, timedelta]

_DOUBLE_MAX = sys.float_info.max


class JointLimitsInterfaceError(Exception):
    """Raised when limits cannot be enforced for a joint."""


@dataclass
class JointLimits:
    """Hard limits of a joint; each group applies only if its flag is set."""

    min_position: float = 0.0
    max_position: float = 0.0
    max_velocity: float = 0.0
    max_acceleration: float = 0.0
    max_jerk: float = 0.0
    max_effort: float = 0.0
    has_position_limits: bool = False
    has_velocity_limits: bool = False
    has_acceleration_limits: bool = False
    has_jerk_limits: bool = False
    has_effort_limits: bool = False
    angle_wraparound: bool = False


@dataclass
class SoftJointLimits:
    """Soft position limits and the gains used to approach them."""

    min_position: float = 0.0
    max_position: float = 0.0
    k_position: float = 0.0
    k_velocity: float = 0.0


class JointHandle:
    """A named joint value; a handle without a value is invalid and false."""

    def __init__(self, name: str = "", interface_name: str = "", value: Optional[float] = None):
        self.name = name
        self.interface_name = interface_name
        self._value = None if value is None else float(value)

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.interface_name}"

    @property
    def value(self) -> float:
        if self._value is None:
            raise RuntimeError(f"handle '{self.full_name}' holds no value")
        return self._value

    @value.setter
    def value(self, val: float) -> None:
        if self._value is None:
            raise RuntimeError(f"handle '{self.full_name}' holds no value")
        self._value = float(val)

    def __bool__(self) -> bool:
        return self._value is not None

    def __repr__(self) -> str:
        return f"JointHandle({self.name!r}, {self.interface_name!r}, {self._value!r})"


def _seconds(period: Period) -> float:
    if isinstance(period, timedelta):
        return period.total_seconds()
    return float(period)


def _clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if high < value:
        return high
    return value


class JointLimitHandle(ABC):
    """Base class of handles that enforce limits on a joint command."""

    def __init__(
        self,
        position_handle: Optional[JointHandle] = None,
        command_handle: Optional[JointHandle] = None,
        limits: Optional[JointLimits] = None,
        velocity_handle: Optional[JointHandle] = None,
    ):
        self.position_handle = (
            position_handle if position_handle is not None else JointHandle("", HW_IF_POSITION)
        )
        self.velocity_handle = (
            velocity_handle if velocity_handle is not None else JointHandle("", HW_IF_VELOCITY)
        )
        self.command_handle = (
            command_handle if command_handle is not None else JointHandle("", "position_command")
        )
        self.limits = copy.copy(limits) if limits is not None else JointLimits()
        self.prev_pos = math.nan
        self.prev_vel = 0.0

    @property
    def name(self) -> str:
        """Joint name, taken from the first valid handle."""
        for handle in (self.position_handle, self.velocity_handle, self.command_handle):
            if handle:
                return handle.name
        return ""

    @abstractmethod
    def enforce_limits(self, period: Period) -> None:
        """Saturate the command according to the limits over ``period``."""

    def reset(self) -> None:
        """Clear stored state so it is re-initialised on the next iteration."""
        self.prev_pos = math.nan
        self.prev_vel = 0.0

    def _velocity(self, dt: float) -> float:
        if self.velocity_handle:
            return self.velocity_handle.value
        return (self.position_handle.value - self.prev_pos) / dt

    def _require_velocity_limits(self) -> None:
        if not self.limits.has_velocity_limits:
            raise JointLimitsInterfaceError(
                f"Cannot enforce limits for joint '{self.name}'. "
                "It has no velocity limits specification."
            )

    def _require_effort_limits(self, word: str) -> None:
        if not self.limits.has_effort_limits:
            raise JointLimitsInterfaceError(
                f"Cannot enforce limits for joint '{self.name}'. "
                f"It has no {word} limits specification."
            )


class _JointSoftLimitsHandle(JointLimitHandle):
    def __init__(
        self,
        position_handle: Optional[JointHandle],
        command_handle: Optional[JointHandle],
        limits: Optional[JointLimits],
        soft_limits: Optional[SoftJointLimits],
        velocity_handle: Optional[JointHandle] = None,
    ):
        super().__init__(position_handle, command_handle, limits, velocity_handle)
        self.soft_limits = copy.copy(soft_limits) if soft_limits is not None else SoftJointLimits()

    def _soft_velocity_bounds(self, pos: float, max_vel: float):
        if self.limits.has_position_limits:
            k = self.soft_limits.k_position
            low = _clamp(-k * (pos - self.soft_limits.min_position), -max_vel, max_vel)
            high = _clamp(-k * (pos - self.soft_limits.max_position), -max_vel, max_vel)
            return low, high
        return -max_vel, max_vel


class PositionJointSaturationHandle(JointLimitHandle):
    """Enforces position and velocity limits of a position-controlled joint without soft limits."""

    def __init__(self, position_handle: JointHandle, command_handle: JointHandle, limits: JointLimits):
        super().__init__(position_handle, command_handle, limits)
        if self.limits.has_position_limits:
            self._min_pos_limit = self.limits.min_position
            self._max_pos_limit = self.limits.max_position
        else:
            self._min_pos_limit = -_DOUBLE_MAX
            self._max_pos_limit = _DOUBLE_MAX

    def enforce_limits(self, period: Period) -> None:
        if math.isnan(self.prev_pos):
            self.prev_pos = self.position_handle.value

        if self.limits.has_velocity_limits:
            delta_pos = self.limits.max_velocity * _seconds(period)
            min_pos = max(self.prev_pos - delta_pos, self._min_pos_limit)
            max_pos = min(self.prev_pos + delta_pos, self._max_pos_limit)
        else:
            min_pos = self._min_pos_limit
            max_pos = self._max_pos_limit

        cmd = _clamp(self.command_handle.value, min_pos, max_pos)
        self.command_handle.value = cmd
        self.prev_pos = cmd


class PositionJointSoftLimitsHandle(_JointSoftLimitsHandle):
    """Enforces position and velocity limits of a position-controlled joint with soft limits.

    The command is checked open loop: the previous command, not the measured
    position, is used to estimate velocity.
    """

    def __init__(
        self,
        position_handle: JointHandle,
        command_handle: JointHandle,
        limits: JointLimits,
        soft_limits: SoftJointLimits,
    ):
        super().__init__(position_handle, command_handle, limits, soft_limits)
        self._require_velocity_limits()

    def enforce_limits(self, period: Period) -> None:
        dt = _seconds(period)
        if not dt > 0.0:
            raise ValueError("period must be positive")

        if math.isnan(self.prev_pos):
            self.prev_pos = self.position_handle.value
        pos = self.prev_pos

        soft_min_vel, soft_max_vel = self._soft_velocity_bounds(pos, self.limits.max_velocity)

        pos_low = pos + soft_min_vel * dt
        pos_high = pos + soft_max_vel * dt
        if self.limits.has_position_limits:
            pos_low = max(pos_low, self.limits.min_position)
            pos_high = min(pos_high, self.limits.max_position)

        pos_cmd = _clamp(self.command_handle.value, pos_low, pos_high)
        self.command_handle.value = pos_cmd
        self.prev_pos = self.command_handle.value


class EffortJointSaturationHandle(JointLimitHandle):
    """Enforces position, velocity and effort limits of an effort-controlled joint."""

    def __init__(
        self,
        position_handle: JointHandle,
        command_handle: JointHandle,
        limits: JointLimits,
        velocity_handle: Optional[JointHandle] = None,
    ):
        super().__init__(position_handle, command_handle, limits, velocity_handle)
        self._require_velocity_limits()
        self._require_effort_limits("efforts")

    def enforce_limits(self, period: Period) -> None:
        limits = self.limits
        min_eff = -limits.max_effort
        max_eff = limits.max_effort

        if limits.has_position_limits:
            pos = self.position_handle.value
            if pos < limits.min_position:
                min_eff = 0.0
            elif pos > limits.max_position:
                max_eff = 0.0

        vel = self._velocity(_seconds(period))
        if vel < -limits.max_velocity:
            min_eff = 0.0
        elif vel > limits.max_velocity:
            max_eff = 0.0

        self.command_handle.value = _clamp(self.command_handle.value, min_eff, max_eff)


class EffortJointSoftLimitsHandle(_JointSoftLimitsHandle):
    """Enforces position, velocity and effort limits of an effort-controlled joint with soft limits."""

    def __init__(
        self,
        position_handle: JointHandle,
        command_handle: JointHandle,
        limits: JointLimits,
        soft_limits: SoftJointLimits,
        velocity_handle: Optional[JointHandle] = None,
    ):
        super().__init__(position_handle, command_handle, limits, soft_limits, velocity_handle)
        self._require_velocity_limits()
        self._require_effort_limits("effort")

    def enforce_limits(self, period: Period) -> None:
        pos = self.position_handle.value
        vel = self._velocity(_seconds(period))
        max_effort = self.limits.max_effort
        k_velocity = self.soft_limits.k_velocity

        soft_min_vel, soft_max_vel = self._soft_velocity_bounds(pos, self.limits.max_velocity)

        soft_min_eff = _clamp(-k_velocity * (vel - soft_min_vel), -max_effort, max_effort)
        soft_max_eff = _clamp(-k_velocity * (vel - soft_max_vel), -max_effort, max_effort)

        self.command_handle.value = _clamp(self.command_handle.value, soft_min_eff, soft_max_eff)


class VelocityJointSaturationHandle(JointLimitHandle):
    """Enforces velocity and acceleration limits of a velocity-controlled joint."""

    def __init__(
        self,
        command_handle: JointHandle,
        limits: JointLimits,
        velocity_handle: Optional[JointHandle] = None,
    ):
        super().__init__(None, command_handle, limits, velocity_handle)
        self._require_velocity_limits()

    def enforce_limits(self, period: Period) -> None:
        limits = self.limits
        if limits.has_acceleration_limits:
            dt = _seconds(period)
            if not dt > 0.0:
                raise ValueError("period must be positive")
            vel_low = max(self.prev_vel - limits.max_acceleration * dt, -limits.max_velocity)
            vel_high = min(self.prev_vel + limits.max_acceleration * dt, limits.max_velocity)
        else:
            vel_low = -limits.max_velocity
            vel_high = limits.max_velocity

        self.command_handle.value = _clamp(self.command_handle.value, vel_low, vel_high)
        self.prev_vel = self.command_handle.value


class VelocityJointSoftLimitsHandle(_JointSoftLimitsHandle):
    """Enforces position, velocity and acceleration limits of a velocity-controlled joint with soft limits."""

    def __init__(
        self,
        position_handle: JointHandle,
        velocity_handle: JointHandle,
        command_handle: JointHandle,
        limits: JointLimits,
        soft_limits: SoftJointLimits,
    ):
        super().__init__(position_handle, command_handle, limits, soft_limits, velocity_handle)
        self._max_vel_limit = (
            self.limits.max_velocity if self.limits.has_velocity_limits else _DOUBLE_MAX
        )

    def enforce_limits(self, period: Period) -> None:
        if self.limits.has_position_limits:
            pos = self.position_handle.value
            min_vel, max_vel = self._soft_velocity_bounds(pos, self._max_vel_limit)
        else:
            min_vel, max_vel = -self._max_vel_limit, self._max_vel_limit

        if self.limits.has_acceleration_limits:
            delta_t = _seconds(period)
            vel = self._velocity(delta_t)
            min_vel = max(vel - self.limits.max_acceleration * delta_t, min_vel)
            max_vel = min(vel + self.limits.max_acceleration * delta_t, max_vel)

        self.command_handle.value = _clamp(self.command_handle.value, min_vel, max_vel)