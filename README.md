# hwcontrol

`hwcontrol` is a set of pure-Python building blocks for a robot control stack.
It has no runtime dependencies.

## Modules

- `hwcontrol.types`: the shared enumerations `ReturnType` (`OK`, `ERROR`) and
  `HardwareStatus` (`UNKNOWN`, `CONFIGURED`, `STARTED`, `STOPPED`). It also
  holds the interface type names `HW_IF_POSITION`, `HW_IF_VELOCITY`,
  `HW_IF_ACCELERATION` and `HW_IF_EFFORT`, and the lifecycle state labels
  `UNCONFIGURED`, `INACTIVE`, `ACTIVE` and `FINALIZED`.
- `hwcontrol.loaned`: `LoanedCommandInterface` wraps a command interface. It
  exposes `name`, `interface_name`, `full_name` and a read/write `value`.
  `release()` runs the release callback given at creation, and runs it at
  most once. Leaving a `with` block calls `release()`.
- `hwcontrol.controller`: `ControllerInterface` is an abstract base class for
  controllers with a managed lifecycle. It comes with:
  - `ControllerNode`, a parameter store;
  - `InterfaceConfiguration` and `InterfaceConfigurationType`, which say which
    interfaces a controller claims;
  - `LifecycleState` and `CallbackReturn`.
- `hwcontrol.joint_limits`: handles that saturate joint commands:
  - `PositionJointSaturationHandle` and `PositionJointSoftLimitsHandle`;
  - `EffortJointSaturationHandle` and `EffortJointSoftLimitsHandle`;
  - `VelocityJointSaturationHandle` and `VelocityJointSoftLimitsHandle`.

  Limits are described with `JointLimits` and `SoftJointLimits`. Values are held
  in `JointHandle` objects.
- `hwcontrol.transmission`: `FourBarLinkageTransmission` maps position,
  velocity and effort between two actuators and two joints. It reads and
  writes values through `ActuatorHandle` and `JointHandle` objects.

## Installation

```
pip install hwcontrol
```

To run the tests:

```
pip install "hwcontrol[test]"
pytest
```

## Example: a four-bar linkage transmission

Each transmission handle reads and writes its value through a one-element list
that you own.

```python
from hwcontrol.transmission import ActuatorHandle, FourBarLinkageTransmission, JointHandle

act1, act2 = [3.0], [5.0]
joint1, joint2 = [0.0], [0.0]

trans = FourBarLinkageTransmission([10.0, -20.0], [-2.0, 4.0], [-2.0, 4.0])
trans.configure(
    [JointHandle("joint1", "position", joint1), JointHandle("joint2", "position", joint2)],
    [ActuatorHandle("act1", "position", act1), ActuatorHandle("act2", "position", act2)],
)
trans.actuator_to_joint()   # joint1[0] ≈ -2.15, joint2[0] ≈ 3.975
trans.joint_to_actuator()   # maps joint values back into act1 and act2
```

The transmission raises `TransmissionError` in two cases:

- when a reduction ratio is zero or a vector does not have two entries;
- when `configure` is given handles that do not name exactly two joints and two
  actuators with a matching interface type.

`handles_info` reports which handles are bound.

## Example: joint limits

```python
from hwcontrol.joint_limits import JointHandle, JointLimits, PositionJointSaturationHandle

limits = JointLimits(has_position_limits=True, min_position=-1.0, max_position=1.0)
position = JointHandle("joint1", "position", 0.0)
command = JointHandle("joint1", "position_command", 2.5)

handle = PositionJointSaturationHandle(position, command, limits)
handle.enforce_limits(0.01)  # period in seconds, or a datetime.timedelta
assert command.value == 1.0
```

Some handles need limits that were not given. When velocity limits, or where
needed effort limits, are missing, these handles raise
`JointLimitsInterfaceError`:

- `PositionJointSoftLimitsHandle`
- `EffortJointSaturationHandle`
- `EffortJointSoftLimitsHandle`
- `VelocityJointSaturationHandle`

`reset()` clears the stored previous position and velocity.

## Example: controller lifecycle

```python
from hwcontrol.controller import (
    ControllerInterface,
    InterfaceConfiguration,
    InterfaceConfigurationType,
)
from hwcontrol.types import ReturnType


class MyController(ControllerInterface):
    def command_interface_configuration(self):
        return InterfaceConfiguration(InterfaceConfigurationType.INDIVIDUAL, ["joint2/velocity"])

    def state_interface_configuration(self):
        return InterfaceConfiguration(InterfaceConfigurationType.NONE)

    def update(self):
        return ReturnType.OK


controller = MyController()
controller.init("my_controller", {"gain": 2.0})
controller.auto_declare("gain", 1.0)    # already set by the override: 2.0
controller.configure()                  # unconfigured -> inactive
controller.activate()                   # inactive -> active
print(controller.current_state.label)   # "active"
```

You can override the hooks `on_configure`, `on_cleanup`, `on_activate`,
`on_deactivate`, `on_shutdown` and `on_error`. Each hook returns a
`CallbackReturn`, which decides what the transition does:

- `SUCCESS` moves the controller to the next state.
- `FAILURE` leaves the state unchanged.
- `ERROR` calls `on_error` and moves the controller to finalized.

Two calls need setup first:

- `node` raises `RuntimeError` until `init` has been called.
- `release_interfaces()` only has something to end after interfaces have been
  given to `assign_interfaces`. It releases every loaned interface it was given
  and then clears both lists.

## What the package does not do

`hwcontrol` does not talk to devices. It has no base classes for actuator or
sensor drivers. It also has no resource manager that loads components or
hands out interfaces. There is no controller manager that runs an update loop
or switches controllers. It provides no ready-made sensor groupings such as
force/torque or IMU readers.

Everything here is a library to build those on. There is no command-line
program and no server.