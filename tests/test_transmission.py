import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hwcontrol.transmission import (
    ActuatorHandle,
    FourBarLinkageTransmission,
    JointHandle,
    TransmissionError,
)
from hwcontrol.types import HW_IF_EFFORT, HW_IF_POSITION, HW_IF_VELOCITY

EPS = 1e-6
INTERFACES = [HW_IF_POSITION, HW_IF_VELOCITY, HW_IF_EFFORT]

REDUCTION_GOOD = [1.0, 1.0]
REDUCTION_BAD = [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]
OFFSET_GOOD = [1.0, 1.0]


def _configure(trans, interface, a_cells, j_cells):
    trans.configure(
        [
            JointHandle("joint1", interface, j_cells[0]),
            JointHandle("joint2", interface, j_cells[1]),
        ],
        [
            ActuatorHandle("act1", interface, a_cells[0]),
            ActuatorHandle("act2", interface, a_cells[1]),
        ],
    )


@pytest.mark.parametrize("bad", REDUCTION_BAD)
def test_zero_reduction_raises(bad):
    with pytest.raises(TransmissionError):
        FourBarLinkageTransmission(bad, REDUCTION_GOOD)
    with pytest.raises(TransmissionError):
        FourBarLinkageTransmission(REDUCTION_GOOD, bad)
    with pytest.raises(TransmissionError):
        FourBarLinkageTransmission(bad, REDUCTION_GOOD, OFFSET_GOOD)
    with pytest.raises(TransmissionError):
        FourBarLinkageTransmission(REDUCTION_GOOD, bad, OFFSET_GOOD)


def test_wrong_sizes_raise():
    bad_size = [1.0]
    with pytest.raises(TransmissionError, match="size 2"):
        FourBarLinkageTransmission(bad_size, REDUCTION_GOOD)
    with pytest.raises(TransmissionError, match="size 2"):
        FourBarLinkageTransmission(REDUCTION_GOOD, bad_size)
    with pytest.raises(TransmissionError, match="size 2"):
        FourBarLinkageTransmission(REDUCTION_GOOD, REDUCTION_GOOD, bad_size)


def test_valid_creation_uses_default_offset():
    trans = FourBarLinkageTransmission(REDUCTION_GOOD, REDUCTION_GOOD)
    assert trans.joint_offset == [0.0, 0.0]
    trans = FourBarLinkageTransmission(REDUCTION_GOOD, REDUCTION_GOOD, OFFSET_GOOD)
    assert trans.joint_offset == [1.0, 1.0]


def test_accessors():
    trans = FourBarLinkageTransmission([2.0, -2.0], [4.0, -4.0], [1.0, -1.0])
    assert trans.num_actuators == 2
    assert trans.num_joints == 2
    assert trans.actuator_reduction == [2.0, -2.0]
    assert trans.joint_reduction == [4.0, -4.0]
    assert trans.joint_offset == [1.0, -1.0]


@pytest.mark.parametrize("interface", INTERFACES)
def test_configure_fails_with_bad_handles(interface):
    trans = FourBarLinkageTransmission([1.0, 1.0], [1.0, 1.0])
    dummy = [0.0]
    a1 = ActuatorHandle("act1", interface, dummy)
    a2 = ActuatorHandle("act2", interface, dummy)
    a3 = ActuatorHandle("act3", interface, dummy)
    j1 = JointHandle("joint1", interface, dummy)
    j2 = JointHandle("joint2", interface, dummy)
    j3 = JointHandle("joint3", interface, dummy)
    invalid_a1 = ActuatorHandle("act1", interface, None)
    invalid_j1 = JointHandle("joint1", interface, None)

    bad_cases = [
        ([], []),
        ([j1], []),
        ([j1], [a1]),
        ([], [a1]),
        ([j1, j2], [a1]),
        ([j1], [a1, a2]),
        ([j1, j2, j3], [a1, a2]),
        ([j1, j2], [a1, a2, a3]),
        ([j1, j2, j3], [a1, a2, a3]),
        ([j1, j2], [invalid_a1, a2]),
        ([invalid_j1, j2], [a1, a2]),
        ([invalid_j1, j2], [invalid_a1, a2]),
    ]
    for joints, actuators in bad_cases:
        with pytest.raises(TransmissionError):
            trans.configure(joints, actuators)


def test_handles_report_validity_and_values():
    cell = [3.5]
    handle = JointHandle("joint1", HW_IF_POSITION, cell)
    assert bool(handle)
    assert handle.value == 3.5
    handle.value = 1.25
    assert cell == [1.25]
    invalid = ActuatorHandle("act1", HW_IF_POSITION, None)
    assert not invalid
    with pytest.raises(RuntimeError):
        _ = invalid.value


def test_handles_info_lists_bound_names():
    trans = FourBarLinkageTransmission([1.0, 1.0], [1.0, 1.0])
    _configure(trans, HW_IF_VELOCITY, [[0.0], [0.0]], [[0.0], [0.0]])
    info = trans.handles_info
    assert "Joint velocity: [joint1, joint2]" in info
    assert "Actuator velocity: [act1, act2]" in info
    assert "Joint position: []" in info


def _round_trip(trans, ref, interface):
    a_cells = [[ref[0]], [ref[1]]]
    j_cells = [[0.0], [0.0]]
    _configure(trans, interface, a_cells, j_cells)
    trans.actuator_to_joint()
    a_cells[0][0] = a_cells[1][0] = 1337.1337
    trans.joint_to_actuator()
    return a_cells[0][0], a_cells[1][0]


def test_identity_map_fixed_example():
    trans = FourBarLinkageTransmission([10.0, -20.0], [-2.0, 4.0], [-2.0, 4.0])
    for interface in INTERFACES:
        a0, a1 = _round_trip(trans, [3.0, 5.0], interface)
        assert a0 == pytest.approx(3.0, abs=EPS)
        assert a1 == pytest.approx(5.0, abs=EPS)


_ratio = st.builds(
    lambda magnitude, sign: magnitude * sign,
    st.floats(min_value=0.1, max_value=100.0),
    st.sampled_from([1.0, -1.0]),
)
_value = st.floats(min_value=-100.0, max_value=100.0)


@settings(max_examples=100, deadline=None)
@given(
    ar=st.lists(_ratio, min_size=2, max_size=2),
    jr=st.lists(_ratio, min_size=2, max_size=2),
    offset=st.lists(_value, min_size=2, max_size=2),
    ref=st.lists(_value, min_size=2, max_size=2),
)
def test_identity_map_property(ar, jr, offset, ref):
    trans = FourBarLinkageTransmission(ar, jr, offset)
    for interface in INTERFACES:
        a0, a1 = _round_trip(trans, ref, interface)
        assert a0 == pytest.approx(ref[0], abs=EPS)
        assert a1 == pytest.approx(ref[1], abs=EPS)


def _actuator_to_joint(trans, interface, a_values):
    a_cells = [[a_values[0]], [a_values[1]]]
    j_cells = [[0.0], [0.0]]
    _configure(trans, interface, a_cells, j_cells)
    trans.actuator_to_joint()
    return j_cells[0][0], j_cells[1][0]


def test_dont_move_joints():
    trans = FourBarLinkageTransmission([10.0, 10.0], [2.0, 2.0], [1.0, 1.0])
    assert _actuator_to_joint(trans, HW_IF_EFFORT, [0.0, 0.0]) == pytest.approx((0.0, 0.0), abs=EPS)
    assert _actuator_to_joint(trans, HW_IF_VELOCITY, [0.0, 0.0]) == pytest.approx(
        (0.0, 0.0), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_POSITION, [0.0, 0.0]) == pytest.approx(
        (1.0, 1.0), abs=EPS
    )


def test_move_first_joint_only():
    trans = FourBarLinkageTransmission([10.0, 10.0], [2.0, 2.0])
    assert _actuator_to_joint(trans, HW_IF_EFFORT, [5.0, 10.0]) == pytest.approx(
        (100.0, 0.0), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_VELOCITY, [10.0, 5.0]) == pytest.approx(
        (0.5, 0.0), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_POSITION, [10.0, 5.0]) == pytest.approx(
        (0.5, 0.0), abs=EPS
    )


def test_move_second_joint_only():
    trans = FourBarLinkageTransmission([10.0, 10.0], [2.0, 2.0])
    assert _actuator_to_joint(trans, HW_IF_EFFORT, [0.0, 10.0]) == pytest.approx(
        (0.0, 200.0), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_VELOCITY, [0.0, 10.0]) == pytest.approx(
        (0.0, 0.5), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_POSITION, [0.0, 10.0]) == pytest.approx(
        (0.0, 0.5), abs=EPS
    )


def test_move_both_joints():
    trans = FourBarLinkageTransmission([10.0, -20.0], [-2.0, 4.0], [-2.0, 4.0])
    assert _actuator_to_joint(trans, HW_IF_EFFORT, [3.0, 5.0]) == pytest.approx(
        (-60.0, -160.0), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_VELOCITY, [3.0, 5.0]) == pytest.approx(
        (-0.15, -0.025), abs=EPS
    )
    assert _actuator_to_joint(trans, HW_IF_POSITION, [3.0, 5.0]) == pytest.approx(
        (-2.15, 3.975), abs=EPS
    )