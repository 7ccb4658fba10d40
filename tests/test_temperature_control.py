import pytest

from greenhousectl.temperature_control import TemperatureControl


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tc(clock):
    control = TemperatureControl(clock=clock)
    control.begin()
    return control


def test_defaults_before_begin(clock):
    control = TemperatureControl(clock=clock)
    assert control.target == 22.0
    assert control.current_temperature == 20.0
    assert control.enabled is False


def test_update_ignored_when_disabled(clock):
    control = TemperatureControl(clock=clock)
    clock.now = 1000
    control.update(30.0)
    assert control.current_temperature == 20.0


def test_update_ignored_without_elapsed_time(tc):
    tc.update(30.0)
    assert tc.current_temperature == 20.0


def test_heating_when_too_cold(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    assert tc.is_heating_active()
    assert not tc.is_cooling_active()
    assert tc.adjustment_count == 1
    assert tc.error() == tc.target - 15.0


def test_repeated_heating_counts_once(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    clock.now = 2000
    tc.update(16.0)
    assert tc.adjustment_count == 1


def test_cooling_when_too_hot(tc, clock):
    clock.now = 1000
    tc.update(30.0)
    assert tc.is_cooling_active()
    assert not tc.is_heating_active()


def test_stable_within_tolerance(tc, clock):
    clock.now = 1000
    tc.update(22.5)
    assert not tc.is_heating_active()
    assert not tc.is_cooling_active()
    assert tc.is_in_range()


def test_total_active_time(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    clock.now = 4000
    tc.update(22.0)
    assert tc.total_active_time() == 4000 - 1000


def test_integral_windup_is_clamped(tc, clock):
    clock.now = 100000
    tc.update(10.0)
    assert tc.integral == tc.max_integral


def test_pid_output_clamped_and_zero_when_disabled(tc, clock):
    tc.set_pid_constants(50.0, 0.0, 0.0)
    clock.now = 1000
    tc.update(10.0)
    assert tc.pid_output() == 100.0
    tc.disable()
    assert tc.pid_output() == 0.0


def test_set_target_valid_and_resets_integral(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    assert tc.integral != 0.0
    tc.set_target(25.0)
    assert tc.target == 25.0
    assert tc.integral == 0.0


@pytest.mark.parametrize("target", [5.0, 40.0])
def test_set_target_out_of_range(tc, target):
    with pytest.raises(ValueError):
        tc.set_target(target)
    assert tc.target == 22.0


@pytest.mark.parametrize("tolerance", [0.0, 6.0, -1.0])
def test_set_tolerance_invalid(tc, tolerance):
    with pytest.raises(ValueError):
        tc.set_tolerance(tolerance)


def test_set_tolerance_valid(tc):
    tc.set_tolerance(2.5)
    assert tc.tolerance == 2.5


def test_temperature_limits(tc):
    with pytest.raises(ValueError):
        tc.set_temperature_limits(30.0, 20.0)
    with pytest.raises(ValueError):
        tc.set_temperature_limits(0.0, 60.0)
    tc.set_temperature_limits(5.0, 45.0)
    tc.set_target(42.0)
    assert tc.target == 42.0


def test_disable_clears_actions(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    tc.disable()
    assert not tc.is_heating_active()
    assert tc.enabled is False


def test_status_string(tc, clock):
    assert "(STABLE)" in tc.status_string()
    clock.now = 1000
    tc.update(15.0)
    status = tc.status_string()
    assert "(HEATING)" in status
    assert "[Target: 22.0°C]" in status
    tc.disable()
    assert "(OFF)" in tc.status_string()


@pytest.mark.parametrize("reading,expected", [(41.0, True), (4.0, True), (34.0, True), (22.0, False)])
def test_check_emergency(tc, clock, reading, expected):
    clock.now = 1000
    tc.update(reading)
    assert tc.check_emergency() is expected


def test_check_emergency_disabled(tc, clock):
    clock.now = 1000
    tc.update(45.0)
    tc.disable()
    assert tc.check_emergency() is False


def test_reset_statistics(tc, clock):
    clock.now = 1000
    tc.update(15.0)
    clock.now = 2000
    tc.update(22.0)
    tc.reset_statistics()
    assert tc.adjustment_count == 0
    assert tc.total_active_time() == 0