import pytest

from greenhousectl.humidity_control import HumidityControl


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hc(clock):
    control = HumidityControl(min_action_interval=1000, clock=clock)
    control.begin()
    return control


def step(hc, clock, at, humidity, temp=0.0):
    clock.now = at
    hc.update(humidity, temp)


def test_defaults(clock):
    control = HumidityControl(clock=clock)
    assert control.target == 65.0
    assert control.current_humidity == 50.0
    assert control.enabled is False
    assert "(OFF)" in control.status_string()


def test_update_ignored_when_disabled(clock):
    control = HumidityControl(min_action_interval=1000, clock=clock)
    step(control, clock, 1000, 80.0)
    assert control.current_humidity == 50.0


def test_humidifies_by_day(hc, clock):
    step(hc, clock, 1000, 50.0)
    assert hc.is_humidifying_active()
    assert hc.adjustment_count == 1
    assert "(HUMIDIFYING)" in hc.status_string()


def test_no_humidifying_at_night_unless_critical(hc, clock):
    hc.is_daytime = False
    step(hc, clock, 1000, 55.0)
    assert not hc.is_humidifying_active()
    step(hc, clock, 2000, 15.0)
    assert hc.is_humidifying_active()


def test_moderate_high_humidity_ventilates_only(hc, clock):
    step(hc, clock, 1000, 75.0)
    assert hc.is_ventilation_active()
    assert not hc.is_dehumidifying_active()


def test_high_humidity_dehumidifies(hc, clock):
    step(hc, clock, 1000, 80.0)
    assert hc.is_ventilation_active()
    assert hc.is_dehumidifying_active()


def test_critical_high_humidity(hc, clock):
    step(hc, clock, 1000, 97.0)
    assert hc.is_dehumidifying_active()
    assert hc.is_ventilation_active()
    assert hc.is_critical_condition()
    assert "[CRITICAL]" in hc.status_string()


def test_actions_cleared_inside_action_interval(hc, clock):
    step(hc, clock, 1000, 50.0)
    assert hc.is_humidifying_active()
    step(hc, clock, 1500, 50.0)
    assert not hc.is_humidifying_active()


def test_warm_air_raises_effective_target(clock):
    cold = HumidityControl(min_action_interval=1000, clock=clock)
    cold.begin()
    warm = HumidityControl(min_action_interval=1000, clock=clock)
    warm.begin()
    clock.now = 1000
    cold.update(65.0, 0.0)
    warm.update(65.0, 35.0)
    assert not cold.is_humidifying_active()
    assert warm.is_humidifying_active()


def test_total_active_time(hc, clock):
    step(hc, clock, 1000, 50.0)
    step(hc, clock, 2000, 65.0)
    assert hc.total_active_time() == 2000 - 1000
    hc.reset_statistics()
    assert hc.total_active_time() == 0
    assert hc.adjustment_count == 0


def test_ventilation_level(hc, clock):
    assert hc.ventilation_level() == 0
    step(hc, clock, 1000, 80.0)
    level = hc.ventilation_level()
    assert 0 < level <= 100
    hc.disable()
    assert hc.ventilation_level() == 0


def test_control_output_proportional_only(hc):
    hc.set_control_constants(1.0, 0.0, 0.0)
    assert hc.control_output() == hc.error()


def test_check_emergency(hc, clock):
    step(hc, clock, 1000, 15.0)
    assert hc.check_emergency() is True
    step(hc, clock, 3000, 60.0)
    assert hc.check_emergency() is False
    step(hc, clock, 5000, 96.0)
    assert hc.check_emergency() is True
    hc.disable()
    assert hc.check_emergency() is False


def test_adapt_to_weather(hc):
    hc.adapt_to_weather(True, 50.0)
    assert hc.temperature_factor == 0.9
    hc.adapt_to_weather(False, 20.0)
    assert hc.temperature_factor == 1.1
    hc.adapt_to_weather(False, 50.0)
    assert hc.temperature_factor == 1.1


def test_calculate_ideal_humidity(hc):
    assert hc.calculate_ideal_humidity(15.0) == 80.0
    assert hc.calculate_ideal_humidity(100.0) == hc.min_humidity
    assert hc.calculate_ideal_humidity(-50.0) == hc.max_humidity


def test_set_target(hc):
    hc.set_target(70.0)
    assert hc.target == 70.0
    with pytest.raises(ValueError):
        hc.set_target(95.0)
    with pytest.raises(ValueError):
        hc.set_target(10.0)
    assert hc.target == 70.0


@pytest.mark.parametrize("tolerance", [0.0, 25.0])
def test_set_tolerance_invalid(hc, tolerance):
    with pytest.raises(ValueError):
        hc.set_tolerance(tolerance)


def test_humidity_limits(hc):
    with pytest.raises(ValueError):
        hc.set_humidity_limits(80.0, 40.0)
    with pytest.raises(ValueError):
        hc.set_humidity_limits(10.0, 110.0)
    hc.set_humidity_limits(10.0, 95.0)
    hc.set_target(92.0)
    assert hc.target == 92.0


def test_critical_limits(hc, clock):
    hc.set_critical_limits(40.0, 80.0)
    step(hc, clock, 1000, 82.0)
    assert hc.is_critical_condition()
    assert hc.check_emergency() is True


def test_disable_clears_actions(hc, clock):
    step(hc, clock, 1000, 80.0)
    hc.disable()
    assert not hc.is_ventilation_active()
    assert not hc.is_dehumidifying_active()
    assert "(OFF)" in hc.status_string()