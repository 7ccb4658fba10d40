import pytest

from greenhousectl.led_strip import LEDStripActuator


def make(pwm=True):
    """Build a started strip whose time only moves when set or slept."""
    time_ms = {"now": 0}
    digital = []
    duties = []
    strip = LEDStripActuator(
        32,
        pwm,
        0,
        clock=lambda: time_ms["now"],
        output=lambda pin, level: digital.append((pin, level)),
        pwm_write=lambda ch, duty: duties.append((ch, duty)),
        sleep=lambda s: time_ms.update(now=time_ms["now"] + int(round(s * 1000))),
    )
    strip.begin()
    return strip, time_ms, digital, duties


def test_defaults_from_source():
    strip = LEDStripActuator(32)
    assert strip.min_state_change_interval == 1000
    assert strip.max_continuous_run_time == 43200000
    assert strip.brightness == 255
    assert strip.supports_brightness() is False


@pytest.mark.parametrize(
    "pwm, expected_digital, expected_duties",
    [
        (True, [], [(0, 0), (0, 255)]),
        (False, [(32, False), (32, True)], []),
    ],
)
def test_turn_on_drives_matching_output(pwm, expected_digital, expected_duties):
    strip, time_ms, digital, duties = make(pwm)
    time_ms["now"] = 1000
    assert strip.turn_on() is True
    assert digital == expected_digital
    assert duties == expected_duties


def test_not_initialised_raises():
    strip = LEDStripActuator(32, clock=lambda: 5000)
    with pytest.raises(RuntimeError):
        strip.turn_on()


def test_interval_blocks_change():
    strip, time_ms, _, _ = make()
    time_ms["now"] = 500
    assert strip.turn_on() is False


def test_set_brightness_without_pwm():
    strip = make(pwm=False)[0]
    assert strip.set_brightness(100) is False
    assert strip.brightness == 255


def test_set_brightness_while_on_writes():
    strip, time_ms, _, duties = make()
    time_ms["now"] = 1000
    strip.turn_on()
    assert strip.set_brightness(100) is True
    assert duties[-1] == (0, 100)


def test_set_brightness_out_of_range():
    strip = make()[0]
    with pytest.raises(ValueError):
        strip.set_brightness(256)


@pytest.mark.parametrize("percent, duty", [(100, 255), (0, 0)])
def test_brightness_from_blynk_endpoints(percent, duty):
    strip = make()[0]
    strip.set_brightness_from_blynk(percent)
    assert strip.brightness == duty


def test_fade_in_ramps_up_to_brightness():
    strip, time_ms, _, duties = make()
    time_ms["now"] = 2000
    assert strip.fade_in(100) is True
    ramp = [duty for _, duty in duties[1:]]
    assert ramp[0] == 0
    assert ramp == sorted(ramp)
    assert ramp[-1] == strip.brightness
    assert strip.is_running() is True
    assert strip.activation_count == 1


def test_fade_out_ramps_down_and_records_time():
    strip, time_ms, _, duties = make()
    time_ms["now"] = 2000
    strip.fade_in(50)
    start_len = len(duties)
    assert strip.fade_out(50) is True
    ramp = [duty for _, duty in duties[start_len:]]
    assert ramp == sorted(ramp, reverse=True)
    assert ramp[-1] == 0
    assert strip.is_running() is False
    assert strip.total_run_time() == time_ms["now"] - 2000


def test_fade_out_requires_on():
    assert make()[0].fade_out(100) is False


def test_toggle_and_blynk_state():
    strip, time_ms, _, _ = make()
    time_ms["now"] = 1000
    strip.toggle()
    assert strip.blynk_state() == 1
    time_ms["now"] = 2000
    strip.set_from_blynk(0)
    assert strip.blynk_state() == 0
    assert strip.total_run_time() == 1000


def test_status_report_shows_pwm():
    report = make()[0].status_report()
    assert "PWM channel: 0" in report
    assert "Brightness: 255" in report