from types import SimpleNamespace

import pytest

from greenhousectl.relay_device import FanActuator


@pytest.fixture
def env():
    now = [10000]
    writes = []
    device = FanActuator(
        25, clock=lambda: now[0], output=lambda pin, level: writes.append((pin, level))
    )
    device.begin()
    return SimpleNamespace(device=device, now=now, writes=writes)


def advance(env, ms):
    env.now[0] += ms


def test_uninitialised_turn_on_raises():
    device = FanActuator(25, clock=lambda: 10000)
    assert device.is_ready() is False
    with pytest.raises(RuntimeError):
        device.turn_on()


def test_begin_drives_pin_low(env):
    assert env.writes == [(25, False)]
    assert env.device.is_ready()


def test_defaults(env):
    assert env.device.min_state_change_interval == 5000
    assert env.device.max_continuous_run_time == 3600000


@pytest.mark.parametrize("switch", ["turn", "toggle", "blynk"])
def test_switch_on_then_off(env, switch):
    device = env.device
    on, off = {
        "turn": (device.turn_on, device.turn_off),
        "toggle": (device.toggle, device.toggle),
        "blynk": (lambda: device.set_from_blynk(1), lambda: device.set_from_blynk(0)),
    }[switch]
    assert on() is True
    assert device.is_running()
    assert env.writes[-1] == (25, True)
    assert device.blynk_state() == 1
    advance(env, 5000)
    assert off() is True
    assert not device.is_running()
    assert env.writes[-1] == (25, False)
    assert device.blynk_state() == 0


def test_minimum_interval_blocks_change(env):
    env.device.turn_on()
    advance(env, 4999)
    assert env.device.turn_off() is False
    assert env.device.is_running()


def test_no_change_right_after_start_of_time():
    device = FanActuator(25, clock=lambda: 1000)
    device.begin()
    assert device.turn_on() is False
    assert not device.is_running()


def test_turn_on_when_already_on_keeps_timestamp(env):
    env.device.turn_on()
    stamp = env.device.last_state_change
    advance(env, 6000)
    assert env.device.turn_on() is True
    assert env.device.last_state_change == stamp


def test_continuous_run_time_and_limit(env):
    device = env.device
    device.max_continuous_run_time = 1000
    assert device.continuous_run_time() == 0
    device.turn_on()
    advance(env, 1000)
    assert device.continuous_run_time() == 1000
    assert not device.has_exceeded_max_run_time()
    advance(env, 1)
    assert device.has_exceeded_max_run_time()


def test_zero_limit_never_exceeded(env):
    env.device.max_continuous_run_time = 0
    env.device.turn_on()
    advance(env, 10**9)
    assert env.device.has_exceeded_max_run_time() is False


def test_run_time_resets_after_off(env):
    env.device.turn_on()
    advance(env, 7000)
    env.device.turn_off()
    assert env.device.continuous_run_time() == 0
    assert env.device.time_since_last_change() == 0


def test_status_report(env):
    env.device.turn_on()
    report = env.device.status_report()
    assert "State: ON" in report
    assert "Relay pin: 25" in report
    assert "Continuous run time: 0 ms" in report