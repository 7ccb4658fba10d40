# greenhousectl

Building blocks for a small greenhouse controller: adjustable climate
targets mapped to dashboard virtual pins, a Blynk-style connection
manager, a multi-channel relay board, relay, LED-strip and servo
actuators, and control loops for temperature, humidity, light and
irrigation.

Nothing here touches hardware directly. Actuators keep their state in
memory and report pin changes through callables you pass in (`output`,
`pwm_write`, `write`, `attach`), and every time-dependent class takes a
`clock` callable returning milliseconds, so everything can be driven and
tested from plain Python. Events are reported through the standard
`logging` module; the `status_report()` and `status_string()` methods
return text rather than printing it.

## Modules

| Module | What it holds |
| --- | --- |
| `greenhousectl.targets` | `Targets`, the adjustable set points, and `sync_to_blynk` |
| `greenhousectl.blynk` | `BlynkBackend` and `BlynkManager` for the dashboard link |
| `greenhousectl.relay_controller` | `RelayController`, an eight-channel relay board with debounce |
| `greenhousectl.relay_device` | `RelayActuator` and `FanActuator` |
| `greenhousectl.led_strip` | `LEDStripActuator` with optional PWM brightness and fades |
| `greenhousectl.servo` | `ServoActuator` driving the vent flap |
| `greenhousectl.temperature_control` | `TemperatureControl` |
| `greenhousectl.humidity_control` | `HumidityControl` |
| `greenhousectl.light_control` | `LightSchedule` and `LightControl` |
| `greenhousectl.irrigation_control` | `IrrigationSchedule` and `IrrigationControl` |

## Targets

```python
from greenhousectl.targets import Targets

targets = Targets()
print(targets.temperature)   # 24.0
print(targets.soil_ph)       # 6.5

targets.set_from_pin(40, 26.5)   # value written to virtual pin V40
print(targets.temperature)       # 26.5
print(targets.pin_values())      # {40: 26.5, 41: 60.0, ...}

targets.load_defaults()          # back to the factory values
```

Defaults and their virtual pins: temperature 24 °C (V40), humidity 60 %
(V41), soil moisture 40 % (V42), minimum light 10 000 lux (V43),
ventilation temperature 28 °C (V44), soil pH 6.5 (V45), soil EC
1500 µS/cm (V46), critical water level 20 % (V47). `set_from_pin` raises
`ValueError` for any other pin.

## The dashboard link

`BlynkManager` drives any object with the `BlynkBackend` methods
`config(token, server, port)`, `connected()`, `run()` and
`virtual_write(pin, value)`.

```python
from greenhousectl.blynk import BlynkManager
from greenhousectl.targets import Targets, sync_to_blynk

class MemoryBackend:
    def __init__(self):
        self.pins = {}
    def config(self, token, server, port):
        pass
    def connected(self):
        return True
    def run(self):
        pass
    def virtual_write(self, pin, value):
        self.pins[pin] = value

backend = MemoryBackend()
blynk = BlynkManager(backend)
blynk.begin("token")              # server defaults to blynk.cloud, port 80
print(blynk.connect())            # True
sync_to_blynk(Targets(), blynk)
print(backend.pins[40])           # 24.0
```

`begin` raises `ValueError` without a token. `connect` waits up to 10 s
for the backend to report a connection; `attempt_reconnection` reconnects
at most once per `reconnect_interval` (30 s by default).
`send_virtual_pin` writes only while connected. Callbacks can be set with
`on_connect` and `on_disconnect`.

## Relays

```python
from greenhousectl.relay_controller import RelayController

now = [1000]
relays = RelayController(clock=lambda: now[0], output=lambda pin, level: None)
relays.begin(50)                          # 50 ms debounce
relays.configure_relay(0, 25, "Fan", False)
relays.configure_relay(1, 26, "Pump", True)   # inverted logic

relays.activate(0)
print(relays.state(0))    # True
print(relays.mask())      # 1
print(relays.status_report())
```

Channels outside 0–7 and GPIO numbers above 39 raise `ValueError`.
Switching an unconfigured channel, or switching a channel again within
the debounce time, returns `False`. `set_mask` sets every configured
channel from a bit mask; `deactivate_all` switches everything off
regardless of debounce.

## Actuators

`FanActuator` (and its base `RelayActuator`) refuse a change made less
than the minimum interval after the previous one (5 s for the fan) and
track how long they have been running continuously.

```python
from greenhousectl.relay_device import FanActuator

now = [10_000]
fan = FanActuator(25, clock=lambda: now[0])
fan.begin()
print(fan.turn_on())     # True
print(fan.turn_off())    # False: minimum interval not met
now[0] += 5000
print(fan.turn_off())    # True
```

Switching before `begin()` raises `RuntimeError`. The interval is counted
from clock time 0 for the first change.

`LEDStripActuator(pin, enable_pwm, pwm_channel)` works the same way
(1 s minimum interval, 12 h maximum run) and, with PWM, adds
`set_brightness` (0–255, `ValueError` outside that range),
`set_brightness_from_blynk` (0–100 %), and blocking `fade_in` / `fade_out`
ramps. It counts activations and accumulated run time.

`ServoActuator(pin)` positions the vent flap in degrees: `move_to` jumps
directly, `smooth_move_to` plus repeated `update()` calls step towards the
target, and `open_vent` / `close_vent` go to the configured open (90°) and
closed (0°) positions. Positions outside the limits raise `ValueError`;
moving before `begin()` raises `RuntimeError`.

## Control loops

Each control is started with `begin()` and fed readings with `update(...)`;
it decides what should happen but switches nothing itself.

```python
from greenhousectl.temperature_control import TemperatureControl

now = [0]
control = TemperatureControl(clock=lambda: now[0])
control.begin()
control.set_target(24.0)
now[0] = 1000
control.update(19.5)

print(control.is_heating_active())   # True
print(control.status_string())       # 19.5°C (HEATING) [Target: 24.0°C]
```

- `TemperatureControl` – heating or cooling outside a tolerance band,
  a clamped PID output, and emergency detection above 40 °C, below 5 °C
  or more than 10 °C from target.
- `HumidityControl.update(humidity, temperature)` – humidifying,
  dehumidifying and ventilating decisions, with the target scaled by
  temperature and actions spaced at least a minute apart.
- `LightControl.update(lux, hour, minute)` – supplemental LED output from a
  morning / day / evening / night `LightSchedule`; `led_intensity()` gives
  the LED level in percent.
- `IrrigationControl.update(moisture, temperature, humidity, light_level)` –
  starts and stops watering sessions, scales their duration by the
  environment, waits 30 minutes between sessions and waters immediately
  when moisture falls to 20 % or below.

Out-of-range targets and limits raise `ValueError` throughout.

## What the package does not do

It has no water-pump or heater actuator classes, no ventilation
controller and nothing that connects the control loops to the actuators:
reading sensors, calling `update` on each control and switching the
actuators from their decisions is left to your code. There is no
command-line program or main loop, targets are not stored anywhere
between runs, and no network client for the dashboard is included — you
supply the backend.

## Running the tests

Install the `test` extra and run `pytest` from the project root.