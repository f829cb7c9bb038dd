# ecplatform

Building blocks for embedded controller firmware services, simulated in plain
Python with `asyncio`. The package has no dependencies beyond the standard
library.

## Modules

- **`ecplatform.crc`**: CRC algorithms described by `Algorithm` (width,
  polynomial, init, input/output reflection, output xor, check and residue
  values), computed bit by bit with `crc_calculate`. `EmbeddedCrc(algorithm,
  word_bits=32, engine=Engine.SOFTWARE)` can be fed data in several pieces:
  each call to `calculate(data)` returns the CRC of everything fed so far, and
  `read_crc()` returns the last result, or the algorithm's initial value if
  nothing was fed yet. The word size is 16 or 32 bits, and the algorithm's
  width must fit in it. With `Engine.ACCELERATOR` the calculation goes through
  a simulated CRC accelerator. The accelerator only knows the CRC-CCITT
  (0x1021), CRC-16 (0x8005) and CRC-32 (0x04C11DB7) polynomials, with an
  output xor of all zeros or all ones. Anything else raises `CrcError`, whose
  `kind` is a `CrcErrorKind`: `WIDTH`, `POLYNOMIAL`, `XOR_OUT` or `MUTEX_GET`.
  `accelerator_polynomial` performs that mapping on its own. A failed
  calculation leaves the stored CRC unchanged. `check_algorithm` computes the
  CRC of `b"123456789"` in one pass and in two halves, and returns an
  `AlgorithmCheck`; its `passed` property tells whether both match the check
  value. The module also defines a catalogue of common algorithms, for example
  `CRC_32_ISO_HDLC`, `CRC_16_XMODEM` and `CRC_16_IBM_SDLC`.
- **`ecplatform.nvram`**: named sections of 32-bit non-volatile words.
  - A `Table` lists section offsets, and `Table.get_index(offset)` gives a
    section's index or `None`.
  - `Nvram(backend)` is the service. `await Nvram.init(table)` raises
    `InvalidOffsetError` for an offset outside the backend's `valid_range()`.
    Only the first table installed is kept.
  - `await Nvram.lookup_section(index)` waits until the service is
    initialized. It then returns a `ManagedSection`, or `None` for an index out
    of range.
  - `ManagedSection.read()` and `write(value)` are serialised per section by a
    lock. `write` rejects values that do not fit in 32 bits.
  - Backends are `NullBackend` (no valid addresses, reads give 0) and
    `MemoryBackend(valid_range=range(3, 8))`. Subclass `NvramBackend` for
    other storage.
- **`ecplatform.debounce`**: `Debouncer(threshold=3, sample_interval=0.010,
  active_state=ActiveState.ACTIVE_LOW)`. It works as an integrator:
  `await debounce(pin)` samples the pin's `is_low()` / `is_high()` until the
  debounced state changes. It returns `True` on a press and `False` on a
  release. A pin that raises when read counts as not pressed.
- **`ecplatform.button`**: `Button(gpio, config)` with
  `ButtonConfig(debouncer, short_press_threshold=2.0, timeout=5.0)`; times are
  in seconds. `get_button_state()` returns a `ButtonState` with `pressed` and a
  monotonic `instant`. `get_press_duration()` returns how long a press lasted,
  stopping at the timeout. It returns `None` when the state change it saw was
  a release.
- **`ecplatform.button_interpreter`**: `classify_press(duration, config)`
  compares whole milliseconds and returns a `Message`. A press that reaches the
  timeout is `PRESS_AND_HOLD`, one that reaches the short-press threshold is
  `LONG_PRESS`, and anything shorter is `SHORT_PRESS`. `await
  check_button_press(button)` measures one press and classifies it.
- **`ecplatform.power_button`**: `button_task` forwards classified presses to
  an `asyncio.Queue`, and `led_task` applies them to a `LedPanel`. A short
  press toggles the green `Led`, a long press the blue one, and press-and-hold
  the red one.
- **`ecplatform.interrupt`**:
  - `Signal` is a single-slot async notification. `signal(value)` replaces any
    value not yet taken, `await wait()` takes the value, and `signaled()`
    tells whether one is waiting.
  - `InterruptSignal(int_in, int_out)` mirrors a device interrupt onto the
    host line. `await process()` waits for `int_in.wait_for_low()` and then
    calls `int_out.set_low()`. After `deassert()` it calls `set_high()`. It
    returns to idle after `release()`, or straight away after `reset()`.
- **`ecplatform.i2c`**: the host side of an I2C HID passthrough.
  - `I2cSlave` is the abstract bus: `listen`, `respond_to_write` and
    `respond_to_read`.
  - `wait_access(bus)` skips probes and returns an `Access`. It wraps bus
    failures in `BusError`, a `HidServiceError`.
  - `PassthroughHost` is abstract; subclasses supply `process_request` and
    `send_response`.
  - `serve_host_once(host, int_signal)` serves one request. It deasserts the
    interrupt before processing and releases it afterwards, or resets it on
    error, and returns the error if there was one.
  - `run_interrupt_task(int_signal, iterations=None)` loops over
    `InterruptSignal.process`.
- **`ecplatform.image`**:
  - `parse_version("major.minor.patch")` and `boot_image_version(major,
    minor, patch)` pack a version into a boot image version word. For example,
    0.1.0 gives `0x00010000`.
  - `rt633_sections(version)` and `rt685_sections()` return `ImageSections`:
    the version word, flash configuration block settings, and zero-filled
    OTFAD (256 bytes) and keystore (2048 bytes) areas.
  - `stage_linker_script(out_dir, script)` copies a script to
    `out_dir/memory.x` and returns the link-search and rerun-if-changed
    directive lines for the build.
- **`ecplatform.transport`**: two `Context` endpoints exchange `Signals`.
  `run_ping_pong(rounds, delay)` runs the command → notification → request →
  response cycle.
- **`ecplatform.espi_mock`**: an `EspiService` and a `BatteryService`. They
  exchange `UpdateBatteryStatus` and `SetBatteryCharge` messages, and
  `run_mock_espi(ticks, interval)` runs them together.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from ecplatform.crc import CRC_16_XMODEM, EmbeddedCrc, Engine

crc = EmbeddedCrc(CRC_16_XMODEM, 16, Engine.SOFTWARE)
crc.calculate(b"1234")
assert crc.calculate(b"56789") == 0x31C3
```

## Commands

| Command | What it does | Options |
| --- | --- | --- |
| `ecplatform-crc` | Checks the catalogue of CRC algorithms against their check values, in one pass and split in two | `--engine software\|accelerator` |
| `ecplatform-nvram` | Sets up a two-section table, writes and reads sections, and looks up an invalid index | `--backend memory\|null` |
| `ecplatform-power-button` | Simulates presses of the given lengths (ms, default 200 1300 2500) and shows the LEDs | positional press lengths |
| `ecplatform-transport` | Runs the command / notification / request / response exchange | `--rounds`, `--delay` |
| `ecplatform-espi-mock` | Runs the mock eSPI and battery services against each other | `--ticks`, `--interval` |

Each command accepts `--help`.

## What the package does not do

- It talks to no real hardware. The CRC accelerator, NVRAM registers, button
  pins and interrupt lines are all simulated or supplied by you.
- `ecplatform.i2c` covers only bus access, errors and the interrupt-managing
  host loop. It does not decode HID descriptors, reports or commands, and has
  no device-side bridge. A `PassthroughHost` subclass must provide that.
- `ecplatform.image` describes image sections. It does not build or link
  firmware images.