# satlink

Tools for a small CubeSat project:

- **Power-system simulation** (`satlink.power_components`, `satlink.eps`).
  It models solar panels, a battery, and a power distribution unit with
  critical and non-critical loads. An electrical power system balances them
  step by step. It charges on surplus and discharges on deficit. When the
  battery runs dry it sheds loads and enters safe mode.
- **Radio dongle model** (`satlink.dongle`, `satlink.board`). This is the logic
  of a USB loopback dongle that listens on an IEEE 802.15.4 channel. It covers
  channel selection (11 to 26), packet and CRC-error counters, and the `?` info
  request. Board helpers model the serial ring buffer, the status LEDs, the
  chunking of timer delays, and the conversion of RTC ticks.
- **Ground station** (`satlink.ground`, `satlink.usbids`). This is a serial
  terminal for the dongle. It also builds HID reports for channel changes and
  radio commands, and knows the USB ids of the boards involved.
- **Orbit frames** (`satlink.orbit`). Renders a circular-orbit animation as
  PNG frames with matplotlib.
- **Launcher** (`satlink.launcher`). Runs a tmux launch script and attaches to
  the session it starts. It can also run one of three counting demo apps.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

## Commands

### `satlink-ground serial`

This command waits until a serial port with the dongle's USB vendor id
(`0x1209`) appears. It then opens the port at 115200 baud and copies
everything it receives to standard output until you press Ctrl-C.

### `satlink-ground usb`

This command loops without end, sending the payload `b"Hello"` with the
`CMD_SEND_RADIO` command byte as a 64-byte HID report. It pauses about five
seconds after each report.

The dongle's raw HID device is found through `/sys/class/hidraw`, so this
works on Linux only. If no device is found, a warning is logged and the loop
carries on.

### `satlink-orbit`

This command renders one frame every 0.1 s over 20 s of a satellite on a
circular orbit (radius 1.5, period 10 s) around a central body. The frames are
written as `orbit_frames/frame_0000.png`, `orbit_frames/frame_0001.png`, and so
on, in the working directory. You can join them into a video with any encoder,
for example ffmpeg at 10 frames per second.

### `satlink-launch`

With no argument, this command looks for `launch_tmux.sh` in the directory two
levels above the one holding the running executable. It runs the script with
`bash`. On POSIX systems it then replaces itself with
`tmux attach-session -t <session>`, where the session name is
`satlink.launcher.TMUX_SESSION_NAME`. It exits with status 1 if the script is
missing or fails.

```
satlink-launch app1    # counts to 20, once per second
satlink-launch app2    # counts to 15
satlink-launch app3    # counts to 10
```

## Library use

```python
from satlink.orbit import satellite_position, frame_times
from satlink.ground import parse_channel, channel_report, command_report, GroundStationError
from satlink.dongle import channel_from_num, LoopbackDongle

x, y = satellite_position(0.0)   # (1.5, 0.0)

parse_channel("20")              # 20
try:
    parse_channel("30")
except GroundStationError as exc:
    print(exc)                   # channel is out of range (`11..=26`)

channel_report(20)               # b"\x00\x14": report id 0, then the channel
len(command_report(0x53, b"Hello"))  # 64: command byte, payload, zero padding

channel_from_num(5)              # None: only channels 11..26 exist
```

To write a report to a raw HID device node, use `send_report(path, report)`.
`find_dongle_port(ports)` picks the dongle from a list of serial port
descriptions, such as those from `serial.tools.list_ports.comports()`.

### Dongle model

```python
dongle = LoopbackDongle()        # channel 20; output collected in dongle.serial_output
dongle.on_serial_input(b"?")     # queue an info request
dongle.on_hid_output(b"\x0f")    # queue a change to channel 15
dongle.process_messages()        # writes "\nrx=0, err=0, ch=20, app=loopback-fw\n", then switches
dongle.on_packet(b"\x01\x02")    # writes "Packet Content: [1, 2]\n", returns b"ping!"
dongle.on_crc_error()            # writes "!" and counts an error
dongle.on_timeout()              # writes "."
```

The message queue holds at most seven messages, and further ones are dropped.
A channel change outside 11..26 is ignored.

### Power system

The parts are `SolarPanel`, `Battery`, `Load` and `PowerDistributionUnit`.
`ElectricalPowerSystem(solar_panels, battery, pdu)` ties them together:

- `manage_power(time_step_h)` advances the simulation one step.
- `set_satellite_mode(mode)` takes an `OperationalMode` and reconfigures the
  loads by their ids: `COM_RX`, `COM_TX`, `Heaters`, `PayloadCam`,
  `PayloadTx`.

Battery health is in percent (100.0 when new). Below 20 % the battery enters
`BatteryState.FAULT`. Switching a load that does not exist raises
`LoadNotFoundError`. Each step reports its progress through the `logging`
module at INFO and WARNING level.

## What it does not do

- It does not drive any radio or microcontroller. `LoopbackDongle`, `Led` and
  `Ringbuffer` model the dongle's behaviour in memory. Events are fed in by
  calling their methods.
- There is no command to change the dongle's channel. `channel_report` builds
  the report, and `send_report` writes it to a device node you name.
- There is no command that lists USB devices or dumps their descriptors.
  `describe_usb_device(vendor_id, product_id)` only names the known boards.