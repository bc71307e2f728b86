"""Ground-station tools for talking to the radio dongle over USB.

The dongle shows up as a USB serial port, which prints what it receives,
and as a raw HID device, which accepts channel changes and commands.
"""

from __future__ import annotations

import logging
import re
import sys
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import BinaryIO, Optional, TypeVar

import serial
from serial.tools import list_ports

from satlink.dongle import MAX_CHANNEL, MIN_CHANNEL
from satlink.usbids import (
    CMD_SEND_RADIO,
    USB_PID_DONGLE_LOOPBACK,
    USB_VID_DEMO,
)

logger = logging.getLogger(__name__)

#: Baud rate of the dongle's serial port.
BAUD_RATE = 115_200

#: Size of the raw HID output report.
HID_REPORT_SIZE = 64

#: Report id prepended to channel-change reports.
REPORT_ID = 0

_READ_CHUNK = 8
_READ_TIMEOUT_S = 0.010
_PORT_POLL_S = 0.1
_AFTER_COMMAND_S = 5.0
_BETWEEN_COMMANDS_S = 0.050
_SYSFS_HIDRAW = Path("/sys/class/hidraw")
_DEV_ROOT = Path("/dev")
_U8_PATTERN = re.compile(r"\+?[0-9]+")

_Port = TypeVar("_Port")


class GroundStationError(Exception):
    """Raised when a ground-station operation cannot be carried out."""


def parse_channel(channel: str) -> int:
    """Parse a radio channel number and check it lies in ``11..=26``."""
    if not _U8_PATTERN.fullmatch(channel):
        raise GroundStationError(f"invalid channel number: {channel!r}")
    value = int(channel)
    if value > 0xFF:
        raise GroundStationError(f"invalid channel number: {channel!r}")
    if not MIN_CHANNEL <= value <= MAX_CHANNEL:
        raise GroundStationError(
            f"channel is out of range (`{MIN_CHANNEL}..={MAX_CHANNEL}`)"
        )
    return value


def channel_report(channel: int) -> bytes:
    """Build the HID report that asks the dongle to switch to ``channel``."""
    if not MIN_CHANNEL <= channel <= MAX_CHANNEL:
        raise GroundStationError(
            f"channel is out of range (`{MIN_CHANNEL}..={MAX_CHANNEL}`)"
        )
    return bytes([REPORT_ID, channel])


def command_report(command_byte: int, payload: bytes) -> bytes:
    """Build a 64-byte HID report: the command byte, the payload, zero padding."""
    if not 0 <= command_byte <= 0xFF:
        raise GroundStationError(f"command byte out of range: {command_byte}")
    if len(payload) > HID_REPORT_SIZE - 1:
        raise GroundStationError(
            f"Payload too large ({len(payload)} bytes), max is {HID_REPORT_SIZE - 1}"
        )
    return bytes([command_byte]) + bytes(payload).ljust(HID_REPORT_SIZE - 1, b"\0")


def send_report(path: str | Path, report: bytes) -> int:
    """Write ``report`` to the raw HID device at ``path``; return the bytes written."""
    try:
        with open(path, "wb", buffering=0) as device:
            written = device.write(report)
    except OSError as exc:
        raise GroundStationError(f"failed to write HID report to {path}: {exc}") from exc
    if written != len(report):
        raise GroundStationError(
            f"Incomplete HID write: wrote {written} bytes, expected {len(report)}"
        )
    return written


def find_dongle_port(ports: Iterable[_Port]) -> Optional[_Port]:
    """Return the first serial port whose USB vendor id is the dongle's."""
    return next(
        (port for port in ports if getattr(port, "vid", None) == USB_VID_DEMO),
        None,
    )


def serial_term(
    port_name: str,
    output: BinaryIO | None = None,
    should_continue: Callable[[], bool] | None = None,
) -> None:
    """Copy everything the serial port sends to ``output`` until told to stop.

    The loop ends when ``should_continue`` returns false, on Ctrl-C, or on a
    serial error; the port is always closed.
    """
    if output is None:
        output = sys.stdout.buffer
    if should_continue is None:
        should_continue = lambda: True  # noqa: E731

    with serial.serial_for_url(
        port_name, baudrate=BAUD_RATE, timeout=_READ_TIMEOUT_S
    ) as port:
        try:
            while should_continue():
                try:
                    chunk = port.read(_READ_CHUNK)
                except serial.SerialException as exc:
                    print(f"Error: {exc}")
                    break
                if chunk:
                    output.write(chunk)
                    output.flush()
        except KeyboardInterrupt:
            pass
    print("(closing the serial port)", file=sys.stderr)


def _wait_for_dongle_port() -> str:
    announced = False
    while True:
        port = find_dongle_port(list_ports.comports())
        if port is not None:
            return port.device
        if not announced:
            announced = True
            print("(waiting for the Dongle to be connected)", file=sys.stderr)
        time.sleep(_PORT_POLL_S)


def _find_hidraw_device(vendor_id: int, product_id: int) -> Path | None:
    if not _SYSFS_HIDRAW.is_dir():
        return None
    for entry in sorted(_SYSFS_HIDRAW.iterdir()):
        try:
            uevent = (entry / "device" / "uevent").read_text()
        except OSError:
            continue
        for line in uevent.splitlines():
            key, _, value = line.partition("=")
            if key != "HID_ID":
                continue
            fields = value.split(":")
            if len(fields) != 3:
                continue
            try:
                vid, pid = int(fields[1], 16), int(fields[2], 16)
            except ValueError:
                continue
            if (vid, pid) == (vendor_id, product_id):
                return _DEV_ROOT / entry.name
    return None


def _send_hid_command(command_byte: int, payload: bytes) -> None:
    device = _find_hidraw_device(USB_VID_DEMO, USB_PID_DONGLE_LOOPBACK)
    if device is None:
        raise GroundStationError(
            f"HID device VID={USB_VID_DEMO:#06x} "
            f"PID={USB_PID_DONGLE_LOOPBACK:#06x} not found"
        )
    send_report(device, command_report(command_byte, payload))
    time.sleep(_AFTER_COMMAND_S)


def _send_command_test_loop() -> None:
    payload = b"Hello"
    while True:
        time.sleep(_BETWEEN_COMMANDS_S)
        print(f"Sending payload: {payload.decode()!r}")
        try:
            _send_hid_command(CMD_SEND_RADIO, payload)
        except GroundStationError as exc:
            logger.warning("%s", exc)


def main(argv: list[str] | None = None) -> int:
    """Run the ``serial`` terminal or the ``usb`` command loop."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: groundstation <serial|usb>", file=sys.stderr)
        return 1

    command = args[0]
    try:
        if command == "serial":
            print("Running serial terminal...")
            serial_term(_wait_for_dongle_port())
        elif command == "usb":
            print("Running USB list...")
            _send_command_test_loop()
        else:
            print(f"Unknown command: {command}", file=sys.stderr)
            print("Available commands: serial, usb", file=sys.stderr)
            return 1
    except KeyboardInterrupt:
        return 0
    except (GroundStationError, serial.SerialException) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0