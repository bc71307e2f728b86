"""USB identifiers of the radio dongle and related development hardware."""

from __future__ import annotations

#: Vendor id picked for the demo code on the dongle.
USB_VID_DEMO = 0x1209

#: Product id of the development kit in USB mode when running the RTIC demo.
USB_PID_RTIC_DEMO = 0x0717

#: Product id of the dongle running the loopback firmware.
USB_PID_DONGLE_LOOPBACK = 0x0309

#: Product id of the dongle running the puzzle firmware.
USB_PID_DONGLE_PUZZLE = 0x0310

#: HID command byte asking the dongle to send a radio packet.
CMD_SEND_RADIO = 0x53

_SEGGER_VID = 0x1366
_NORDIC_VID = 0x1915
_NORDIC_BOOTLOADER_PID = 0x521F

_KNOWN_DEVICES = {
    (_NORDIC_VID, _NORDIC_BOOTLOADER_PID): "nRF52840 Dongle (in bootloader mode)",
    (USB_VID_DEMO, USB_PID_DONGLE_LOOPBACK): "nRF52840 Dongle (loopback-fw)",
    (USB_VID_DEMO, USB_PID_DONGLE_PUZZLE): "nRF52840 Dongle (puzzle-fw)",
    (USB_VID_DEMO, USB_PID_RTIC_DEMO): "nRF52840 on the nRF52840 Development Kit",
}


def is_dongle_pid(pid: int) -> bool:
    """Return ``True`` if ``pid`` belongs to the dongle in loopback or puzzle mode."""
    return pid in (USB_PID_DONGLE_LOOPBACK, USB_PID_DONGLE_PUZZLE)


def describe_usb_device(vendor_id: int, product_id: int) -> str | None:
    """Name the known board behind a vendor/product id pair, or ``None``."""
    if vendor_id == _SEGGER_VID and (product_id >> 8) in (0x10, 0x01):
        return "J-Link on the nRF52840 Development Kit"
    return _KNOWN_DEVICES.get((vendor_id, product_id))