"""Behaviour of the loopback radio dongle.

The dongle listens on an IEEE 802.15.4 channel, reports every received
packet over its USB serial port, answers ``?`` with its counters, and
changes channel when the host sends a one-byte (or 64-byte) HID report.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Union

from satlink.board import Led

logger = logging.getLogger(__name__)

#: Slots in the message queue; one slot always stays free, as in a classic SPSC ring.
QUEUE_LEN = 8

#: Channel the dongle listens on after start-up.
DEFAULT_CHANNEL = 20

#: Lowest and highest IEEE 802.15.4 channel in the 2.4 GHz band.
MIN_CHANNEL = 11
MAX_CHANNEL = 26

#: Packet transmitted after every receive attempt.
PING_PACKET = b"ping!"

#: Sizes of the HID output report: Linux sends 1 byte, Windows pads to 64.
_HID_REPORT_SIZES = (1, 64)


@dataclass(frozen=True)
class WantInfo:
    """The host asked for the receive counters and channel."""


@dataclass(frozen=True)
class ChangeChannel:
    """The host asked to switch to another radio channel."""

    channel: int


Message = Union[WantInfo, ChangeChannel]


def channel_from_num(n: int) -> int | None:
    """Return ``n`` if it is a valid 2.4 GHz 802.15.4 channel, else ``None``."""
    return n if MIN_CHANNEL <= n <= MAX_CHANNEL else None


class LoopbackDongle:
    """The dongle's firmware logic, driven by USB and radio events."""

    def __init__(
        self,
        write: Callable[[bytes], None] | None = None,
        channel: int = DEFAULT_CHANNEL,
    ) -> None:
        if channel_from_num(channel) is None:
            raise ValueError(f"invalid channel: {channel}")
        self.serial_output = bytearray()
        self._write = write if write is not None else self.serial_output.extend
        self.current_channel = channel
        self.rx_count = 0
        self.err_count = 0
        self._queue: deque[Message] = deque()
        self.ld1 = Led(0, 6)
        self.ld2_red = Led(0, 8)
        self.ld2_green = Led(1, 9)
        self.ld2_blue = Led(0, 12)
        self.ld1.on()
        self.ld2_blue.on()

    @property
    def pending(self) -> int:
        """Number of messages waiting to be processed."""
        return len(self._queue)

    def _emit(self, text: str) -> None:
        self._write(text.encode("utf-8"))

    def _enqueue(self, message: Message) -> bool:
        if len(self._queue) >= QUEUE_LEN - 1:
            logger.debug("message queue full, dropping %r", message)
            return False
        self._queue.append(message)
        return True

    def on_serial_input(self, data: bytes) -> None:
        """Handle bytes typed on the serial terminal; each ``?`` requests info."""
        for byte in data:
            if byte == ord("?"):
                self._enqueue(WantInfo())

    def on_hid_output(self, data: bytes) -> None:
        """Handle an HID output report; its first byte is the requested channel."""
        if len(data) in _HID_REPORT_SIZES:
            self._enqueue(ChangeChannel(data[0]))

    def process_messages(self) -> list[Message]:
        """Act on every queued message, in order, and return them."""
        handled: list[Message] = []
        while self._queue:
            message = self._queue.popleft()
            handled.append(message)
            if isinstance(message, WantInfo):
                logger.info(
                    "rx=%d, err=%d, ch=%d, app=loopback-fw",
                    self.rx_count,
                    self.err_count,
                    self.current_channel,
                )
                self._emit(
                    f"\nrx={self.rx_count}, err={self.err_count}, "
                    f"ch={self.current_channel}, app=loopback-fw\n"
                )
            else:
                logger.info("Changing Channel to %d", message.channel)
                new_channel = channel_from_num(message.channel)
                if new_channel is not None:
                    self.current_channel = new_channel
                    logger.info("Channel changed to %d", new_channel)
        return handled

    def on_packet(self, packet: bytes) -> bytes:
        """Report a packet received intact; return the packet to transmit next."""
        self.ld1.toggle()
        logger.info("Received %d bytes", len(packet))
        content = ", ".join(str(byte) for byte in packet)
        self._emit(f"Packet Content: [{content}]\n")
        self.rx_count += 1
        return PING_PACKET

    def on_crc_error(self) -> bytes:
        """Count a packet received with a bad CRC; return the packet to transmit next."""
        logger.debug("RX fail!")
        self._emit("!")
        self.err_count += 1
        return PING_PACKET

    def on_timeout(self) -> bytes:
        """Note a receive timeout; return the packet to transmit next."""
        logger.debug("RX timeout...")
        self._emit(".")
        return PING_PACKET