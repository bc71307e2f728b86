"""Board-level helpers for the radio dongle.

This module holds the serial output ring buffer, the status LEDs, the
blocking-delay chunking rule and the RTC tick conversions used for uptime.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import timedelta

logger = logging.getLogger(__name__)

#: Number of bytes the ring buffer holds.
RINGBUFFER_CAPACITY = 128

#: Frequency of the real-time counter, in ticks per second.
RTC_FREQUENCY_HZ = 32_768

#: Width of the real-time counter register; it overflows every ``1 << 24`` ticks.
RTC_COUNTER_BITS = 24

_U32_MAX = (1 << 32) - 1
_U64_MASK = (1 << 64) - 1
_MICROS_IN_ONE_SEC = 1_000_000
# Largest whole number of seconds whose microsecond count fits a single delay call.
_MAX_SECS = _U32_MAX // _MICROS_IN_ONE_SEC


class RingbufferFull(Exception):
    """Raised when a byte is written to a full ring buffer."""

    def __init__(self, value: int) -> None:
        super().__init__(f"ring buffer full, byte {value:#04x} rejected")
        self.value = value


class Ringbuffer:
    """A thread-safe byte queue holding at most 128 bytes."""

    def __init__(self) -> None:
        self._bytes: deque[int] = deque()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._bytes)

    def read(self) -> int | None:
        """Take the oldest byte, or ``None`` when the buffer is empty."""
        with self._lock:
            return self._bytes.popleft() if self._bytes else None

    def write(self, value: int) -> None:
        """Append one byte; raise :class:`RingbufferFull` if there is no room."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"not a byte: {value}")
        with self._lock:
            if len(self._bytes) >= RINGBUFFER_CAPACITY:
                raise RingbufferFull(value)
            self._bytes.append(value)

    def write_str(self, text: str) -> None:
        """Append the UTF-8 bytes of ``text``, silently dropping what does not fit."""
        for byte in text.encode("utf-8"):
            try:
                self.write(byte)
            except RingbufferFull:
                pass


class Led:
    """A status LED driven by an active-low push-pull output pin."""

    def __init__(self, port: int, pin: int) -> None:
        self.port = port
        self.pin = pin
        # LEDs light when the pin is driven low, so they start off (high).
        self._pin_high = True

    def __repr__(self) -> str:
        state = "on" if self.is_on() else "off"
        return f"Led(P{self.port}.{self.pin:02d}, {state})"

    def on(self) -> None:
        """Turn the LED on."""
        logger.debug("setting P%d.%d low (LED on)", self.port, self.pin)
        self._pin_high = False

    def off(self) -> None:
        """Turn the LED off."""
        logger.debug("setting P%d.%d high (LED off)", self.port, self.pin)
        self._pin_high = True

    def is_off(self) -> bool:
        """Return ``True`` if the LED is off."""
        return self._pin_high

    def is_on(self) -> bool:
        """Return ``True`` if the LED is on."""
        return not self.is_off()

    def toggle(self) -> None:
        """Flip the LED between on and off."""
        if self.is_off():
            self.on()
        else:
            self.off()


def delay_cycles(duration: timedelta) -> list[int]:
    """Split ``duration`` into the microsecond delays a 32-bit timer can run.

    The sub-second part comes first (if any), then whole seconds in chunks
    that each fit into an unsigned 32-bit cycle count.
    """
    if duration < timedelta(0):
        raise ValueError("duration must not be negative")

    cycles: list[int] = []
    if duration.microseconds:
        cycles.append(duration.microseconds)

    secs = duration.days * 86_400 + duration.seconds
    while secs:
        chunk = min(secs, _MAX_SECS)
        secs -= chunk
        cycles.append(chunk * _MICROS_IN_ONE_SEC)
    return cycles


def combine_ticks(overflows: int, counter: int) -> int:
    """Join the overflow count and the 24-bit counter into a 64-bit tick count."""
    if not 0 <= overflows <= _U32_MAX:
        raise ValueError(f"overflow count out of range: {overflows}")
    if not 0 <= counter < (1 << RTC_COUNTER_BITS):
        raise ValueError(f"counter value out of range: {counter}")
    return counter | (overflows << RTC_COUNTER_BITS)


def ticks_to_us(ticks: int) -> int:
    """Convert 32 768 Hz ticks to microseconds, with 64-bit wrapping arithmetic."""
    if ticks < 0:
        raise ValueError("ticks must not be negative")
    return ((ticks * _MICROS_IN_ONE_SEC) & _U64_MASK) >> 15


def ticks_to_timedelta(ticks: int) -> timedelta:
    """Convert 32 768 Hz ticks to a :class:`~datetime.timedelta`."""
    nanos_total = (ticks_to_us(ticks) * 1_000) & _U64_MASK
    secs, nanos = divmod(nanos_total, 1_000_000_000)
    return timedelta(seconds=secs, microseconds=nanos // 1_000)