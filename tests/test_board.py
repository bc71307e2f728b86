from datetime import timedelta

import pytest

from satlink.board import (
    RINGBUFFER_CAPACITY,
    RTC_COUNTER_BITS,
    RTC_FREQUENCY_HZ,
    Led,
    Ringbuffer,
    RingbufferFull,
    combine_ticks,
    delay_cycles,
    ticks_to_timedelta,
    ticks_to_us,
)


def test_ringbuffer_fifo_order():
    buf = Ringbuffer()
    for value in (1, 2, 3):
        buf.write(value)
    assert [buf.read(), buf.read(), buf.read()] == [1, 2, 3]
    assert buf.read() is None


def test_ringbuffer_empty_read_returns_none():
    assert Ringbuffer().read() is None


def test_ringbuffer_full_raises_with_value():
    buf = Ringbuffer()
    for _ in range(RINGBUFFER_CAPACITY):
        buf.write(0x41)
    with pytest.raises(RingbufferFull) as info:
        buf.write(0x42)
    assert info.value.value == 0x42
    assert len(buf) == RINGBUFFER_CAPACITY


def test_ringbuffer_rejects_non_byte():
    with pytest.raises(ValueError):
        Ringbuffer().write(256)


def test_ringbuffer_write_str_round_trip():
    buf = Ringbuffer()
    buf.write_str("hello")
    out = bytes(iter(buf.read, None))
    assert out == b"hello"


def test_ringbuffer_write_str_drops_overflow():
    buf = Ringbuffer()
    text = "x" * (RINGBUFFER_CAPACITY + 10)
    buf.write_str(text)
    assert len(buf) == RINGBUFFER_CAPACITY
    assert bytes(iter(buf.read, None)) == text.encode()[:RINGBUFFER_CAPACITY]


def test_led_starts_off():
    led = Led(0, 6)
    assert led.is_off()
    assert not led.is_on()


def test_led_on_off():
    led = Led(1, 9)
    led.on()
    assert led.is_on()
    led.off()
    assert led.is_off()


def test_led_toggle_twice_restores():
    led = Led(0, 12)
    led.toggle()
    assert led.is_on()
    led.toggle()
    assert led.is_off()


def test_delay_one_second():
    assert delay_cycles(timedelta(seconds=1)) == [1_000_000]


def test_delay_zero_is_empty():
    assert delay_cycles(timedelta(0)) == []


def test_delay_subsecond_first():
    cycles = delay_cycles(timedelta(seconds=2, microseconds=250))
    assert cycles[0] == 250
    assert sum(cycles) == 2_000_250


@pytest.mark.parametrize("seconds", [4294, 4295, 5000, 100_000])
def test_delay_long_chunks_fit_u32(seconds):
    cycles = delay_cycles(timedelta(seconds=seconds))
    assert sum(cycles) == seconds * 1_000_000
    assert all(0 < c <= 0xFFFFFFFF for c in cycles)
    assert all(c % 1_000_000 == 0 for c in cycles)


def test_delay_negative_rejected():
    with pytest.raises(ValueError):
        delay_cycles(timedelta(seconds=-1))


def test_combine_ticks_overflow_shift():
    assert combine_ticks(1, 0) == 1 << 24
    assert combine_ticks(0, 1234) == 1234


def test_combine_ticks_round_trip():
    value = combine_ticks(7, 99)
    assert value >> RTC_COUNTER_BITS == 7
    assert value & ((1 << RTC_COUNTER_BITS) - 1) == 99


def test_combine_ticks_counter_out_of_range():
    with pytest.raises(ValueError):
        combine_ticks(0, 1 << RTC_COUNTER_BITS)


def test_one_second_of_ticks():
    assert ticks_to_us(RTC_FREQUENCY_HZ) == 1_000_000
    assert ticks_to_timedelta(RTC_FREQUENCY_HZ) == timedelta(seconds=1)


def test_zero_ticks():
    assert ticks_to_us(0) == 0
    assert ticks_to_timedelta(0) == timedelta(0)


def test_ticks_monotonic():
    samples = [ticks_to_us(t) for t in range(0, 1000, 7)]
    assert samples == sorted(samples)


def test_timedelta_matches_us():
    ticks = 123_456
    assert ticks_to_timedelta(ticks) == timedelta(microseconds=ticks_to_us(ticks))


def test_negative_ticks_rejected():
    with pytest.raises(ValueError):
        ticks_to_us(-1)