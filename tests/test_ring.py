from __future__ import annotations
import pytest

from qrscan.core.ring import RingBuffer


def test_fills_then_wraps_oldest_first():
    buf = RingBuffer(3, 0)
    buf.push(1)
    buf.push(2)
    assert not buf.is_full()
    assert list(buf) == [1, 2]
    assert buf.peek_oldest() == 1
    buf.push(3)
    assert buf.is_full()
    buf.push(4)
    assert list(buf) == [2, 3, 4]
    assert buf.peek_oldest() == 2
    assert len(buf) == 3


def test_clear_reuses_storage():
    buf = RingBuffer(2, 0.0)
    for v in (1.0, 2.0, 3.0):
        buf.push(v)
    buf.clear()
    assert len(buf) == 0
    assert not buf.is_full()
    assert list(buf) == []
    buf.push(9.0)
    assert list(buf) == [9.0]


def test_peek_empty_raises():
    with pytest.raises(IndexError):
        RingBuffer(4).peek_oldest()


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        RingBuffer(0)
