"""Tests for youtube_push.buffer"""
import pytest

from youtube_push.buffer import DedupBuffer


def test_zero_capacity_raises():
    with pytest.raises(ValueError, match="positive"):
        DedupBuffer(0)


def test_insert_below_capacity_evicts_nothing():
    buf = DedupBuffer(3)
    assert buf.insert("a") is None
    assert buf.insert("b") is None
    assert len(buf) == 2
    assert buf.contains("a")
    assert "b" in buf


def test_insert_over_capacity_evicts_oldest():
    buf = DedupBuffer(10)
    ids = [f"id{i}" for i in range(11)]
    evicted = [buf.insert(x) for x in ids]

    assert evicted[:10] == [None] * 10
    assert evicted[10] == "id0"
    assert not buf.contains("id0")
    assert all(buf.contains(x) for x in ids[1:])
    assert list(buf) == ids[1:]


def test_copy_is_independent():
    buf = DedupBuffer(2)
    buf.insert("a")
    clone = buf.copy()
    clone.insert("b")
    clone.insert("c")

    assert list(buf) == ["a"]
    assert list(clone) == ["b", "c"]
    assert clone.capacity == 2
