import pytest

from s7device.ticks import delta_time, get_tick, sys_sleep


def test_tick_within_32_bits():
    tick = get_tick()
    assert 0 <= tick <= 0xFFFFFFFF


def test_tick_does_not_go_backwards():
    first = get_tick()
    second = get_tick()
    assert second >= first


def test_delta_time_of_now_is_small():
    delta = delta_time(get_tick())
    assert 0 <= delta < 1000


def test_sleep_advances_ticks():
    start = get_tick()
    sys_sleep(20)
    assert delta_time(start) >= 19


def test_sleep_zero_returns_quickly():
    start = get_tick()
    sys_sleep(0)
    assert delta_time(start) < 1000


def test_delta_time_after_rollover_measures_from_zero():
    delta = delta_time(0xFFFFFFFF)
    assert abs(delta - get_tick()) < 1000


def test_negative_sleep_raises():
    with pytest.raises(ValueError):
        sys_sleep(-1)