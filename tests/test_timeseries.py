import math

from statline.timeseries import Sample, TimeSeries


def test_append_keeps_time_order():
    s = TimeSeries("cpu")
    for ts, value in [(0, 1), (300, 2), (300, 3), (700, 4)]:
        assert s.append(ts, value)
    assert s.timestamps() == [0, 300, 300, 700]
    assert s.last == Sample(700, 4.0)


def test_append_rejects_out_of_order_timestamp():
    s = TimeSeries()
    s.append(500, 1)
    assert not s.append(400, 2)
    assert s.timestamps() == [500]


def test_append_rejects_non_finite_values():
    s = TimeSeries()
    for bad in (math.nan, math.inf, -math.inf, None, "12", True):
        assert not s.append(1, bad)
    assert len(s) == 0


def test_evict_drops_exact_prefix():
    s = TimeSeries()
    for ts in (0, 300, 700, 1200):
        s.append(ts, ts / 100)
    assert s.evict_older_than(700) == 2
    assert s.timestamps() == [700, 1200]
    assert [p.value for p in s] == [7.0, 12.0]


def test_evict_is_idempotent():
    s = TimeSeries()
    for ts in (0, 300, 700):
        s.append(ts, 1)
    assert s.evict_older_than(500) == 2
    assert s.evict_older_than(500) == 0
    assert s.timestamps() == [700]


def test_evict_on_empty_series():
    s = TimeSeries()
    assert s.evict_older_than(10) == 0
    assert s.last is None


def test_to_points_uses_epoch_milliseconds():
    s = TimeSeries()
    s.append(1.5, 42)
    assert s.to_points() == [[1500, 42.0]]
