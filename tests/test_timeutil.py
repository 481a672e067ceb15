import os

import pytest

from mzgeom.timeutil import NSEC_PER_SEC, Duration, TimeStamp


def test_unit_durations_are_consistent():
    assert Duration.microsecond().nsec == 1000
    assert Duration.millisecond().nsec == 1000000
    assert Duration.second().nsec == NSEC_PER_SEC
    assert Duration.microsecond() * 1000 == Duration.millisecond()
    assert 1000 * Duration.millisecond() == Duration.second()


def test_invalid_timestamp():
    bad = TimeStamp.invalid()
    assert not bad.is_valid()
    assert bad.nsec == (1 << 64) - 1
    assert TimeStamp(-1) == bad
    assert TimeStamp().is_valid()


def test_timestamp_seconds_round_trip():
    ts = TimeStamp(12 * NSEC_PER_SEC)
    assert TimeStamp.from_seconds(ts.to_seconds()) == ts


def test_timestamp_negative_seconds_gives_zero():
    assert TimeStamp.from_seconds(-5.0) == TimeStamp()


def test_duration_seconds_round_trip_and_truncation():
    d = Duration(-3 * NSEC_PER_SEC)
    assert Duration.from_seconds(d.to_seconds()) == d
    assert Duration.from_seconds(-1e-10).nsec == 0


def test_timestamp_difference_is_duration():
    t1 = TimeStamp(5 * NSEC_PER_SEC)
    t2 = t1 + Duration.second()
    assert t2 - t1 == Duration.second()
    assert t1 - t2 == -Duration.second()
    assert t2 - Duration.second() == t1
    assert t1 < t2


def test_duration_arithmetic_inverse():
    a = Duration(7 * NSEC_PER_SEC + 3)
    b = Duration.millisecond()
    assert (a + b) - b == a
    assert a - a == Duration()
    assert not Duration()
    assert bool(a)


def test_duration_integer_division_and_modulo():
    a = Duration(7 * NSEC_PER_SEC + 3)
    s = Duration.second()
    assert (a // s) * s + (a % s) == a
    neg = -a
    assert (neg // s) == -(a // s)
    assert (neg // s) * s + (neg % s) == neg


def test_duration_division_by_zero_duration():
    with pytest.raises(ZeroDivisionError):
        Duration.second() // Duration()


def test_duration_float_scaling():
    half = Duration.second() * 0.5
    assert half * 2 == Duration.second()
    assert Duration.second() / 2.0 == half


def test_duration_str():
    assert str(Duration(1500000000)) == "1.5s"


def test_mtime_of_file(tmp_path):
    path = tmp_path / "stamp.txt"
    path.write_text("x")
    ts = TimeStamp.mtime(path)
    assert ts.is_valid()
    assert ts.nsec % NSEC_PER_SEC == 0
    assert ts.nsec == (os.stat(path).st_mtime_ns // NSEC_PER_SEC) * NSEC_PER_SEC


def test_mtime_missing_file(tmp_path):
    missing = tmp_path / "absent"
    assert TimeStamp.mtime(missing) == TimeStamp.invalid()
    fallback = TimeStamp(42)
    assert TimeStamp.mtime(missing, fallback) == fallback


def test_now_is_recent_and_microsecond_resolution():
    a = TimeStamp.now()
    b = TimeStamp.now()
    assert a <= b
    assert a.nsec % 1000 == 0
    assert a.is_valid()