import datetime

import pytest

from gamearchive.common import timestamps


def test_unix_time():
    assert timestamps.from_unix_time(0) == datetime.datetime(1970, 1, 1)
    assert timestamps.from_unix_time(946684800) == datetime.datetime(2000, 1, 1)
    assert timestamps.to_unix_time(datetime.datetime(2000, 1, 1)) == 946684800


def test_fat16_time():
    # 2020-03-15 13:45:30
    date, time = (40 << 9) | (3 << 5) | 15, (13 << 11) | (45 << 5) | 15

    assert timestamps.from_fat16_time(date, time) == datetime.datetime(2020, 3, 15, 13, 45, 30)
    # two seconds resolution
    assert timestamps.to_fat16_time(datetime.datetime(2020, 3, 15, 13, 45, 31)) == (date, time)


def test_fat16_time_out_of_range():
    with pytest.raises(ValueError):
        timestamps.to_fat16_time(datetime.datetime(1979, 12, 31))
