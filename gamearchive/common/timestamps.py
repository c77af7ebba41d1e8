'''
Conversion of the timestamps stored inside archives.

Archives don't store a timezone: like DOS they assume the local time of the
machine that wrote them, so here everything is handled as naive datetime
objects representing that wall-clock time.
'''
import datetime

from bitstring import BitArray, pack


EPOCH = datetime.datetime(1970, 1, 1)

# DOS packed date: 7 bits for the year since 1980, 4 for the month and 5 for the day
FAT16_DATE_FORMAT = 'uint:7, uint:4, uint:5'
# DOS packed time: 5 bits for the hours, 6 for the minutes and 5 for the seconds / 2
FAT16_TIME_FORMAT = 'uint:5, uint:6, uint:5'


def _naive(dt: datetime.datetime) -> datetime.datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)

    return dt


def from_unix_time(seconds: int) -> datetime.datetime:
    return EPOCH + datetime.timedelta(seconds=seconds)


def to_unix_time(dt: datetime.datetime) -> int:
    return int((_naive(dt) - EPOCH).total_seconds())


def from_fat16_time(date: int, time: int) -> datetime.datetime:
    year, month, day = BitArray(uint=date, length=16).unpack(FAT16_DATE_FORMAT)
    hours, minutes, seconds = BitArray(uint=time, length=16).unpack(FAT16_TIME_FORMAT)

    return datetime.datetime(1980 + year, month, day, hours, minutes, seconds * 2)


def to_fat16_time(dt: datetime.datetime):
    '''Returns the couple (date, time); the seconds are truncated to an even number.'''
    dt = _naive(dt)
    if not 1980 <= dt.year <= 1980 + 127:
        raise ValueError(f'year {dt.year} can\'t be stored in a FAT16 timestamp')

    date = pack(FAT16_DATE_FORMAT, dt.year - 1980, dt.month, dt.day)
    time = pack(FAT16_TIME_FORMAT, dt.hour, dt.minute, dt.second // 2)

    return date.uint, time.uint
