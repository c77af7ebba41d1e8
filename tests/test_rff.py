import datetime
import logging
import struct

import pytest

from gamearchive.archive import Archive, File
from gamearchive.enum import Confidence
from gamearchive.exceptions import FormatError
from gamearchive.formats.rff_blood import RFFBloodV200Handler


FILES = [
    # name, data, last modified, id
    ('README.TXT', b'hello', 946684800, 7),
    ('NOEXT', b'xy', 0, 0),
]


def make_rff(files, version=0x200):
    data = b''.join(_[1] for _ in files)
    fat_offset = 32 + len(data)

    raw = b'RFF\x1a' + struct.pack('<HHII', version, 0, fat_offset, len(files)) + b'\x00' * 16 + data

    offset = 32
    for name, content, last_modified, file_id in files:
        basename, _, ext = name.partition('.')
        raw += b'\x00' * 16
        raw += struct.pack('<IIIIB', offset, len(content), 0, last_modified, 0)
        raw += ext.encode('latin-1').ljust(3, b'\x00') + basename.encode('latin-1').ljust(8, b'\x00')
        raw += struct.pack('<I', file_id)
        offset += len(content)

    return raw


@pytest.fixture
def handler():
    return RFFBloodV200Handler()


def test_identify(handler):
    assert handler.identify(make_rff(FILES)).valid is Confidence.DEFINITE

    assert handler.identify(b'RFF\x1a').valid is Confidence.REJECTED
    assert handler.identify(b'\x00' * 32).valid is Confidence.REJECTED

    result = handler.identify(make_rff(FILES, version=0x301))
    assert result.valid is Confidence.REJECTED
    assert 'Unsupported RFF version 3.1' in result.reason


def test_parse(handler):
    archive = handler.parse({'main': make_rff(FILES)})

    assert [(_.name, _.get_content()) for _ in archive.files] == [
        ('README.TXT', b'hello'),
        ('NOEXT', b'xy'),
    ]
    assert archive.files[0].last_modified == datetime.datetime(2000, 1, 1)
    assert archive.files[1].last_modified == datetime.datetime(1970, 1, 1)
    assert archive.files[0].rff_id == 7
    assert archive.files[0].attributes.encrypted is False


def test_round_trip(handler):
    raw = make_rff(FILES)

    assert handler.generate(handler.parse({'main': raw}))['main'] == raw


def test_generate_new_file(handler):
    archive = handler.parse({'main': make_rff(FILES)})
    archive.files.append(File(name='NEW.DAT', native_size=3, get_raw=lambda: b'new'))

    output = handler.generate(archive)['main']
    new = handler.parse({'main': output}).files[2]

    assert new.name == 'NEW.DAT'
    assert new.get_content() == b'new'
    # without a timestamp the current time is used
    assert abs((new.last_modified - datetime.datetime.now()).total_seconds()) < 60


def test_generate_last_modified(handler):
    when = datetime.datetime(1996, 5, 31, 12, 30, 15)
    archive = Archive(files=[File(name='A.TXT', last_modified=when, native_size=1, get_raw=lambda: b'a')])

    output = handler.generate(archive)['main']

    assert handler.parse({'main': output}).files[0].last_modified == when


def test_truncated_fat(handler, caplog):
    raw = make_rff(FILES)[:-10]

    with caplog.at_level(logging.WARNING):
        archive = handler.parse({'main': raw})

    assert [_.name for _ in archive.files] == ['README.TXT']
    assert len(archive.warnings) == 1
    assert 'truncated' in caplog.text


def test_parse_errors(handler):
    with pytest.raises(FormatError):
        handler.parse({'main': make_rff(FILES, version=0x300)})

    with pytest.raises(FormatError):
        handler.parse({'main': b'RFF'})


def test_check_limits(handler):
    archive = Archive(files=[
        File(name='TOOLONGNAME.TXT', native_size=0, get_raw=lambda: b''),
        File(name='A.LONG', native_size=0, get_raw=lambda: b''),
    ])

    issues = handler.check_limits(archive)

    assert issues == [
        'Filename length is 15, max is 12: TOOLONGNAME.TXT',
        'Base name length is 11, max is 8: TOOLONGNAME.TXT',
        'Extension length is 4, max is 3: A.LONG',
    ]


def test_metadata(handler):
    caps = handler.metadata().caps

    assert caps.file.last_modified is True
    assert caps.file.max_filename_len == 12


def test_header_padding_round_trip(handler):
    raw = make_rff(FILES)
    raw = raw[:6] + b'\x34\x12' + raw[8:16] + b'by Monolith'.ljust(16, b'\x00') + raw[32:]

    archive = handler.parse({'main': raw})

    assert archive.pad == 0x1234
    assert handler.generate(archive)['main'] == raw


@pytest.mark.parametrize('when', [
    datetime.datetime(1969, 1, 1),
    datetime.datetime(2107, 1, 1),
])
def test_check_limits_last_modified(handler, when):
    archive = Archive(files=[File(name='OLD.TXT', last_modified=when, native_size=1, get_raw=lambda: b'a')])

    issues = handler.check_limits(archive)

    assert len(issues) == 1
    assert 'out of range' in issues[0]

    archive.files[0].last_modified = datetime.datetime(2106, 1, 1)
    assert handler.check_limits(archive) == []
