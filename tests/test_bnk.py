import logging
import struct

import pytest

from gamearchive.enum import Confidence
from gamearchive.exceptions import CodecUnavailableError, FormatError, SizeMismatchError
from gamearchive.formats.bnk_carnage import BNKCarnageHandler


# name, data as stored (encoded by the test codec), native size
FILES = [
    ('LEVEL1.MAP', b'Zmap data', 8),
    ('TITLE.PCX', b'Zpcx', 3),
]


def make_bnk(files):
    raw = b''
    for name, data, native_size in files:
        raw += b'\x04-ID-' + bytes([len(name)]) + name.encode('latin-1').ljust(12, b'\x00')
        raw += struct.pack('<II', len(data), native_size) + data

    return raw


def test_identify():
    handler = BNKCarnageHandler()

    assert handler.identify(make_bnk(FILES)).valid is Confidence.DEFINITE
    assert handler.identify(make_bnk(FILES[:1])).valid is Confidence.DEFINITE
    assert handler.identify(b'').valid is Confidence.POSSIBLE

    assert handler.identify(b'\x04-ID-').valid is Confidence.REJECTED
    assert handler.identify(b'\x04-XX-' + b'\x00' * 20).valid is Confidence.REJECTED
    # first file truncated
    assert handler.identify(make_bnk(FILES)[:30]).valid is Confidence.REJECTED
    # second header truncated
    assert handler.identify(make_bnk(FILES)[:50]).valid is Confidence.REJECTED

    raw = make_bnk(FILES)
    second = 26 + len(FILES[0][1])
    result = handler.identify(raw[:second + 1] + b'XXXX' + raw[second + 5:])
    assert result.valid is Confidence.REJECTED
    assert 'second file' in result.reason


def test_parse_without_codec():
    archive = BNKCarnageHandler().parse({'main': make_bnk(FILES)})

    assert [(_.name, _.disk_size, _.native_size) for _ in archive.files] == [
        ('LEVEL1.MAP', 9, 8),
        ('TITLE.PCX', 4, 3),
    ]
    assert archive.files[0].offset == 26
    assert archive.files[0].attributes.compressed is True
    assert archive.files[0].get_raw() == b'Zmap data'

    with pytest.raises(CodecUnavailableError):
        archive.files[0].get_content()


def test_parse_with_codec(codec):
    archive = BNKCarnageHandler(codec=codec).parse({'main': make_bnk(FILES)})

    assert [_.get_content() for _ in archive.files] == [b'map data', b'pcx']


def test_round_trip_without_codec():
    handler = BNKCarnageHandler()
    raw = make_bnk(FILES)

    assert handler.generate(handler.parse({'main': raw}))['main'] == raw


def test_untouched_files_are_copied(broken_codec):
    handler = BNKCarnageHandler(codec=broken_codec)
    raw = make_bnk(FILES)

    archive = handler.parse({'main': raw})
    archive.files[0].name = 'LEVEL2.MAP'

    assert handler.generate(archive)['main'] == make_bnk([('LEVEL2.MAP', b'Zmap data', 8)] + FILES[1:])


def test_replace_file(codec):
    handler = BNKCarnageHandler(codec=codec)
    archive = handler.parse({'main': make_bnk(FILES)})

    title = archive.get_file('title.pcx')
    title.get_content = lambda: b'new title'
    title.native_size = 9

    output = handler.generate(archive)['main']

    assert codec.obscured == 1
    assert output == make_bnk(FILES[:1] + [('TITLE.PCX', b'Znew title', 9)])
    assert handler.parse({'main': output}).files[1].get_content() == b'new title'


def test_replace_file_without_codec():
    handler = BNKCarnageHandler()
    archive = handler.parse({'main': make_bnk(FILES)})
    archive.files[1].get_content = lambda: b'new'

    with pytest.raises(CodecUnavailableError):
        handler.generate(archive)


def test_attribute_change_reencodes():
    handler = BNKCarnageHandler()
    archive = handler.parse({'main': make_bnk(FILES)})
    archive.files[0].attributes.compressed = False

    # the data would have to be decoded and encoded again
    with pytest.raises(CodecUnavailableError):
        handler.generate(archive)


def test_size_mismatch(codec):
    handler = BNKCarnageHandler(codec=codec)
    archive = handler.parse({'main': make_bnk(FILES)})
    archive.files[1].get_content = lambda: b'too long'

    with pytest.raises(SizeMismatchError):
        handler.generate(archive)


def test_truncated(caplog):
    raw = make_bnk(FILES)[:-1]

    with caplog.at_level(logging.WARNING):
        archive = BNKCarnageHandler().parse({'main': raw})

    assert [_.name for _ in archive.files] == ['LEVEL1.MAP']
    assert len(archive.warnings) == 1
    assert 'TITLE.PCX' in caplog.text


def test_trailing_bytes():
    archive = BNKCarnageHandler().parse({'main': make_bnk(FILES) + b'\x00' * 3})

    assert len(archive.files) == 2
    assert len(archive.warnings) == 1


def test_parse_wrong_signature():
    with pytest.raises(FormatError):
        BNKCarnageHandler().parse({'main': b'\x04-XX-' + b'\x00' * 21})


def test_empty():
    handler = BNKCarnageHandler()
    archive = handler.parse({'main': b''})

    assert archive.files == []
    assert handler.generate(archive) == {'main': b''}


def test_supps():
    assert BNKCarnageHandler().supps('/carnage/CARNAGE.-1') == {'main': '/carnage/CARNAGE.-0'}


@pytest.mark.parametrize('native_size', [2, 5])
def test_decompressed_size_mismatch(codec, native_size):
    archive = BNKCarnageHandler(codec=codec).parse({'main': make_bnk([('A.BIN', b'Zabc', native_size)])})

    with pytest.raises(SizeMismatchError):
        archive.files[0].get_content()
