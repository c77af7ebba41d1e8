import logging

import pytest

from gamearchive.archive import Archive, File, FileAttributes
from gamearchive.tracking import SYNTHESIZED, ParsedOrigin


def parsed_archive():
    '''Build an archive as a handler would do when parsing.'''
    archive = Archive()
    for name, data in (('ONE.DAT', b'one'), ('TWO.DAT', b'two')):
        file = File(
            name=name,
            disk_size=len(data),
            native_size=len(data),
            attributes=FileAttributes(compressed=False),
            get_raw=lambda data=data: data,
        )
        archive.set_original_file(file)
        archive.files.append(file)

    return archive


def test_file_accessors():
    file = File(name='a', get_raw=lambda: b'raw')

    # without processing the content is the raw data
    assert file.get_content() == b'raw'

    file.get_content = lambda: b'content'
    assert file.get_raw() == b'raw'
    assert file.get_content() == b'content'


def test_file_without_data():
    file = File(name='a')

    with pytest.raises(NotImplementedError):
        file.get_raw()

    with pytest.raises(NotImplementedError):
        file.get_content()


def test_file_defaults():
    file = File()

    assert file.name is None
    assert file.attributes == FileAttributes(compressed=None, encrypted=None)
    assert file.origin is SYNTHESIZED


def test_archive_get_file():
    archive = parsed_archive()

    assert archive.get_file('one.dat') is archive.files[0]
    assert archive.get_file('TWO.DAT') is archive.files[1]
    assert archive.get_file('three.dat') is None
    assert [_.name for _ in archive] == ['ONE.DAT', 'TWO.DAT']


def test_parsed_file_is_not_modified():
    archive = parsed_archive()

    assert archive.identity is not None
    for file in archive.files:
        assert isinstance(file.origin, ParsedOrigin)
        assert not archive.is_file_modified(file)


def test_modified_by_attribute():
    archive = parsed_archive()
    file = archive.files[0]

    file.attributes.compressed = True
    assert archive.is_file_modified(file)

    # back as it was
    file.attributes.compressed = False
    assert not archive.is_file_modified(file)

    file.attributes.encrypted = True
    assert archive.is_file_modified(file)


def test_modified_by_accessor():
    archive = parsed_archive()
    file = archive.files[0]
    data = file.get_content()

    # even returning the very same data
    file.get_content = lambda: data

    assert file.origin is SYNTHESIZED
    assert archive.is_file_modified(file)
    assert not archive.is_file_modified(archive.files[1])

    archive.files[1].get_raw = lambda: b'two'
    assert archive.is_file_modified(archive.files[1])


def test_other_fields_dont_count():
    archive = parsed_archive()
    file = archive.files[0]

    file.name = 'RENAMED.DAT'
    file.offset = 1234

    assert not archive.is_file_modified(file)


def test_modified_in_unparsed_archive():
    file = File(name='new', get_raw=lambda: b'')
    archive = Archive(files=[file])

    assert archive.identity is None
    assert archive.is_file_modified(file)


def test_modified_in_other_archive():
    first, second = parsed_archive(), parsed_archive()
    file = first.files[0]

    assert first.identity != second.identity
    assert not first.is_file_modified(file)

    second.files.append(file)
    assert second.is_file_modified(file)


def test_clone():
    archive = parsed_archive()
    file = archive.files[0]

    other = file.clone(name='COPY.DAT')

    assert other.name == 'COPY.DAT'
    assert file.name == 'ONE.DAT'
    assert other.get_raw() == b'one'
    assert not archive.is_file_modified(other)

    # the attributes are not shared
    other.attributes.compressed = True
    assert file.attributes.compressed is False
    assert archive.is_file_modified(other)

    with pytest.raises(AttributeError):
        file.clone(colour='red')


def test_archive_warn(caplog):
    archive = Archive()

    with caplog.at_level(logging.WARNING):
        archive.warn('Archive truncated, returning partial content')

    assert archive.warnings == ['Archive truncated, returning partial content']
    assert 'Archive truncated' in caplog.text
