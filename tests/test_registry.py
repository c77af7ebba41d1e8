import logging

import pytest

import gamearchive
from gamearchive.exceptions import AmbiguousFormatError
from gamearchive.handler import ArchiveHandler, Identification
from gamearchive.metadata import Metadata
from gamearchive.registry import Registry


class FakeHandler(ArchiveHandler):
    '''Always gives the same answer.'''

    def __init__(self, handler_id, result):
        super().__init__()
        self.handler_id = handler_id
        self.result = result
        self.calls = 0

    def metadata(self):
        return Metadata(id=self.handler_id, title=f'Fake {self.handler_id}')

    def identify(self, content, filename=None):
        self.calls += 1
        return self.result


def possible(handler_id):
    return FakeHandler(handler_id, Identification.possible('could be'))


def definite(handler_id):
    return FakeHandler(handler_id, Identification.definite('signature matched'))


def rejected(handler_id):
    return FakeHandler(handler_id, Identification.rejected('wrong signature'))


def test_definite_wins_over_earlier_possible():
    a, b, c = possible('a'), rejected('b'), definite('c')
    registry = Registry([a, b, c])

    assert registry.find_handler(b'content') is c
    assert registry.find_handlers(b'content') == [c]


def test_definite_stops_the_scan():
    a, b = definite('a'), possible('b')
    registry = Registry([a, b])

    assert registry.find_handler(b'content') is a
    assert b.calls == 0


def test_first_possible_is_kept(caplog):
    a, b, c = possible('a'), rejected('b'), possible('c')
    registry = Registry([a, b, c])

    with caplog.at_level(logging.WARNING):
        assert registry.find_handler(b'content') is a

    assert registry.find_handlers(b'content') == [a, c]
    assert 'unable to tell the format for certain' in caplog.text


def test_ambiguous_strict():
    a, b = possible('a'), possible('b')
    registry = Registry([a, b])

    with pytest.raises(AmbiguousFormatError) as e:
        registry.find_handler(b'content', strict=True)

    assert e.value.candidates == [a, b]


def test_single_possible_strict():
    a, b = possible('a'), rejected('b')
    registry = Registry([a, b])

    assert registry.find_handler(b'content', strict=True) is a


def test_nothing_matches():
    registry = Registry([rejected('a'), rejected('b')])

    assert registry.find_handler(b'content') is None
    assert registry.find_handlers(b'content') == []
    assert Registry().find_handler(b'content') is None


def test_wrong_content_type():
    registry = Registry([definite('a')])

    with pytest.raises(TypeError):
        registry.find_handler('content')

    # other bytes-like objects are fine
    assert registry.find_handler(bytearray(b'content')).id == 'a'


def test_register():
    a = definite('a')
    registry = Registry()

    assert registry.register(a) is a
    assert registry.get_handler_by_id('a') is a
    assert registry.get_handler_by_id('b') is None

    with pytest.raises(ValueError):
        registry.register(possible('a'))

    registry.register(possible('b'))
    assert [_.id for _ in registry.list_handlers()] == ['a', 'b']
    assert [_.id for _ in registry] == ['a', 'b']


def test_injected_logger(caplog):
    logger = logging.getLogger('test.registry')
    registry = Registry([possible('a'), possible('b')], logger=logger)

    with caplog.at_level(logging.DEBUG, logger='test.registry'):
        registry.find_handler(b'content')

    assert all(_.name == 'test.registry' for _ in caplog.records)
    assert 'Possible match for a' in caplog.text


def test_default_registry():
    ids = [_.id for _ in gamearchive.list_handlers()]

    assert ids == [
        'arc-grp-build',
        'arc-wad-doom',
        'arc-rff-blood-v200',
        'arc-gxlib',
        'arc-exe-ccaves1',
        'arc-bnk-carnage',
        'arc-dat-lostvikings',
        'arc-dat-hocus',
    ]
    assert gamearchive.get_handler_by_id('arc-wad-doom').metadata().title == 'WAD File'
    assert gamearchive.get_handler_by_id('arc-unknown') is None


def test_default_registry_empty_content():
    # an empty file is a valid archive for more than one format
    handler = gamearchive.find_handler(b'')
    assert handler.id == 'arc-bnk-carnage'

    with pytest.raises(AmbiguousFormatError) as e:
        gamearchive.find_handler(b'', strict=True)

    assert [_.id for _ in e.value.candidates] == ['arc-bnk-carnage', 'arc-dat-lostvikings', 'arc-dat-hocus']


def test_default_registry_signature():
    content = b'KenSilverman' + b'\x00' * 4

    assert gamearchive.find_handler(content, 'duke3d.grp').id == 'arc-grp-build'
