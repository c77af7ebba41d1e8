import pytest

from gamearchive.core import Record
from gamearchive.exceptions import UnpackException
from gamearchive.fields import StructField, StringField
from gamearchive.streams import Stream


class Dummy(Record):
    a = StructField('I', default=0xbad)
    b = StringField(0x10)
    c = StructField('I', default=0xdeadbeef)


DUMMY_RAW = (
    b'\xad\x0b\x00\x00' +
    b'\x00' * 0x10 +
    b'\xef\xbe\xad\xde'
)


def test_record():
    """Check that building a Record from fields behaves correctly."""
    dummy = Dummy()

    assert dummy.a == 0xbad
    assert dummy.b == ''
    assert dummy.c == 0xdeadbeef

    assert Dummy.calcsize() == 0x18
    assert Dummy.get_ordered_fields_name() == ['a', 'b', 'c']

    assert dummy.pack() == DUMMY_RAW


def test_record_unpack():
    stream = Stream(DUMMY_RAW + b'trailing')

    dummy = Dummy.unpack(stream)

    assert stream.tell() == 0x18
    assert dummy == Dummy()
    assert dummy.as_dict() == {'a': 0xbad, 'b': '', 'c': 0xdeadbeef}


def test_record_values():
    dummy = Dummy(b='miao', c=1)

    assert dummy.pack() == b'\xad\x0b\x00\x00' + b'miao' + b'\x00' * 0x0c + b'\x01\x00\x00\x00'

    dummy.a = 0
    assert Dummy.unpack(Stream(dummy.pack())).a == 0


def test_record_unknown_field():
    with pytest.raises(AttributeError):
        Dummy(d=1)


def test_record_inheritance():
    class Child(Dummy):
        d = StructField('B')

    assert Child.get_ordered_fields_name() == ['a', 'b', 'c', 'd']
    assert Child.calcsize() == 0x19
    # the parent is untouched
    assert Dummy.get_ordered_fields_name() == ['a', 'b', 'c']


def test_record_unpack_short():
    with pytest.raises(UnpackException) as e:
        Dummy.unpack(Stream(b'\x00' * 6))

    assert e.value.chain == ['Dummy', 'b']
    assert str(e.value).endswith('[Dummy.b]')
