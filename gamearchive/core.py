"""
Core module for the description of the fixed-size records (headers, FAT
entries) that make up an archive format.

    class GRPHeader(Record):
        signature  = fields.StringField(12, default='KenSilverman', is_magic=True)
        file_count = fields.StructField('I')

    header = GRPHeader.unpack(stream)
    header.file_count += 1
    raw = header.pack()
"""
import logging
from typing import Tuple, List, Dict

from .fields import Field
from .enum import Compliant
from .meta import MetaRecord
from .exceptions import UnpackException


class Record(metaclass=MetaRecord):
    """
    Together with Field is the main class that defines a format: the fields
    are read and written one after the other, in the order they are declared.

    An instance only stores the values, the class stores the layout.
    """

    def __init__(self, **kwargs):
        for field_name, field in self.get_fields():
            value = kwargs.pop(field_name, field.value_from_default())
            setattr(self, field_name, value)

        if kwargs:
            raise AttributeError(f'{self.__class__.__name__} has no fields named {", ".join(kwargs)}')

    @classmethod
    def get_ordered_fields_name(cls) -> List[str]:
        return cls._meta.fields

    @classmethod
    def get_fields(cls) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, field) for each field.'''
        return [(_, getattr(cls, _)) for _ in cls.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name in self.get_ordered_fields_name():
            msg.append('%s=%r' % (field_name, getattr(self, field_name)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented

        return self.as_dict() == other.as_dict()

    def as_dict(self) -> Dict[str, object]:
        return {_: getattr(self, _) for _ in self.get_ordered_fields_name()}

    @classmethod
    def calcsize(cls) -> int:
        '''the size is derived from the fields'''
        return sum(field.size for _, field in cls.get_fields())

    def pack(self) -> bytes:
        '''Encode the values into the on-disk representation.'''
        value = b''
        for field_name, field in self.get_fields():
            value += field.pack(getattr(self, field_name))

        return value

    @classmethod
    def unpack(cls, stream, compliant=Compliant.NONE):
        '''This is one of the main APIs to take care of: its aim is to take
        binary data from the current position of the stream and transform it
        in the representation given by the class.

        Any failure is reported with the chain of the record and field that
        caused it.'''
        logger = logging.getLogger(__name__)
        values = {}
        for field_name, field in cls.get_fields():
            logger.debug('unpacking %s.%s at offset %d' % (cls.__name__, field_name, stream.tell()))

            try:
                values[field_name] = field.unpack(stream, compliant=compliant)
            except UnpackException as e:
                e.chain.insert(0, cls.__name__)
                raise

        return cls(**values)
