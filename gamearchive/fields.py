"""
A Field is the "fundamental" datatype from the format point of view, something directly
packable/unpackable: an integer or a fixed-length string inside a FAT entry or a header.
"""
import logging
import struct

from .enum import Compliant, StringTermination
from .meta import FieldBase
from .exceptions import UnpackException, MagicException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, default=None, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.default = default
        self.is_magic = is_magic

    def value_from_default(self):
        return self.default

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _decode(self, raw: bytes):
        raise NotImplementedError(f"method {self.__class__.__name__}._decode() not implemented")

    def _encode(self, value) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._encode() not implemented")

    def unpack(self, stream, compliant=Compliant.NONE):
        '''Read exactly size bytes from the stream and return the decoded value.'''
        raw = stream.read(self.size)
        if len(raw) != self.size:
            raise UnpackException(
                f'needed {self.size} bytes but only {len(raw)} are available',
                chain=[self.name] if self.name is not None else None,
            )

        value = self._decode(raw)

        if self.is_magic and value != self.default:
            self.logger.debug(f'the magic doesn\'t correspond: {value!r} != {self.default!r}')
            if compliant & Compliant.MAGIC:
                raise MagicException(f'wrong signature {value!r}', chain=[self.name] if self.name is not None else None)

        return value

    def pack(self, value) -> bytes:
        raw = self._encode(value)
        if len(raw) != self.size:
            raise ValueError(f'field \'{self.name}\' packed to {len(raw)} bytes instead of {self.size}')

        return raw


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.format)

    def get_format(self):
        return '<%s' % self.format  # the archives are all little endian

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _decode(self, raw: bytes) -> int:
        return struct.unpack(self.get_format(), raw)[0]

    def _encode(self, value) -> bytes:
        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            raise ValueError(f'field \'{self.name}\' can\'t store {value!r}: {e}') from e


class StringField(Field):
    """Represent a fixed-length string, decoded as latin-1 text.

    The termination argument tells how the unused part of the field is laid out,
    see StringTermination."""

    def __init__(self, n, default='', termination=StringTermination.OPTIONAL, encoding='latin-1', **kw):
        self.length = n
        self.termination = termination
        self.encoding = encoding
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%d)>' % (self.__class__.__name__, self.length)

    def __len__(self):
        return self.length

    def _get_size(self):
        return self.length

    def _decode(self, raw: bytes) -> str:
        if self.termination == StringTermination.OPTIONAL:
            raw = raw.split(b'\x00', 1)[0]
        elif self.termination == StringTermination.PADDED:
            raw = raw.rstrip(b'\x00')

        return raw.decode(self.encoding)

    def _encode(self, value) -> bytes:
        raw = value.encode(self.encoding) if isinstance(value, str) else bytes(value)

        if len(raw) > self.length:
            raise ValueError(f'string {value!r} is longer than {self.length} bytes')

        return raw.ljust(self.length, b'\x00')
