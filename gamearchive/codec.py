"""
Compression and encryption algorithms are not part of this package: the
handlers of formats storing processed data take a codec object at
construction and call it when the content of a file is needed in its native
form, or has to be stored again.

Any object with the two methods below will do.
"""
from .exceptions import CodecUnavailableError


class Codec(object):
    '''Convert between the data as stored in the archive and the native one.'''

    def reveal(self, data: bytes) -> bytes:
        '''Decode (decompress, decrypt) the data read from the archive.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.reveal() not implemented")

    def obscure(self, data: bytes) -> bytes:
        '''Encode the native data in order to be stored in the archive.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.obscure() not implemented")


def require(codec, handler_id: str, purpose: str):
    '''Return the codec or raise CodecUnavailableError when it's missing.'''
    if codec is None:
        raise CodecUnavailableError(f'{handler_id}: a codec is needed to {purpose} but none was supplied')

    return codec
