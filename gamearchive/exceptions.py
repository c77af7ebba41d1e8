class GameArchiveException(Exception):
    '''Base class to extend in order to throw exception in gamearchive.

    It takes a message and, optionally, the chain of the layers (record
    and field names) that caused the exception.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s [%s]' % (self.message, '.'.join(self.chain))


class UnpackException(GameArchiveException):
    '''A record could not be decoded from the underlying data.'''
    pass


class MagicException(UnpackException):
    pass


class FormatError(GameArchiveException):
    '''The content doesn't make sense for the format that was asked to
    parse it (bad signature, missing supplementary file, offsets outside
    the buffer and so on).'''
    pass


class SizeMismatchError(GameArchiveException):
    '''The data of a file doesn't have the length the format requires.

    Continuing would corrupt the output so this is always fatal.'''
    pass


class AmbiguousFormatError(GameArchiveException):
    '''More than one handler could possibly read the content and none of them
    is certain about it.'''

    def __init__(self, message='', candidates=None):
        self.candidates = candidates or []
        super().__init__(message)


class CodecUnavailableError(GameArchiveException):
    '''The data is stored compressed or encrypted but no codec was supplied
    to the handler.'''
    pass
