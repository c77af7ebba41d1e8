from enum import Enum, Flag, auto


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE  = 0
    MAGIC = 1 << 0


class Confidence(Enum):
    '''Outcome of a format identification.

    POSSIBLE means the content may be in the format but there is not enough
    information to know for certain, e.g. an empty file is a valid empty
    archive in a number of different formats.'''
    DEFINITE = auto()
    POSSIBLE = auto()
    REJECTED = auto()


class StringTermination(Enum):
    '''How a fixed-length string field is laid out on disk.'''
    NONE     = auto()  # every byte belongs to the string
    OPTIONAL = auto()  # NUL terminated unless it fills the whole field
    PADDED   = auto()  # trailing NULs are padding
