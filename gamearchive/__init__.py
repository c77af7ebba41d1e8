"""
# Game archive containers.

Many games pack their data files inside one bigger file, in a format of their
own. This package gives a uniform way of looking inside them:

 1. identify(): each format handler tells how confident it is that some
    content is in its format, the registry uses that to autodetect the
    format of an unknown file

 2. parse(): the content of the archive (plus any supplementary file) becomes
    an Archive, the list of the files inside it with their names, sizes and
    attributes; the data of each file is read only when asked for

 3. generate(): an Archive, parsed or built from scratch, is written back in
    the format; files that were not modified are copied as they are

Before writing, check_limits() lists whatever prevents the archive to be
stored in the chosen format (too many files, filenames too long and so on).

    handler = gamearchive.find_handler(content, 'duke3d.grp')
    archive = handler.parse({'main': content})
    for file in archive.files:
        print(file.name, file.native_size)

Compression and encryption algorithms are not included: the handlers that
need them take a codec at construction.
"""
from .archive import Archive, File, FileAttributes
from .enum import Confidence
from .exceptions import (
    GameArchiveException,
    FormatError,
    SizeMismatchError,
    AmbiguousFormatError,
    CodecUnavailableError,
)
from .handler import ArchiveHandler, Identification
from .registry import Registry
from . import formats


_registry = formats.default_registry()


def find_handler(content, filename=None, strict=False):
    return _registry.find_handler(content, filename, strict=strict)


def get_handler_by_id(handler_id):
    return _registry.get_handler_by_id(handler_id)


def list_handlers():
    return _registry.list_handlers()
