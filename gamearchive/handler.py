"""
Base class and defaults for archive format handlers.

To implement a new archive file format, this is the class that will be
extended and its methods replaced with ones that perform the work:

 1. metadata(): the static description of the format and its capabilities
 2. identify(): tell whether some content is in this format, never raising
 3. supps(): the supplementary files needed to read or write the format
 4. parse(): build an Archive from the content of the main and supplementary files
 5. check_limits(): list the problems preventing an Archive from being written
 6. generate(): encode an Archive back into the content of the files

For any content accepted by identify() and not modified in between,
generate(parse(content)) must give back exactly the same bytes.
"""
import logging
from typing import Dict, List, NamedTuple, Optional

from .archive import Archive
from .enum import Confidence
from .exceptions import FormatError
from .metadata import Metadata


def _can_encode(text: str, encoding: str) -> bool:
    try:
        text.encode(encoding)
    except UnicodeEncodeError:
        return False

    return True


class Identification(NamedTuple):
    '''Result of ArchiveHandler.identify(), the reason is meant for the user.'''
    valid: Confidence
    reason: str

    @classmethod
    def definite(cls, reason):
        return cls(Confidence.DEFINITE, reason)

    @classmethod
    def possible(cls, reason):
        return cls(Confidence.POSSIBLE, reason)

    @classmethod
    def rejected(cls, reason):
        return cls(Confidence.REJECTED, reason)


class ArchiveHandler(object):
    """Handler for one concrete archive format.

    Handlers are stateless apart from what they are configured with at
    construction (e.g. codecs), so one instance can be used for any number
    of archives."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(f'{self.__module__}.{self.__class__.__name__}')

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.id)

    @property
    def id(self) -> str:
        return self.metadata().id

    def metadata(self) -> Metadata:
        raise NotImplementedError(f"method {self.__class__.__name__}.metadata() not implemented")

    def identify(self, content: bytes, filename: Optional[str] = None) -> Identification:
        '''See if the given content is in the format supported by this handler.

        More than one handler might report that it supports a file format,
        such as the case of an empty file, which is a valid empty archive in
        a number of different formats: in that case POSSIBLE is returned.

        This must never raise, content too short or malformed is REJECTED.'''
        return Identification.rejected(
            'The identify() function has not been implemented by the format '
            'handler, so autodetecting this format is not possible.'
        )

    def supps(self, filename: str, content: Optional[bytes] = None) -> Dict[str, str]:
        '''Get the supplementary files needed to use the format.

        The result maps an id specific to this handler to the filename; there
        is always a 'main' key for the main archive file, also used as the
        canonical name when converting from one format to another.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.supps() not implemented")

    def parse(self, content: Dict[str, bytes]) -> Archive:
        '''Read the archive: content maps the ids returned by supps() to the data
        of each file.

        It raises FormatError if the content can't be understood.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.parse() not implemented")

    def generate(self, archive: Archive) -> Dict[str, bytes]:
        '''Write out the archive in this format, returning the data of each file
        keyed as in supps().

        The archive must have already passed check_limits() successfully, if
        not the behaviour is undefined and a corrupted file might be produced.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.generate() not implemented")

    def check_limits(self, archive: Archive) -> List[str]:
        '''Identify any problems writing the given archive in this format.

        An empty list means the archive can be written as it is.'''
        caps = self.metadata().caps
        issues = []

        if caps.max_file_count is not None and len(archive.files) > caps.max_file_count:
            issues.append(f'There are {len(archive.files)} files to save, but this '
                          f'archive format can only store up to {caps.max_file_count} files.')

        max_filename_len = caps.file.max_filename_len
        for idx, file in enumerate(archive.files):
            if max_filename_len == 0:
                if file.name:
                    issues.append(f'File @{idx} has filename "{file.name}" but this '
                                  'format does not support filenames.')
            elif file.name is None:
                issues.append(f'File @{idx} has no filename but this format requires one.')
            else:
                if max_filename_len is not None and len(file.name) > max_filename_len:
                    issues.append(f'Filename length is {len(file.name)}, max is '
                                  f'{max_filename_len}: {file.name}')
                if not _can_encode(file.name, caps.file.name_encoding):
                    issues.append(f'Filename "{file.name}" has characters that can\'t be '
                                  f'stored in {caps.file.name_encoding}.')

            for attribute in ('compressed', 'encrypted'):
                if getattr(caps.file.attributes, attribute) is False and getattr(file.attributes, attribute):
                    issues.append(f'File @{idx} ({file.name}) is marked as {attribute} but '
                                  f'this format does not support it.')

        for key, value in archive.tags.items():
            spec = caps.tags.get(key)
            if spec is None:
                issues.append(f'Tag "{key}" is not supported by this format.')
            elif spec.size is not None and len(value) > spec.size:
                issues.append(f'Tag "{key}" is {len(value)} characters long, max is {spec.size}.')
            elif not _can_encode(value, spec.encoding):
                issues.append(f'Tag "{key}" has characters that can\'t be stored in {spec.encoding}.')

        return issues

    def _get_main(self, content: Dict[str, bytes]) -> bytes:
        return self._get_supp(content, 'main')

    def _get_supp(self, content: Dict[str, bytes], role: str) -> bytes:
        try:
            return content[role]
        except KeyError:
            raise FormatError(f'{self.id}: the supplementary file \'{role}\' is required') from None
