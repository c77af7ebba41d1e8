"""
The uniform in-memory model of an archive: instances are returned when reading
archives, and are passed to the format handlers to produce new archive files.
"""
import copy
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from . import tracking


logger = logging.getLogger(__name__)


@dataclass
class FileAttributes:
    '''Attributes for a specific file.

    None means "unsupported attribute" when reading an archive, and "use the
    default of the format" when writing one.'''
    compressed: Optional[bool] = None
    encrypted: Optional[bool] = None


class File(object):
    """A file inside an archive.

    The data is only reachable through the two accessors:

     - get_raw() returns the data exactly as it is stored in the archive
       (compressed, encrypted)
     - get_content() returns the data in its native format; by default is
       the same as the raw data, handlers replace it when processing is needed

    Assigning a new accessor marks the file as modified for the change tracking.
    """

    def __init__(self, name=None, type=None, last_modified=None, disk_size=None, native_size=None,
                 offset=None, attributes=None, get_raw=None, get_content=None):
        self.name: Optional[str] = name
        # "major/minor" if the archive tells it
        self.type: Optional[str] = type
        self.last_modified = last_modified
        self.disk_size: Optional[int] = disk_size
        self.native_size: Optional[int] = native_size
        # where the data starts inside the archive, meaningful only to the handler
        self.offset: Optional[int] = offset
        self.attributes = attributes if attributes is not None else FileAttributes()
        self._get_raw = get_raw
        self._get_content = get_content
        self.origin = tracking.SYNTHESIZED

    def __repr__(self):
        return '<%s(name=%r, disk_size=%r, native_size=%r, attributes=%r)>' % (
            self.__class__.__name__,
            self.name,
            self.disk_size,
            self.native_size,
            self.attributes,
        )

    def _missing_raw(self):
        raise NotImplementedError(f'get_raw() has not been supplied for file {self.name!r}')

    @property
    def get_raw(self):
        return self._get_raw if self._get_raw is not None else self._missing_raw

    @get_raw.setter
    def get_raw(self, accessor):
        self._get_raw = accessor
        self.origin = tracking.SYNTHESIZED

    @property
    def get_content(self):
        return self._get_content if self._get_content is not None else self.get_raw

    @get_content.setter
    def get_content(self, accessor):
        self._get_content = accessor
        self.origin = tracking.SYNTHESIZED

    def clone(self, **changes) -> "File":
        '''Copy of this file, accessors and origin included, with the given
        attributes changed.'''
        other = copy.copy(self)
        other.attributes = replace(self.attributes)
        for key, value in changes.items():
            if not hasattr(other, key):
                raise AttributeError(f'{self.__class__.__name__} has no attribute {key!r}')
            setattr(other, key, value)

        return other


class Archive(object):
    """An archive of named files.

    The order of the files is meaningful: they are written back in the same order.
    """

    def __init__(self, files=None, tags=None):
        # metadata describing the archive itself, like a description
        self.tags: Dict[str, str] = dict(tags or {})
        self.files: List[File] = list(files or [])
        # stamped the first time a file is marked as original
        self.identity = None
        # problems found while parsing that didn't prevent it, e.g. truncation
        self.warnings: List[str] = []

    def __repr__(self):
        return '<%s(files=%d, tags=%r)>' % (self.__class__.__name__, len(self.files), self.tags)

    def __iter__(self):
        return iter(self.files)

    def get_file(self, name: str) -> Optional[File]:
        '''Find a file by name, ignoring the case.'''
        name = name.lower()
        for file in self.files:
            if file.name is not None and file.name.lower() == name:
                return file

        return None

    def set_original_file(self, file: File) -> None:
        '''Remember the file as produced by parsing this archive.'''
        tracking.mark_original(self, file)

    def is_file_modified(self, file: File) -> bool:
        '''True if the file can't be written back from its on-disk data as it is.'''
        return tracking.is_modified(self, file)

    def warn(self, message: str, log=None) -> None:
        '''Report a recoverable problem found while parsing.'''
        (log or logger).warning(message)
        self.warnings.append(message)
