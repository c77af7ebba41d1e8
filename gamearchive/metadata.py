"""
Declarative description of what an archive format can store.

This is the single source of truth consulted by ArchiveHandler.check_limits():
a handler only publishes it, it has no behaviour.
"""
import fnmatch
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class AttributeCapabilities:
    '''True means the attribute can be set per file, False that it is never set;
    None that it is fixed by the format (forced on or off) and any value set on
    the individual files is ignored.'''
    compressed: Optional[bool] = None
    encrypted: Optional[bool] = None


@dataclass(frozen=True)
class FileCapabilities:
    last_modified: bool = False
    attributes: AttributeCapabilities = field(default_factory=AttributeCapabilities)
    # number of characters including dots: 12 for DOS 8.3 names, 0 if the
    # format doesn't store names, None if there is no limit
    max_filename_len: Optional[int] = None
    # the characters a name can be made of, as a Python codec name
    name_encoding: str = 'latin-1'


@dataclass(frozen=True)
class TagSpec:
    title: str
    type: str = 'string'
    size: Optional[int] = None
    encoding: str = 'latin-1'


@dataclass(frozen=True)
class Capabilities:
    max_file_count: Optional[int] = None
    file: FileCapabilities = field(default_factory=FileCapabilities)
    tags: Dict[str, TagSpec] = field(default_factory=dict)


@dataclass(frozen=True)
class Metadata:
    id: str = 'unknown'
    title: str = 'Unknown format'
    games: Tuple[str, ...] = ()
    # filename expressions matching files often in this format, like '*.grp'
    glob: Tuple[str, ...] = ()
    caps: Capabilities = field(default_factory=Capabilities)

    def match_filename(self, filename: str) -> bool:
        name = filename.rsplit('/', 1)[-1].lower()
        return any(fnmatch.fnmatchcase(name, pattern.lower()) for pattern in self.glob)
