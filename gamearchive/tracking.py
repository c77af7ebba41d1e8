'''
Change tracking for the files of a parsed archive.

When a handler parses an archive it marks every file it produced as original:
the archive gets an identity and the file records where it comes from together
with a snapshot of its attributes. When the archive is written back the handler
asks whether the file was modified and, if not, reuses the on-disk data as it
is instead of decoding and encoding it again.

A file counts as modified when

 1. the archive was never parsed (it has no identity)
 2. the file was not marked by this very archive
 3. one of the content accessors was replaced, even with one returning
    the same data
 4. the compressed or encrypted attribute differs from the snapshot
'''
import copy
import logging
import uuid
from dataclasses import dataclass


logger = logging.getLogger(__name__)


class Origin(object):
    pass


class SynthesizedOrigin(Origin):
    '''The file was created (or its content replaced) by the caller.'''

    def __repr__(self):
        return '<SYNTHESIZED>'


SYNTHESIZED = SynthesizedOrigin()


@dataclass(frozen=True)
class ParsedOrigin(Origin):
    '''The file was produced by parsing the archive with the given identity.'''
    archive_id: uuid.UUID
    attributes: "FileAttributes"


def mark_original(archive, file) -> None:
    if archive.identity is None:
        archive.identity = uuid.uuid4()
        logger.debug('archive stamped with identity %s' % archive.identity)

    file.origin = ParsedOrigin(archive.identity, copy.copy(file.attributes))


def is_modified(archive, file) -> bool:
    if archive.identity is None:
        return True

    origin = file.origin
    if not isinstance(origin, ParsedOrigin) or origin.archive_id != archive.identity:
        return True

    snapshot, live = origin.attributes, file.attributes

    return (
        live.compressed != snapshot.compressed
        or live.encrypted != snapshot.encrypted
    )
