'''
# Monolith Resource File Format

The archive of Blood: a 32-byte header, the data of the files and, at the end,
a FAT with 48-byte entries carrying an 8.3 filename, offset, size and the
last-modified time (seconds since 1970 in local time).

Only version 2.0 is handled here, the later versions encrypt the FAT.

The format is documented at <http://www.shikadi.net/moddingwiki/RFF_Format>.
'''
import datetime

from ..archive import Archive, File, FileAttributes
from ..common import timestamps
from ..core import Record
from ..enum import Compliant, StringTermination
from ..exceptions import FormatError, UnpackException
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata
from ..streams import Stream
from ..supp import replace_extension
from .. import fields


SIGNATURE = 'RFF\x1a'
VERSION = 0x200

MAX_BASENAME_LEN = 8
MAX_EXTENSION_LEN = 3

# the timestamps are unsigned 32-bit
MAX_TIMESTAMP = 0xFFFFFFFF


class RFFHeader(Record):
    signature  = fields.StringField(4, default=SIGNATURE, termination=StringTermination.NONE, is_magic=True)
    version    = fields.StructField('H', default=VERSION)
    pad        = fields.StructField('H')
    fat_offset = fields.StructField('I')
    file_count = fields.StructField('I')
    pad2       = fields.StringField(16, termination=StringTermination.PADDED)


class RFFFATEntry(Record):
    cache         = fields.StringField(16, termination=StringTermination.NONE, default='\x00' * 16)
    offset        = fields.StructField('I')
    disk_size     = fields.StructField('I')
    packed_size   = fields.StructField('I')
    last_modified = fields.StructField('I')
    flags         = fields.StructField('B')
    ext           = fields.StringField(MAX_EXTENSION_LEN)
    basename      = fields.StringField(MAX_BASENAME_LEN)
    id            = fields.StructField('I')


HEADER_LEN = RFFHeader.calcsize()
FATENTRY_LEN = RFFFATEntry.calcsize()


class RFFFile(File):
    '''A file with the FAT fields that have no place in the generic model, so
    that they are written back as they were.'''

    def __init__(self, cache='\x00' * 16, packed_size=0, flags=0, rff_id=0, **kwargs):
        super().__init__(**kwargs)
        self.cache = cache
        self.packed_size = packed_size
        self.flags = flags
        self.rff_id = rff_id


class RFFArchive(Archive):
    '''Keeps the unused fields of the header, written back as they were.'''

    def __init__(self, pad=0, pad2='', **kwargs):
        super().__init__(**kwargs)
        self.pad = pad
        self.pad2 = pad2


class RFFBloodV200Handler(ArchiveHandler):

    def metadata(self):
        return Metadata(
            id='arc-rff-blood-v200',
            title='Monolith Resource File Format v2.0',
            games=('Blood',),
            glob=('*.rff',),
            caps=Capabilities(
                file=FileCapabilities(
                    last_modified=True,
                    attributes=AttributeCapabilities(encrypted=False),
                    max_filename_len=MAX_BASENAME_LEN + 1 + MAX_EXTENSION_LEN,
                ),
            ),
        )

    def check_limits(self, archive):
        issues = super().check_limits(archive)

        for file in archive.files:
            if file.name:
                basename, _, ext = file.name.partition('.')
                if len(basename) > MAX_BASENAME_LEN:
                    issues.append(f'Base name length is {len(basename)}, max is {MAX_BASENAME_LEN}: {file.name}')
                if len(ext) > MAX_EXTENSION_LEN:
                    issues.append(f'Extension length is {len(ext)}, max is {MAX_EXTENSION_LEN}: {file.name}')

            if file.last_modified and not 0 <= timestamps.to_unix_time(file.last_modified) <= MAX_TIMESTAMP:
                issues.append(f'Last modified time {file.last_modified} of {file.name} is out of '
                              f'range, it must be between {timestamps.from_unix_time(0)} and '
                              f'{timestamps.from_unix_time(MAX_TIMESTAMP)}.')

        return issues

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'rff'),
        }

    def identify(self, content, filename=None):
        if len(content) < HEADER_LEN:
            return Identification.rejected(f'Content too short (< {HEADER_LEN} b).')

        header = RFFHeader.unpack(Stream(bytes(content[:HEADER_LEN])))
        if header.signature != SIGNATURE:
            return Identification.rejected('Wrong signature.')

        if header.version != VERSION:
            return Identification.rejected(f'Unsupported RFF version {header.version >> 8}.'
                                           f'{header.version & 0xff}.')

        return Identification.definite('Signature and version matched.')

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)
        try:
            header = RFFHeader.unpack(stream, compliant=Compliant.MAGIC)
        except UnpackException as e:
            raise FormatError(f'not a valid RFF file: {e}') from e

        if header.version != VERSION:
            raise FormatError(f'RFF version 0x{header.version:x} is not supported')

        archive = RFFArchive(pad=header.pad, pad2=header.pad2)

        self.logger.debug(f'the archive contains {header.file_count} files, FAT at {header.fat_offset}')

        stream.seek(header.fat_offset)
        for idx in range(header.file_count):
            try:
                entry = RFFFATEntry.unpack(stream)
            except UnpackException:
                archive.warn(f'Archive truncated inside the FAT at entry {idx}, '
                             'returning partial content', self.logger)
                break

            name = entry.basename + ('.' + entry.ext if entry.ext else '')

            if entry.offset + entry.disk_size > length:
                archive.warn(f'Archive truncated, file #{idx} ({name}) ends past the end of the '
                             f'archive ({length} b), returning partial content', self.logger)
                break

            file = RFFFile(
                name=name,
                last_modified=timestamps.from_unix_time(entry.last_modified),
                disk_size=entry.disk_size,
                native_size=entry.disk_size,
                offset=entry.offset,
                attributes=FileAttributes(encrypted=False),
                get_raw=stream.reader(entry.offset, entry.disk_size),
                cache=entry.cache,
                packed_size=entry.packed_size,
                flags=entry.flags,
                rff_id=entry.id,
            )
            archive.set_original_file(file)
            archive.files.append(file)

        return archive

    def generate(self, archive):
        # like DOS, the archive has no timezone: local time it is
        now = timestamps.to_unix_time(datetime.datetime.now())

        output = Stream()
        # the header is written last, when the FAT offset is known
        output.write(b'\x00' * HEADER_LEN)
        next_offset = HEADER_LEN

        fat = Stream()
        for file in archive.files:
            data = file.get_content()
            basename, _, ext = file.name.partition('.')

            entry = RFFFATEntry(
                cache=getattr(file, 'cache', '\x00' * 16),
                offset=next_offset,
                disk_size=len(data),
                packed_size=getattr(file, 'packed_size', 0),
                last_modified=timestamps.to_unix_time(file.last_modified) if file.last_modified else now,
                flags=getattr(file, 'flags', 0),
                ext=ext,
                basename=basename,
                id=getattr(file, 'rff_id', 0),
            )
            fat.write(entry.pack())
            output.write(data)
            next_offset += len(data)

        output.write(fat.getvalue())

        header = RFFHeader(
            pad=getattr(archive, 'pad', 0),
            fat_offset=next_offset,
            file_count=len(archive.files),
            pad2=getattr(archive, 'pad2', ''),
        )
        output.seek(0)
        output.write(header.pack())

        return {
            'main': output.getvalue(),
        }
