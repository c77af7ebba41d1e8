'''
# Genus GX Library

Used by The Oregon Trail and Word Rescue: a 128-byte header with a copyright
notice and a label, then a FAT whose 26-byte entries carry a space padded 8.3
name, offset, size and the DOS date and time the file was last modified.

The format is documented at <http://www.shikadi.net/moddingwiki/GX_Library>.
'''
import datetime

from ..archive import Archive, File, FileAttributes
from ..common import timestamps
from ..core import Record
from ..enum import StringTermination
from ..exceptions import FormatError, SizeMismatchError, UnpackException
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata, TagSpec
from ..streams import Stream
from ..supp import get_basename, get_extension, replace_extension
from .. import fields


SIGNATURE = 0xCA01
VERSION = 100

DEFAULT_COPYRIGHT = 'Copyright (c) Genus Microprogramming, Inc. 1988-90'

MAX_BASENAME_LEN = 8
MAX_EXTENSION_LEN = 3


class GXLHeader(Record):
    signature  = fields.StructField('H', default=SIGNATURE)
    copyright  = fields.StringField(50, default=DEFAULT_COPYRIGHT)
    version    = fields.StructField('H', default=VERSION)
    label      = fields.StringField(40)
    file_count = fields.StructField('H')
    padding    = fields.StringField(32, termination=StringTermination.PADDED)


class GXLFATEntry(Record):
    compression = fields.StructField('B')
    # "BASENAME.EXT" padded with spaces, always NUL terminated
    name        = fields.StringField(13)
    offset      = fields.StructField('I')
    size        = fields.StructField('I')
    date        = fields.StructField('H')
    time        = fields.StructField('H')


HEADER_LEN = GXLHeader.calcsize()
FATENTRY_LEN = GXLFATEntry.calcsize()


class GXLArchive(Archive):
    '''Keeps the reserved part of the header, written back as it was.'''

    def __init__(self, padding='', **kwargs):
        super().__init__(**kwargs)
        self.padding = padding


def _fat_name(name: str) -> str:
    return get_basename(name).ljust(MAX_BASENAME_LEN) + '.' + get_extension(name).ljust(MAX_EXTENSION_LEN)


class GXLGenusHandler(ArchiveHandler):

    def metadata(self):
        return Metadata(
            id='arc-gxlib',
            title='GX Library',
            games=('The Oregon Trail', 'Word Rescue'),
            glob=('*.gxl',),
            caps=Capabilities(
                max_file_count=0xFFFF,
                file=FileCapabilities(
                    last_modified=True,
                    attributes=AttributeCapabilities(compressed=False, encrypted=False),
                    max_filename_len=MAX_BASENAME_LEN + 1 + MAX_EXTENSION_LEN,
                ),
                tags={
                    'copyright': TagSpec(title='Copyright notice', size=50),
                    'label': TagSpec(title='Library label', size=40),
                },
            ),
        )

    def check_limits(self, archive):
        issues = super().check_limits(archive)

        for file in archive.files:
            if file.name:
                if len(get_basename(file.name)) > MAX_BASENAME_LEN:
                    issues.append(f'Base name of {file.name} is longer than {MAX_BASENAME_LEN} characters.')
                if len(get_extension(file.name)) > MAX_EXTENSION_LEN:
                    issues.append(f'Extension of {file.name} is longer than {MAX_EXTENSION_LEN} characters.')

            if file.last_modified and not 1980 <= file.last_modified.year <= 1980 + 127:
                issues.append(f'Last modified time {file.last_modified} of {file.name} is out of '
                              'range, DOS dates go from 1980 to 2107.')

        return issues

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'gxl'),
        }

    def identify(self, content, filename=None):
        if len(content) < HEADER_LEN:
            return Identification.rejected(f'Content too short (< {HEADER_LEN} b).')

        header = GXLHeader.unpack(Stream(bytes(content[:HEADER_LEN])))
        if header.signature != SIGNATURE:
            return Identification.rejected('Wrong signature.')

        if header.version != VERSION:
            return Identification.rejected(f'Unsupported version {header.version}.')

        return Identification.definite('Signature matched, version OK.')

    def _last_modified(self, entry):
        try:
            return timestamps.from_fat16_time(entry.date, entry.time)
        except ValueError:
            self.logger.debug(f'{entry.name.strip()} has no valid date ({entry.date:#06x} {entry.time:#06x})')
            return None

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)

        try:
            header = GXLHeader.unpack(stream)
        except UnpackException as e:
            raise FormatError(f'not a valid GX library: {e}') from e

        if header.signature != SIGNATURE or header.version != VERSION:
            raise FormatError(f'not a GX library version {VERSION}: signature {header.signature:#06x}, '
                              f'version {header.version}')

        archive = GXLArchive(padding=header.padding)
        archive.tags['copyright'] = header.copyright
        archive.tags['label'] = header.label

        self.logger.debug(f'the library "{header.label}" contains {header.file_count} files')

        for idx in range(header.file_count):
            try:
                entry = GXLFATEntry.unpack(stream)
            except UnpackException:
                archive.warn(f'Archive truncated inside the FAT at entry {idx}, '
                             'returning partial content', self.logger)
                break

            basename, ext = entry.name[:MAX_BASENAME_LEN].strip(), entry.name[MAX_BASENAME_LEN + 1:].strip()
            name = basename + ('.' + ext if ext else '')

            if entry.offset + entry.size > length:
                archive.warn(f'Archive truncated, file {name} ends past the end of the archive '
                             f'({length} b), returning partial content', self.logger)
                break

            file = File(
                name=name,
                last_modified=self._last_modified(entry),
                disk_size=entry.size,
                native_size=entry.size,
                offset=entry.offset,
                attributes=FileAttributes(compressed=False, encrypted=False),
                get_raw=stream.reader(entry.offset, entry.size),
            )
            archive.set_original_file(file)
            archive.files.append(file)

        return archive

    def generate(self, archive):
        now = timestamps.to_fat16_time(datetime.datetime.now())

        header = GXLHeader(
            copyright=archive.tags.get('copyright', DEFAULT_COPYRIGHT),
            label=archive.tags.get('label', ''),
            file_count=len(archive.files),
            padding=getattr(archive, 'padding', ''),
        )

        output = Stream()
        output.write(header.pack())

        contents = []
        next_offset = HEADER_LEN + FATENTRY_LEN * len(archive.files)
        for file in archive.files:
            data = file.get_content()
            if len(data) != file.native_size:
                raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                        f'({file.native_size}) do not match for {file.name}!')

            date, time = timestamps.to_fat16_time(file.last_modified) if file.last_modified else now
            entry = GXLFATEntry(
                name=_fat_name(file.name),
                offset=next_offset,
                size=len(data),
                date=date,
                time=time,
            )
            output.write(entry.pack())
            contents.append(data)
            next_offset += len(data)

        for data in contents:
            output.write(data)

        return {
            'main': output.getvalue(),
        }
