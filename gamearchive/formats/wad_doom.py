'''
# Doom WAD file

A 12-byte header with the "IWAD" (main game data) or "PWAD" (patch) signature,
the number of entries and the offset of the FAT; each FAT entry gives offset,
size and an 8-character name of a lump.

Groups of lumps are delimited by zero-length markers (X_START/X_END, or the
older XSTRT/XSTOP) and the lumps of a map follow a marker named after the
level (E1M1, MAP01): they are presented as virtual folders, so "F_START",
"FLOOR0_1", "F_END" becomes the file "F/FLOOR0_1".

Since the markers are rebuilt from the folders, writing an archive groups the
files of each folder together and puts the lumps of a level in the order the
engine expects; the FAT is written just after the header.

The format is documented at <http://www.shikadi.net/moddingwiki/WAD_Format>.
'''
import re

from ..archive import Archive, File, FileAttributes
from ..core import Record
from ..enum import StringTermination
from ..exceptions import FormatError, SizeMismatchError, UnpackException
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata, TagSpec
from ..streams import Stream
from ..supp import replace_extension
from .. import fields


SIGNATURES = ('IWAD', 'PWAD')

MAX_FILENAME_LEN = 8
# room for the "_START" suffix, or "STRT" for the longer names like REMO
MAX_SHORT_FOLDERNAME_LEN = MAX_FILENAME_LEN - 6
MAX_FOLDERNAME_LEN = MAX_FILENAME_LEN - 4

LEVEL_ENTRY_ORDER = (
    'THINGS',
    'LINEDEFS',
    'SIDEDEFS',
    'VERTEXES',
    'SEGS',
    'SSECTORS',
    'NODES',
    'SECTORS',
    'REJECT',
    'BLOCKMAP',
    'BEHAVIOR',
)

LEVEL_NAME = re.compile(r'^(E\dM\d|MAP\d\d)$')


class WADHeader(Record):
    signature  = fields.StringField(4, default='IWAD', termination=StringTermination.NONE)
    file_count = fields.StructField('I')
    fat_offset = fields.StructField('I')


class WADFATEntry(Record):
    offset = fields.StructField('I')
    size   = fields.StructField('I')
    name   = fields.StringField(8)


HEADER_LEN = WADHeader.calcsize()
FATENTRY_LEN = WADFATEntry.calcsize()


def is_level(name: str) -> bool:
    return LEVEL_NAME.match(name) is not None


def _level_order(name: str) -> int:
    try:
        return LEVEL_ENTRY_ORDER.index(name)
    except ValueError:
        return len(LEVEL_ENTRY_ORDER)


class WADDoomHandler(ArchiveHandler):

    def metadata(self):
        # no filename length here: with the virtual folders the full names
        # are longer, the components are checked in check_limits()
        return Metadata(
            id='arc-wad-doom',
            title='WAD File',
            games=('Doom', 'Doom II', 'Heretic', 'Hexen'),
            glob=('*.wad',),
            caps=Capabilities(
                file=FileCapabilities(
                    attributes=AttributeCapabilities(compressed=False, encrypted=False),
                ),
                tags={
                    'type': TagSpec(title='WAD type (IWAD or PWAD)', size=4),
                },
            ),
        )

    def check_limits(self, archive):
        issues = super().check_limits(archive)

        kind = archive.tags.get('type')
        if kind is not None and kind not in SIGNATURES:
            issues.append(f'WAD type must be one of {", ".join(SIGNATURES)}, not "{kind}".')

        paths, folder_paths = set(), set()
        for file in archive.files:
            if not file.name:
                continue

            parts = file.name.split('/')
            if '' in parts:
                issues.append(f'Empty folder or file name in "{file.name}".')

            if file.name in paths:
                issues.append(f'There is more than one file named "{file.name}".')
            paths.add(file.name)
            folder_paths.update('/'.join(parts[:_]) for _ in range(1, len(parts)))

            *folders, name = parts
            if len(name) > MAX_FILENAME_LEN:
                issues.append(f'Filename length is {len(name)}, max is {MAX_FILENAME_LEN}: {name}')

            for folder in folders:
                if is_level(folder):
                    continue

                if len(folder) > MAX_FOLDERNAME_LEN:
                    issues.append(f'Folder name length is {len(folder)}, max is '
                                  f'{MAX_FOLDERNAME_LEN}: {folder}')

        for path in sorted(paths & folder_paths):
            issues.append(f'"{path}" is both a file and a folder.')

        return issues

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'wad'),
        }

    def identify(self, content, filename=None):
        length = len(content)
        if length < HEADER_LEN:
            return Identification.rejected(f'Content too short (< {HEADER_LEN} b).')

        header = WADHeader.unpack(Stream(bytes(content[:HEADER_LEN])))
        if header.signature not in SIGNATURES:
            return Identification.rejected(f'Incorrect signature "{header.signature}".')

        if header.fat_offset > length:
            return Identification.rejected(f'FAT offset ({header.fat_offset}) is past the end '
                                           f'of the file ({length}).')

        return Identification.definite('Header OK.')

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)
        archive = Archive()

        try:
            header = WADHeader.unpack(stream)
        except UnpackException as e:
            raise FormatError(f'not a valid WAD file: {e}') from e

        if header.signature not in SIGNATURES:
            raise FormatError(f'Incorrect signature "{header.signature}".')

        archive.tags['type'] = header.signature

        stream.seek(header.fat_offset)
        folders = []
        prefix = ''
        in_level = False

        for idx in range(header.file_count):
            try:
                entry = WADFATEntry.unpack(stream)
            except UnpackException:
                archive.warn(f'Archive truncated inside the FAT at entry {idx}, '
                             'returning partial content', self.logger)
                break

            name, empty = entry.name, entry.size == 0

            start = 0
            if empty and name.endswith('_START'):
                start = 6
            elif empty and name.endswith('STRT'):
                start = 4
            is_start_map = empty and is_level(name)
            # a lump not belonging to a level ends it, possibly the marker of the next one
            is_end_map = in_level and name not in LEVEL_ENTRY_ORDER
            is_end = empty and (name.endswith('_END') or name.endswith('STOP'))

            if is_end_map and folders:
                folders.pop()
                in_level = False
            if is_end and folders:
                folders.pop()

            if start:
                folders.append(name[:-start])
            elif is_start_map:
                folders.append(name)
                in_level = True

            if start or is_end or is_start_map or is_end_map:
                prefix = ''.join(_ + '/' for _ in folders)

            # the markers are not files
            if start or is_start_map or is_end:
                continue

            if entry.offset + entry.size > length:
                archive.warn(f'Archive truncated, file {name} ends past the end of the archive '
                             f'({length} b), returning partial content', self.logger)
                break

            file = File(
                name=prefix + name,
                disk_size=entry.size,
                native_size=entry.size,
                offset=entry.offset,
                attributes=FileAttributes(compressed=False, encrypted=False),
                get_raw=stream.reader(entry.offset, entry.size),
            )
            archive.set_original_file(file)
            archive.files.append(file)

        return archive

    def _flatten(self, tree, level=False):
        '''Turn the folder tree back into a list of lumps with the markers around
        the folders.'''
        names = list(tree)
        if level:
            names.sort(key=_level_order)

        lumps = []
        for name in names:
            node = tree[name]
            if isinstance(node, File):
                lumps.append((name, node))
                continue

            if is_level(name):
                lumps.append((name, None))
                lumps.extend(self._flatten(node, level=True))
            elif len(name) <= MAX_SHORT_FOLDERNAME_LEN:
                lumps.append((name + '_START', None))
                lumps.extend(self._flatten(node))
                lumps.append((name + '_END', None))
            else:
                lumps.append((name + 'STRT', None))
                lumps.extend(self._flatten(node))
                lumps.append((name + 'STOP', None))

        return lumps

    def generate(self, archive):
        tree = {}
        for file in archive.files:
            *folders, name = file.name.split('/')
            if '' in folders or not name:
                raise FormatError(f'empty folder or file name in "{file.name}"')

            node = tree
            for folder in folders:
                node = node.setdefault(folder, {})
                if isinstance(node, File):
                    raise FormatError(f'{folder} is both a file and a folder')

            if isinstance(node.get(name), File):
                raise FormatError(f'there is more than one file named "{file.name}"')
            if name in node:
                raise FormatError(f'"{file.name}" is both a file and a folder')
            node[name] = file

        lumps = []
        for name, file in self._flatten(tree):
            data = b''
            if file is not None:
                data = file.get_content()
                if len(data) != file.native_size:
                    raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                            f'({file.native_size}) do not match for {file.name}!')
            lumps.append((name, data))

        header = WADHeader(
            signature=archive.tags.get('type', 'IWAD'),
            file_count=len(lumps),
            fat_offset=HEADER_LEN,
        )

        output = Stream()
        output.write(header.pack())

        offset = HEADER_LEN + FATENTRY_LEN * len(lumps)
        for name, data in lumps:
            output.write(WADFATEntry(offset=offset, size=len(data), name=name).pack())
            offset += len(data)

        for _, data in lumps:
            output.write(data)

        return {
            'main': output.getvalue(),
        }
