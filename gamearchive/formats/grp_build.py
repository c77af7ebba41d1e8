'''
# BUILD engine group file

Used by Duke Nukem 3D, Redneck Rampage and Shadow Warrior: a header with the
"KenSilverman" signature, a FAT with the name and the size of each file and
then the data of the files one after the other.

The format is documented at <http://www.shikadi.net/moddingwiki/GRP_Format>.
'''
from ..archive import Archive, File, FileAttributes
from ..core import Record
from ..enum import Compliant, StringTermination
from ..exceptions import FormatError, SizeMismatchError, UnpackException
from ..handler import ArchiveHandler, Identification
from ..metadata import Capabilities, FileCapabilities, Metadata
from ..streams import Stream
from ..supp import replace_extension
from .. import fields


SIGNATURE = 'KenSilverman'


class GRPHeader(Record):
    signature  = fields.StringField(12, default=SIGNATURE, termination=StringTermination.NONE, is_magic=True)
    file_count = fields.StructField('I')


class GRPFATEntry(Record):
    name = fields.StringField(12)
    size = fields.StructField('I')


FATENTRY_LEN = GRPFATEntry.calcsize()


class GRPBuildHandler(ArchiveHandler):

    def metadata(self):
        return Metadata(
            id='arc-grp-build',
            title='BUILD Group File',
            games=('Duke Nukem 3D', 'Redneck Rampage', 'Shadow Warrior'),
            glob=('*.grp',),
            caps=Capabilities(
                file=FileCapabilities(max_filename_len=12),
            ),
        )

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'grp'),
        }

    def identify(self, content, filename=None):
        if len(content) < FATENTRY_LEN:
            return Identification.rejected(f'Content too short (< {FATENTRY_LEN} b).')

        if bytes(content[:12]) != SIGNATURE.encode('latin-1'):
            return Identification.rejected('Wrong signature.')

        return Identification.definite('Signature matched.')

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)
        archive = Archive()

        try:
            header = GRPHeader.unpack(stream, compliant=Compliant.MAGIC)
        except UnpackException as e:
            raise FormatError(f'not a valid GRP file: {e}') from e

        self.logger.debug(f'the archive contains {header.file_count} files')

        next_offset = FATENTRY_LEN * (header.file_count + 1)
        for idx in range(header.file_count):
            try:
                entry = GRPFATEntry.unpack(stream)
            except UnpackException:
                archive.warn(f'Archive truncated inside the FAT at entry {idx}, '
                             'returning partial content', self.logger)
                break

            if next_offset + entry.size > length:
                archive.warn(f'Archive truncated, file {entry.name} ends past the end '
                             f'of the archive ({length} b), returning partial content', self.logger)
                break

            file = File(
                name=entry.name,
                disk_size=entry.size,
                native_size=entry.size,
                offset=next_offset,
                attributes=FileAttributes(),
                get_raw=stream.reader(next_offset, entry.size),
            )
            archive.set_original_file(file)
            archive.files.append(file)

            next_offset += entry.size

        return archive

    def generate(self, archive):
        contents = []
        for file in archive.files:
            data = file.get_content()
            if len(data) != file.native_size:
                raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                        f'({file.native_size}) do not match for {file.name}!')
            contents.append(data)

        output = Stream()
        output.write(GRPHeader(file_count=len(archive.files)).pack())

        for file, data in zip(archive.files, contents):
            output.write(GRPFATEntry(name=file.name, size=len(data)).pack())

        for data in contents:
            output.write(data)

        return {
            'main': output.getvalue(),
        }
