'''
# Hocus Pocus data file

The data file holds only the content of the files, one after the other; where
each one starts and how long it is lives in a separate FAT file, a list of
offset and size couples. Files have no names.

Nothing in the data file tells it apart, so the format can't be autodetected
beyond a guess.

The format is documented at <http://www.shikadi.net/moddingwiki/DAT_Format_(Hocus_Pocus)>.
'''
from ..archive import Archive, File, FileAttributes
from ..core import Record
from ..exceptions import SizeMismatchError
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata
from ..streams import Stream
from ..supp import replace_extension
from .. import fields


class HocusFATEntry(Record):
    offset = fields.StructField('I')
    size   = fields.StructField('I')


FATENTRY_LEN = HocusFATEntry.calcsize()


class DATHocusHandler(ArchiveHandler):

    def metadata(self):
        return Metadata(
            id='arc-dat-hocus',
            title='Hocus Pocus Data File',
            games=('Hocus Pocus',),
            glob=('*.dat',),
            caps=Capabilities(
                file=FileCapabilities(
                    attributes=AttributeCapabilities(compressed=False, encrypted=False),
                    max_filename_len=0,
                ),
            ),
        )

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'dat'),
            'fat': replace_extension(filename, 'fat'),
        }

    def identify(self, content, filename=None):
        # the FAT is somewhere else
        return Identification.possible('Unable to autodetect this format.')

    def parse(self, content):
        main = self._get_main(content)
        fat = Stream(self._get_supp(content, 'fat'))
        stream = Stream(main)
        length = len(stream)
        archive = Archive()

        file_count, remainder = divmod(len(fat), FATENTRY_LEN)
        if remainder:
            archive.warn(f'the FAT ends with {remainder} bytes too short for an entry, '
                         'ignoring them', self.logger)

        for idx in range(file_count):
            entry = HocusFATEntry.unpack(fat)

            if entry.offset + entry.size > length:
                archive.warn(f'Archive truncated, file {idx} ends past the end of the archive '
                             f'({length} b), returning partial content', self.logger)
                break

            file = File(
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
        fat = Stream()
        output = Stream()

        offset = 0
        for idx, file in enumerate(archive.files):
            data = file.get_content()
            if len(data) != file.native_size:
                raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                        f'({file.native_size}) do not match for file @{idx}!')

            fat.write(HocusFATEntry(offset=offset, size=len(data)).pack())
            output.write(data)
            offset += len(data)

        return {
            'main': output.getvalue(),
            'fat': fat.getvalue(),
        }
