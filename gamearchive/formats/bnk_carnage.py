'''
# Alien Carnage data bank

There is no FAT: each file is preceded by its own 26-byte header, with the
"-ID-" signature, a Pascal-style name and the compressed and decompressed
sizes. Every file is stored compressed.

The compression algorithm is supplied as a codec: without one the files can
still be listed, and an archive rewritten as long as its files are unchanged.

The format is documented at <http://www.shikadi.net/moddingwiki/BNK_Format_(Halloween_Harry)>.
'''
from ..archive import Archive, File, FileAttributes
from ..core import Record
from ..enum import Compliant, StringTermination
from ..exceptions import FormatError, SizeMismatchError, UnpackException
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata
from ..streams import Stream
from ..supp import replace_extension
from .. import codec as codecs
from .. import fields


SIGNATURE = '-ID-'
MAX_FILENAME_LEN = 12


class BNKFileHeader(Record):
    signature_length = fields.StructField('B', default=len(SIGNATURE))
    signature        = fields.StringField(4, default=SIGNATURE, termination=StringTermination.NONE, is_magic=True)
    name_length      = fields.StructField('B')
    name             = fields.StringField(MAX_FILENAME_LEN, termination=StringTermination.NONE)
    disk_size        = fields.StructField('I')
    native_size      = fields.StructField('I')


FILEHEADER_LEN = BNKFileHeader.calcsize()


class BNKCarnageHandler(ArchiveHandler):

    def __init__(self, codec=None, logger=None):
        super().__init__(logger=logger)
        self.codec = codec

    def metadata(self):
        return Metadata(
            id='arc-bnk-carnage',
            title='Alien Carnage Data Bank',
            games=('Alien Carnage',),
            glob=('*.-0',),
            caps=Capabilities(
                file=FileCapabilities(
                    # always compressed, it can't be chosen per file
                    attributes=AttributeCapabilities(compressed=None, encrypted=False),
                    max_filename_len=MAX_FILENAME_LEN,
                ),
            ),
        )

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, '-0'),
        }

    def _read_header(self, content, offset):
        return BNKFileHeader.unpack(Stream(bytes(content[offset:offset + FILEHEADER_LEN])))

    def identify(self, content, filename=None):
        length = len(content)
        if length == 0:
            # a valid empty archive, as in many other formats
            return Identification.possible('Empty file.')

        if length < FILEHEADER_LEN:
            return Identification.rejected(f'Content too short (< {FILEHEADER_LEN} b).')

        first = self._read_header(content, 0)
        if first.signature != SIGNATURE:
            return Identification.rejected(f'Wrong signature "{first.signature}".')

        if length < FILEHEADER_LEN + first.disk_size:
            return Identification.rejected('First file is truncated.')

        if length == FILEHEADER_LEN + first.disk_size:
            return Identification.definite('Only one file.')

        if length < FILEHEADER_LEN * 2 + first.disk_size:
            return Identification.rejected('Second file header truncated.')

        second = self._read_header(content, FILEHEADER_LEN + first.disk_size)
        if second.signature != SIGNATURE:
            return Identification.rejected(f'Wrong signature for second file "{second.signature}".')

        return Identification.definite('Signature matched.')

    def _reader(self, file):
        def get_content():
            data = codecs.require(self.codec, self.id, 'decompress the files').reveal(file.get_raw())
            if len(data) != file.native_size:
                raise SizeMismatchError(f'{file.name} decompressed to {len(data)} bytes but its '
                                        f'header says {file.native_size}')

            return data

        return get_content

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)
        archive = Archive()

        offset = 0
        while offset + FILEHEADER_LEN <= length:
            try:
                header = BNKFileHeader.unpack(stream.seek(offset), compliant=Compliant.MAGIC)
            except UnpackException as e:
                raise FormatError(f'invalid file header at offset {offset}: {e}') from e

            offset += FILEHEADER_LEN
            name = header.name[:header.name_length]

            if offset + header.disk_size > length:
                archive.warn(f'Archive truncated, file {name} ends past the end of the archive '
                             f'({length} b), returning partial content', self.logger)
                break

            file = File(
                name=name,
                disk_size=header.disk_size,
                native_size=header.native_size,
                offset=offset,
                attributes=FileAttributes(compressed=True, encrypted=False),
                get_raw=stream.reader(offset, header.disk_size),
            )
            file.get_content = self._reader(file)
            archive.set_original_file(file)
            archive.files.append(file)

            offset += header.disk_size
        else:
            if offset < length:
                archive.warn(f'{length - offset} trailing bytes are too short for a file header, '
                             'ignoring them', self.logger)

        return archive

    def _disk_data(self, archive, file):
        if not archive.is_file_modified(file):
            # avoid decompressing and compressing again
            return file.get_raw()

        data = file.get_content()
        if len(data) != file.native_size:
            raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                    f'({file.native_size}) do not match for file {file.name}!')

        return codecs.require(self.codec, self.id, 'compress the files').obscure(data)

    def generate(self, archive):
        output = Stream()

        for file in archive.files:
            data = self._disk_data(archive, file)

            header = BNKFileHeader(
                name_length=len(file.name),
                name=file.name,
                disk_size=len(data),
                native_size=file.native_size,
            )
            output.write(header.pack())
            output.write(data)

        return {
            'main': output.getvalue(),
        }
