'''
# The Lost Vikings data file

Also used by BlackThorne and WarCraft. The FAT is only a list of 32-bit
offsets, the first one telling also where the FAT ends; files have no names
and each one ends where the next starts (the last at the end of the archive).

All the files are compressed except a handful at fixed positions; a
compressed file starts with its decompressed size as a 16-bit integer.

Since there is no signature the format can only be guessed, from the
consistency of the FAT.

The format is documented at <http://www.shikadi.net/moddingwiki/DAT_Format_(The_Lost_Vikings)>.
'''
from ..archive import Archive, File, FileAttributes
from ..core import Record
from ..exceptions import FormatError, SizeMismatchError
from ..handler import ArchiveHandler, Identification
from ..metadata import AttributeCapabilities, Capabilities, FileCapabilities, Metadata
from ..streams import Stream
from ..supp import replace_extension
from .. import codec as codecs
from .. import fields


# position of the files stored without compression
UNCOMPRESSED_FILES = (0, 1, 380, 384, 529, 530, 531, 534)

MAX_NATIVE_SIZE = 0xFFFF


class DATOffset(Record):
    offset = fields.StructField('I')


class DATCompressedHeader(Record):
    native_size = fields.StructField('H')


OFFSET_LEN = DATOffset.calcsize()
COMPRESSED_HEADER_LEN = DATCompressedHeader.calcsize()


def is_compressed(index: int) -> bool:
    return index not in UNCOMPRESSED_FILES


class DATLostVikingsHandler(ArchiveHandler):

    def __init__(self, codec=None, logger=None):
        super().__init__(logger=logger)
        self.codec = codec

    def metadata(self):
        return Metadata(
            id='arc-dat-lostvikings',
            title='Lost Vikings Data File',
            games=('BlackThorne', 'The Lost Vikings', 'WarCraft: Orcs & Humans'),
            glob=('*.dat',),
            caps=Capabilities(
                file=FileCapabilities(
                    # the position of the file decides if it's compressed
                    attributes=AttributeCapabilities(compressed=None, encrypted=False),
                    max_filename_len=0,
                ),
            ),
        )

    def check_limits(self, archive):
        issues = super().check_limits(archive)

        for idx, file in enumerate(archive.files):
            if file.native_size is not None and file.native_size >= MAX_NATIVE_SIZE:
                issues.append(f'File {idx} is {file.native_size} bytes in size, but this archive '
                              f'format has a maximum size of {MAX_NATIVE_SIZE} bytes.')

        return issues

    def supps(self, filename, content=None):
        return {
            'main': replace_extension(filename, 'dat'),
        }

    def identify(self, content, filename=None):
        length = len(content)
        if length == 0:
            return Identification.possible('Empty archive.')

        if length < OFFSET_LEN:
            return Identification.rejected('Not enough space for FAT.')

        stream = Stream(bytes(content))
        first_offset = DATOffset.unpack(stream).offset

        if first_offset < OFFSET_LEN:
            return Identification.rejected(f'FAT size ({first_offset}) is too small.')

        if first_offset > length:
            return Identification.rejected('FAT ends past EOF.')

        if first_offset % OFFSET_LEN != 0:
            return Identification.rejected('FAT is not divisible by 4.')

        last_offset = first_offset
        for idx in range(1, first_offset // OFFSET_LEN):
            next_offset = DATOffset.unpack(stream).offset
            if next_offset > length:
                return Identification.rejected(f'File {idx} @ offset {next_offset} starts beyond '
                                               'the end of the archive.')
            if next_offset < last_offset:
                return Identification.rejected(f'File {idx} @ offset {next_offset} is before the '
                                               f'preceding file at offset {last_offset} (negative file size).')
            last_offset = next_offset

        # no signature, so nothing more than a good guess
        return Identification.possible('All FAT offsets match.')

    def _reader(self, file):
        def get_content():
            data = codecs.require(self.codec, self.id, 'decompress the files').reveal(file.get_raw())
            if len(data) < file.native_size:
                raise SizeMismatchError(f'file @{file.offset} decompressed to {len(data)} bytes, '
                                        f'{file.native_size} were expected')
            # the decompressor pads the output, the size prefix tells where it ends
            if len(data) > file.native_size:
                self.logger.debug(f'dropping {len(data) - file.native_size} trailing bytes '
                                  f'of file @{file.offset}')

            return data[:file.native_size]

        return get_content

    def _read_offsets(self, stream, length):
        first_offset = DATOffset.unpack(stream).offset
        if first_offset < OFFSET_LEN or first_offset % OFFSET_LEN != 0:
            raise FormatError(f'invalid FAT size {first_offset}')
        if first_offset > length:
            raise FormatError(f'the FAT ends at offset {first_offset}, past the end of the archive ({length} b)')

        offsets = [first_offset]
        for _ in range(1, first_offset // OFFSET_LEN):
            offsets.append(DATOffset.unpack(stream).offset)
        # the last file ends with the archive
        offsets.append(length)

        return offsets

    def parse(self, content):
        main = self._get_main(content)
        stream = Stream(main)
        length = len(stream)
        archive = Archive()

        if length == 0:
            return archive

        if length < OFFSET_LEN:
            raise FormatError('Not enough space for FAT.')

        offsets = self._read_offsets(stream, length)

        for idx, (start, end) in enumerate(zip(offsets, offsets[1:])):
            if end > length:
                archive.warn(f'Archive truncated, file {idx} ends past the end of the archive '
                             f'({length} b), returning partial content', self.logger)
                break

            if end < start:
                raise FormatError(f'file {idx} @ offset {start} ends before it starts (negative file size)')

            compressed = is_compressed(idx)
            disk_size = end - start
            native_size = disk_size

            if compressed:
                if disk_size < COMPRESSED_HEADER_LEN:
                    raise FormatError(f'file {idx} is {disk_size} bytes long, too short to be compressed')

                native_size = DATCompressedHeader.unpack(stream.seek(start)).native_size
                start += COMPRESSED_HEADER_LEN
                disk_size -= COMPRESSED_HEADER_LEN

            file = File(
                disk_size=disk_size,
                native_size=native_size,
                offset=start,
                attributes=FileAttributes(compressed=compressed, encrypted=False),
                get_raw=stream.reader(start, disk_size),
            )
            if compressed:
                file.get_content = self._reader(file)

            archive.set_original_file(file)
            archive.files.append(file)

        return archive

    def _disk_data(self, archive, idx, file, compressed):
        # moving a file to or from one of the uncompressed positions changes
        # its data too
        if not archive.is_file_modified(file) and file.attributes.compressed == compressed:
            return file.get_raw()

        data = file.get_content()
        if len(data) != file.native_size:
            raise SizeMismatchError(f'Length of data ({len(data)}) and native_size '
                                    f'({file.native_size}) do not match for file @{idx}!')

        if compressed:
            data = codecs.require(self.codec, self.id, 'compress the files').obscure(data)

        return data

    def generate(self, archive):
        blocks = []
        for idx, file in enumerate(archive.files):
            compressed = is_compressed(idx)
            data = self._disk_data(archive, idx, file, compressed)
            if compressed:
                data = DATCompressedHeader(native_size=file.native_size).pack() + data
            blocks.append(data)

        output = Stream()

        next_offset = OFFSET_LEN * len(blocks)
        for data in blocks:
            output.write(DATOffset(offset=next_offset).pack())
            next_offset += len(data)

        for data in blocks:
            output.write(data)

        return {
            'main': output.getvalue(),
        }
