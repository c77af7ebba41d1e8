'''
# Fixed-layout archives

Some "archives" are really one opaque blob (typically the executable of a game)
with a few named regions at known offsets. This module turns a list of
FixedSpec describing those regions into an Archive and back.

No byte of the blob is ever lost: any range not claimed by a spec becomes a
filler file named dataN.bin, numbered from 1 in order of appearance, so that
generate(parse(blob, specs)) reproduces the blob exactly.

Since the blob can't grow or shrink, every file must be written back with the
exact size it was found with.
'''
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .archive import Archive, File, FileAttributes
from .exceptions import FormatError, SizeMismatchError
from .streams import Stream


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedSpec:
    '''A named region: when offset is None the region starts where the
    previous one ends. The optional reveal/obscure hooks convert the on-disk
    data to the native format and back.'''
    name: str
    disk_size: int
    offset: Optional[int] = None
    native_size: Optional[int] = None
    reveal: Optional[Callable[[bytes], bytes]] = None
    obscure: Optional[Callable[[bytes], bytes]] = None
    compressed: Optional[bool] = None


class FixedFile(File):
    '''A file found in a fixed-layout archive, remembering the region it came from.'''

    def __init__(self, spec: FixedSpec, **kwargs):
        super().__init__(**kwargs)
        self.spec = spec


def _filler_name(count: int) -> str:
    return f'data{count}.bin'


def _expand(specs: Sequence[FixedSpec]) -> Tuple[List[FixedSpec], str]:
    '''Resolve the offsets of the specs, inserting the filler regions, and
    return them with the name the trailing filler would have.'''
    regions = []
    cursor, filler_count = 0, 1
    for spec in specs:
        if spec.offset is not None and spec.offset != cursor:
            if spec.offset < cursor:
                raise FormatError(f'fixed-layout files are out of order, they must be supplied '
                                  f'in order with the lowest offset first. Offending file: {spec.name}')

            regions.append(FixedSpec(
                name=_filler_name(filler_count),
                offset=cursor,
                disk_size=spec.offset - cursor,
            ))
            filler_count += 1
            cursor = spec.offset

        regions.append(replace(spec, offset=cursor))
        cursor += spec.disk_size

    return regions, _filler_name(filler_count)


def _make_file(stream: Stream, spec: FixedSpec) -> FixedFile:
    offset, size = spec.offset, spec.disk_size

    file = FixedFile(
        spec,
        name=spec.name,
        offset=offset,
        disk_size=size,
        native_size=spec.native_size if spec.native_size is not None else size,
        attributes=FileAttributes(compressed=spec.compressed),
        get_raw=stream.reader(offset, size),
    )
    if spec.reveal is not None:
        file.get_content = lambda: spec.reveal(file.get_raw())

    return file


def parse(buffer: bytes, specs: Sequence[FixedSpec]) -> Archive:
    archive = Archive()
    stream = Stream(buffer)
    length = len(stream)

    regions, trailing_name = _expand(specs)

    for region in regions:
        if region.offset + region.disk_size > length:
            raise FormatError(f'file {region.name} ends at offset {region.offset + region.disk_size} but '
                              f'this is beyond the end of the archive ({length} b)')

        file = _make_file(stream, region)
        archive.set_original_file(file)
        archive.files.append(file)

    cursor = regions[-1].offset + regions[-1].disk_size if regions else 0
    if cursor != length:
        # keep the trailing data too
        file = _make_file(stream, FixedSpec(name=trailing_name, offset=cursor, disk_size=length - cursor))
        archive.set_original_file(file)
        archive.files.append(file)

    logger.debug('fixed layout: %d files out of %d regions' % (len(archive.files), len(specs)))

    return archive


def check_limits(archive: Archive, specs: Sequence[FixedSpec]) -> List[str]:
    '''The problems generate() would raise for, given as messages.

    The sizes are checked only for the regions without an obscure hook, since
    the size of the encoded data can't be known before encoding it.'''
    issues = []
    regions, trailing_name = _expand(specs)

    allowed = {_.name.lower() for _ in regions} | {trailing_name.lower()}
    for idx, file in enumerate(archive.files):
        if file.name is None or file.name.lower() not in allowed:
            issues.append(f'File @{idx} ({file.name}) does not exist inside the archive already, '
                          'only existing files can be overwritten.')

    for region in regions:
        file = archive.get_file(region.name)
        if file is None:
            issues.append(f'File {region.name} must exist in this archive format.')
        elif region.obscure is None and file.native_size is not None and file.native_size != region.disk_size:
            issues.append(f'File "{region.name}" is {file.native_size} bytes, but it must be '
                          f'exactly {region.disk_size} bytes.')

    return issues


def _disk_data(archive: Archive, file: File, spec: Optional[FixedSpec]) -> bytes:
    if not archive.is_file_modified(file):
        # untouched, leave it as is
        return file.get_raw()

    data = file.get_content()
    if spec is not None and spec.obscure is not None:
        data = spec.obscure(data)

    return data


def _check_size(name: str, data: bytes, expected: int) -> None:
    if len(data) != expected:
        raise SizeMismatchError(f'File "{name}" is {len(data)} bytes, but it must be exactly {expected} bytes.')


def generate(archive: Archive, specs: Optional[Sequence[FixedSpec]] = None) -> bytes:
    '''Rebuild the blob.

    Without specs the files are written in archive order, each one in the
    region it was parsed from. With specs the files are looked up by name
    (the fillers included) and written in the order of the specs; the
    trailing filler is optional and can have any size.'''
    output = Stream()

    if specs is None:
        for file in archive.files:
            spec = getattr(file, 'spec', None)
            if spec is None:
                raise FormatError(f'File {file.name} does not exist inside the archive already, '
                                  'only existing files can be overwritten.')

            data = _disk_data(archive, file, spec)
            _check_size(file.name, data, spec.disk_size)
            output.write(data)

        return output.getvalue()

    regions, trailing_name = _expand(specs)

    allowed = {_.name.lower() for _ in regions} | {trailing_name.lower()}
    for file in archive.files:
        if file.name is None or file.name.lower() not in allowed:
            raise FormatError(f'File {file.name} does not exist inside the archive already, '
                              'only existing files can be overwritten.')

    for region in regions:
        file = archive.get_file(region.name)
        if file is None:
            raise FormatError(f'File {region.name} must exist in this archive format.')

        data = _disk_data(archive, file, region)
        _check_size(region.name, data, region.disk_size)
        output.write(data)

    trailing = archive.get_file(trailing_name)
    if trailing is not None:
        output.write(_disk_data(archive, trailing, None))

    return output.getvalue()
