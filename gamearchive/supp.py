'''
Helpers for the names of supplementary files, for the formats spread across
multiple files.

The paths are always '/' separated, as the names handed around by the
handlers, and only the last component is ever touched.
'''
import re


def replace_basename(name: str, new_base: str) -> str:
    '''"/folder/file.ext" -> "/folder/new.ext"'''
    ext = get_extension(name)
    suffix = '.' + ext if ext else ''

    return replace_filename(name, new_base + suffix)


def replace_extension(name: str, new_ext: str) -> str:
    '''"/folder/file.ext" -> "/folder/file.new"'''
    return re.sub(r'\.[^/.]+$', '', name) + '.' + new_ext


def replace_filename(name: str, new_name: str) -> str:
    '''"/folder/file.ext" -> "/folder/newfile.new"'''
    return re.sub(r'(/)?[^/]+$', r'\1', name) + new_name


def get_filename(name: str) -> str:
    '''"/folder/file.ext" -> "file.ext"'''
    match = re.search(r'([^/]+)$', name)

    return match.group(1) if match else ''


def get_basename(name: str) -> str:
    '''"/folder/file.ext" -> "file"'''
    filename = get_filename(name)
    dot = filename.rfind('.')

    return filename if dot < 0 else filename[:dot]


def get_extension(name: str) -> str:
    '''"/folder/file.ext" -> "ext"'''
    match = re.search(r'\.([^./]+)$', name)

    return match.group(1) if match else ''
