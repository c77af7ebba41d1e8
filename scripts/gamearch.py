#!/usr/bin/env python3
'''
Look inside the archives of the games.
'''
import os
import sys
import logging

import gamearchive
from gamearchive.enum import Confidence
from gamearchive.exceptions import GameArchiveException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'''usage: {progname} --formats
       {progname} identify <file>
       {progname} list <file> [format id]

Without a format id the format of the archive is autodetected.''')
    sys.exit(1)


def read(path):
    with open(path, 'rb') as f:
        return f.read()


def dump_formats():
    for handler in gamearchive.list_handlers():
        md = handler.metadata()
        print(f'{md.id:<24} {md.title} ({", ".join(md.games)})')


def identify(path):
    content = read(path)
    for handler in gamearchive.list_handlers():
        result = handler.identify(content, path)
        if result.valid is Confidence.REJECTED:
            logger.debug(f'{handler.id}: {result.reason}')
            continue

        print(f'{handler.id:<24} {result.valid.name.lower():<10} {result.reason}')


def get_handler(path, content, handler_id=None):
    if handler_id is not None:
        handler = gamearchive.get_handler_by_id(handler_id)
        if handler is None:
            print(f'unknown format \'{handler_id}\', see --formats')
            sys.exit(1)
        return handler

    handler = gamearchive.find_handler(content, path)
    if handler is None:
        print(f'unable to identify the format of \'{path}\'')
        sys.exit(1)

    return handler


def dump_archive(path, handler_id=None):
    content = read(path)
    handler = get_handler(path, content, handler_id)

    # the main file is already there, the others are alongside it
    files = {'main': content}
    for role, filename in handler.supps(path, content).items():
        if role != 'main':
            files[role] = read(filename)

    archive = handler.parse(files)

    print(f'format: {handler.id}')
    for key, value in archive.tags.items():
        print(f'{key}: {value}')
    print(f''' {"Name":<24} {"Disk size":>10} {"Native size":>12} {"Offset":>10}  Attributes''')
    for idx, file in enumerate(archive.files):
        name = file.name if file.name is not None else f'@{idx}'
        offset = f'0x{file.offset:08x}' if file.offset is not None else '-'
        print(f''' {name:<24} {file.disk_size:>10} {file.native_size:>12} {offset:>10}  {file.attributes}''')

    for warning in archive.warnings:
        print(f'warning: {warning}')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    command = sys.argv[1]

    try:
        if command == '--formats':
            dump_formats()
        elif command == 'identify' and len(sys.argv) == 3:
            identify(sys.argv[2])
        elif command == 'list' and len(sys.argv) in (3, 4):
            dump_archive(sys.argv[2], sys.argv[3] if len(sys.argv) == 4 else None)
        else:
            usage(sys.argv[0])
    except (GameArchiveException, OSError) as e:
        logger.error(f'{command} failed: {e}')
        sys.exit(1)
