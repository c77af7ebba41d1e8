"""
Ordered collection of format handlers and the autodetection on top of it.

The order matters: handlers are tried from the cheapest and most specific
check (a signature at a fixed offset) to the most expensive one (walking the
whole FAT, formats needing supplementary files). The first DEFINITE match
stops the scan; POSSIBLE matches are collected along the way and the first one
is used only if nothing better comes later.
"""
import logging
from typing import Iterable, List, Optional

from .enum import Confidence
from .exceptions import AmbiguousFormatError
from .handler import ArchiveHandler


class Registry(object):

    def __init__(self, handlers: Iterable[ArchiveHandler] = (), logger=None):
        self.logger = logger or logging.getLogger(f'{__name__}.{self.__class__.__name__}')
        self._handlers: List[ArchiveHandler] = []

        for handler in handlers:
            self.register(handler)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(_.id for _ in self._handlers))

    def __iter__(self):
        return iter(list(self._handlers))

    def register(self, handler: ArchiveHandler) -> ArchiveHandler:
        '''Append the handler, so it is tried after all the ones already present.'''
        handler_id = handler.metadata().id
        if self.get_handler_by_id(handler_id) is not None:
            raise ValueError(f'a handler with id \'{handler_id}\' is already registered')

        self._handlers.append(handler)

        return handler

    def get_handler_by_id(self, handler_id: str) -> Optional[ArchiveHandler]:
        for handler in self._handlers:
            if handler.metadata().id == handler_id:
                return handler

        return None

    def list_handlers(self) -> List[ArchiveHandler]:
        return list(self._handlers)

    def find_handlers(self, content, filename: Optional[str] = None) -> List[ArchiveHandler]:
        '''Returns a list with the only handler that definitely matched, otherwise
        all the handlers that possibly match, in registry order (an empty
        list if the format could not be identified).'''
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError('content parameter must be a bytes-like object, '
                            f'not \'{content.__class__.__name__}\'')

        candidates = []
        for handler in self._handlers:
            metadata = handler.metadata()
            self.logger.debug(f'Trying format handler {metadata.id} ({metadata.title})')

            confidence = handler.identify(content, filename)

            if confidence.valid is Confidence.DEFINITE:
                self.logger.debug(f'Matched {metadata.id}: {confidence.reason}')
                return [handler]
            elif confidence.valid is Confidence.POSSIBLE:
                # keep going to look for a better match
                self.logger.debug(f'Possible match for {metadata.id}: {confidence.reason}')
                candidates.append(handler)
            else:
                self.logger.debug(f'Not {metadata.id}: {confidence.reason}')

        return candidates

    def find_handler(self, content, filename: Optional[str] = None, strict=False) -> Optional[ArchiveHandler]:
        '''Get the handler for the content, None if the format could not be identified.

        When there are only possible matches the first one found is returned
        and the ambiguity is logged, or AmbiguousFormatError raised if strict is
        set, so the caller can pick the format explicitly.'''
        candidates = self.find_handlers(content, filename)

        if not candidates:
            return None

        if len(candidates) > 1:
            ids = ', '.join(_.id for _ in candidates)
            if strict:
                raise AmbiguousFormatError(f'the content could be in any of these formats: {ids}',
                                           candidates=candidates)

            self.logger.warning(f'unable to tell the format for certain, using \'{candidates[0].id}\' '
                                f'out of: {ids}')

        return candidates[0]
