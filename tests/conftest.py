import logging
import os

import pytest


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


class PrefixCodec(object):
    '''Stand-in for a compression algorithm: the encoded data is one byte
    longer than the native one.'''

    def __init__(self):
        self.revealed = 0
        self.obscured = 0

    def reveal(self, data):
        self.revealed += 1
        assert data[:1] == b'Z', 'not encoded by this codec'
        return data[1:]

    def obscure(self, data):
        self.obscured += 1
        return b'Z' + data


class BrokenCodec(object):
    '''Fails on any use, for checking that the untouched files are copied as they are.'''

    def reveal(self, data):
        raise AssertionError('reveal() should not be called')

    def obscure(self, data):
        raise AssertionError('obscure() should not be called')


@pytest.fixture
def codec():
    return PrefixCodec()


@pytest.fixture
def broken_codec():
    return BrokenCodec()
