import io


class Stream(object):
    '''This is a simple wrapper around an in-memory buffer to uniform its
    properties: mainly we need seek() to accept only absolute offsets and
    a way to carve out blocks without moving the cursor.

    Passing an empty bytes object gives a stream ready to be written.'''
    def __init__(self, obj=b''):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise TypeError('\'%s\' is not a bytes-like object' % self._type.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __len__(self):
        with self.obj.getbuffer() as view:
            return len(view)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

        return self

    def slice(self, offset, size):
        '''Returns size bytes starting at offset, leaving the cursor where it is.

        The result can be shorter than requested if the stream ends before.'''
        with self.obj.getbuffer() as view:
            return bytes(view[offset:offset + size])

    def reader(self, offset, size):
        '''Returns a callable giving back the block, suitable as File.get_raw'''
        return lambda: self.slice(offset, size)

    def write(self, data):
        return self.obj.write(data)

    def getvalue(self):
        return self.obj.getvalue()
