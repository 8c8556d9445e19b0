import logging
from pathlib import PurePath

from .exceptions import TruncatedException


logger = logging.getLogger(__name__)


class Stream(object):
    '''Read-only cursor over a buffer.

    The buffer is borrowed: a path is read once, any other bytes-like object
    is wrapped in a memoryview so that slicing never copies the underlying data.
    Every read is bounds-checked.'''
    def __init__(self, obj):
        self.position = 0

        init_method_name = 'init_%s' % obj.__class__.__name__
        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            if not isinstance(obj, PurePath):
                raise ValueError('\'%s\' cannot be used as a stream' % obj.__class__.__name__)
            init_method = self.init_path

        self.obj = init_method(obj)
        self.view = memoryview(self.obj)

    def __len__(self):
        return len(self.view)

    def __repr__(self):
        return '<%s(size=%d, position=%d)>' % (self.__class__.__name__, len(self), self.position)

    def init_str(self, obj):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % obj)
        with open(obj, 'rb') as f:
            return f.read()

    def init_path(self, obj):
        logger.debug('opening path \'%s\'' % obj)
        return obj.read_bytes()

    def init_bytes(self, obj):
        return obj

    def init_bytearray(self, obj):
        return obj

    def init_memoryview(self, obj):
        return obj

    def init_mmap(self, obj):
        return obj

    def tell(self):
        return self.position

    def remaining(self):
        return len(self) - self.position

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        if offset < 0 or offset > len(self):
            raise TruncatedException(f'offset 0x{offset:x} is outside the stream (size 0x{len(self):x})')

        self.position = offset

    def read(self, n):
        if n > self.remaining():
            raise TruncatedException(
                f'reading {n} bytes at offset 0x{self.position:x} but only {self.remaining()} are available')

        data = bytes(self.view[self.position:self.position + n])
        self.position += n

        return data

    def read_all(self):
        return self.read(self.remaining())

    def view_at(self, start, length):
        '''Return a memoryview of the given range without moving the cursor.'''
        if start < 0 or start + length > len(self):
            raise TruncatedException(f'range 0x{start:x}+0x{length:x} is outside the stream')

        return self.view[start:start + length]
