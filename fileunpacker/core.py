"""
Core module for the abstraction of a file format
"""
from typing import Tuple, List

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    A Chunk can contain sub-chunks, declared as class attributes in the order
    they appear in the binary data.

    If a source is passed (raw data, a path or a Stream) the chunk is unpacked
    right away, starting from the current position of the stream.
    """

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if source is not None:
            self.stream = source if isinstance(source, Stream) else Stream(source)
            self.logger.debug('unpacking \'%s\' from %r' % (self.__class__.__name__, self.stream))
            self.unpack(self.stream)
        else:
            self.stream = None
            self.relayout()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    def _get_size(self):
        '''the size MUST be derived from the subchunks'''
        return sum([field.size for _, field in self.get_fields()])

    def _get_raw(self):
        return b''.join([field.raw for _, field in self.get_fields()])

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset the offsets
        so that they are contiguous starting from the given one.'''
        self.offset = offset

        size = 0
        for field_name, field_instance in self.get_fields():
            size += field_instance.relayout(offset=offset + size)

        return size

    def pack(self):
        '''Relayout the chunk and return its binary encoding.'''
        self.relayout(offset=self.offset or 0)

        return self.raw

    def unpack(self, stream):
        '''Read each field from the stream, in order, starting from its
        current position.

        A failure is re-raised as ChunkUnpackException carrying the chain
        of field names down to the one that failed.'''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at offset 0x%x' % (self.__class__.__name__, field_name, stream.tell()))

            field.offset = stream.tell()

            try:
                field.unpack(stream)
            except UnpackException as e:
                chain = e.chain + [field_name]
                raise ChunkUnpackException(e.message, chain=chain) from e
