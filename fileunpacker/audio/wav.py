'''
# RIFF WAVE

Only the beginning of the RIFF container is of interest here: its size
field counts the bytes following the first 8 (the magic and the size itself).
'''
from ..core import Chunk
from .. import fields
from ..streams import Stream


RIFF_PREFIX_SIZE = 8


class RIFFHeader(Chunk):
    magic     = fields.StringField(4, default=b'RIFF', is_magic=True)
    riff_size = fields.StructField('I')
    format    = fields.StringField(4, default=b'WAVE', is_magic=True)
    chunk_id  = fields.StringField(4, default=b'fmt ')


HEADER_SIZE = RIFFHeader().size


def resource_size(data) -> int:
    '''Declared size of the RIFF container starting at the beginning of data.'''
    header = RIFFHeader(Stream(data))

    return header.riff_size.value + RIFF_PREFIX_SIZE
