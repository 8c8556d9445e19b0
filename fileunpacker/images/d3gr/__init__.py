'''
# D3GR graphic resource

Multi-frame indexed color image format. Each frame is one byte per pixel,
an index into a 256 colors palette that is not stored in the resource.

  .------------------------------.  0x00
  | magic "D3GR"                 |
  | ...                          |
  | frame count (u16)            |  0x18
  | ...                          |
  | frame offsets (u32 x count)  |  0x1c
  |------------------------------|  table end
  | frame header (0x10 bytes)    |
  | pixels (width x height)      |
  | ...                          |
  '------------------------------'

The offsets of the frames are relative to the end of the table. The
resource doesn't store its own size: it ends with the pixels of its last
frame.
'''
import logging
from typing import List, NamedTuple

from ...core import Chunk
from ...meta import Compliant
from ... import fields
from ...exceptions import (
    MagicException,
    MalformedFrameTableException,
    TruncatedException,
    UnpackException,
)
from ...properties import Dependency
from ...streams import Stream
from .. import bmp
from ..palette import Palette


logger = logging.getLogger(__name__)


class D3GRHeader(Chunk):
    magic       = fields.StringField(4, default=b'D3GR', is_magic=True)
    unknown     = fields.StringField(0x14)
    frame_count = fields.StructField('H')
    reserved    = fields.StructField('H')
    offsets     = fields.ArrayField(fields.StructField('I'), n=Dependency('.frame_count'))

    @property
    def table_end(self):
        return self.offsets.offset + 4 * self.frame_count.value

    def frame_position(self, index):
        return self.table_end + self.offsets[index].value


class D3GRFrameHeader(Chunk):
    unknown = fields.StringField(0x0c)
    height  = fields.StructField('H')
    width   = fields.StructField('H')


# bytes to read before the frame table can be interpreted
HEADER_SIZE = D3GRHeader().size
FRAME_HEADER_SIZE = D3GRFrameHeader().size


class FrameDescriptor(NamedTuple):
    '''A frame of a resource: its position is the offset of the frame header
    with respect to the start of the resource.'''
    index: int
    offset: int
    width: int
    height: int

    @property
    def pixels_offset(self):
        return self.offset + FRAME_HEADER_SIZE

    @property
    def pixels_size(self):
        return self.width * self.height


def unpack_frame_header(stream: Stream, position: int) -> D3GRFrameHeader:
    stream.seek(position)
    return D3GRFrameHeader(stream)


def resource_size(data) -> int:
    '''Calculate the size of the resource starting at the beginning of data
    using its last frame: position of its header + header + pixels.

    It raises UnpackException when the table or the header of the last
    frame are not inside data.'''
    stream = Stream(data)
    header = D3GRHeader(stream)

    count = header.frame_count.value
    if count == 0:
        logger.warning('graphic resource without frames')
        return header.size

    position = header.frame_position(count - 1)
    last = unpack_frame_header(stream, position)

    return position + FRAME_HEADER_SIZE + last.width.value * last.height.value


def parse_frames(resource) -> List[FrameDescriptor]:
    '''Parse the frame table of the resource.

    Nothing is returned partially: an empty table or a frame header outside
    of the resource raise MalformedFrameTableException.'''
    stream = Stream(resource)

    try:
        header = D3GRHeader(stream, compliant=Compliant.MAGIC)
    except (UnpackException, MagicException) as e:
        raise MalformedFrameTableException(f'cannot read the frame table: {e}', chain=e.chain) from e

    count = header.frame_count.value
    if count == 0:
        raise MalformedFrameTableException('the resource has no frames')

    frames = []
    for index in range(count):
        position = header.frame_position(index)

        if position + FRAME_HEADER_SIZE > len(stream):
            raise MalformedFrameTableException(
                f'header of frame {index} at 0x{position:x} is outside of the resource (size 0x{len(stream):x})')

        frame_header = unpack_frame_header(stream, position)
        frames.append(FrameDescriptor(
            index=index,
            offset=position,
            width=frame_header.width.value,
            height=frame_header.height.value,
        ))

    logger.debug(f'parsed {len(frames)} frames')

    return frames


def frame_pixels(frame: FrameDescriptor, resource) -> bytes:
    '''Return the palette indices of the frame, row-major from the top.'''
    stream = resource if isinstance(resource, Stream) else Stream(resource)

    try:
        pixels = stream.view_at(frame.pixels_offset, frame.pixels_size)
    except TruncatedException as e:
        raise TruncatedException(f'pixels of frame {frame.index}: {e}', chain=e.chain) from e

    return bytes(pixels)


def encode_frame(frame: FrameDescriptor, resource, palette: Palette) -> bytes:
    '''Encode a single frame as a 24 bits bitmap.'''
    pixels = frame_pixels(frame, resource)

    return bmp.encode_indexed(frame.width, frame.height, pixels, palette)
