'''
Compose all the frames of a graphic resource into a single bitmap.

The frames are placed with a shelf packing: left to right, in their order,
wrapping to a new row when the next frame would go beyond a target width
chosen to obtain a roughly square sheet.
'''
import logging
import math
from typing import List, NamedTuple, Optional, Sequence, Tuple

from ...exceptions import LayoutTooLargeException, MalformedFrameTableException
from ...streams import Stream
from .. import bmp
from ..palette import Palette
from . import FrameDescriptor, frame_pixels


logger = logging.getLogger(__name__)

MAX_DIMENSION = 8192
BACKGROUND = 0xff


class PackedLayout(NamedTuple):
    placements: List[Tuple[int, int]]
    width: int
    height: int


def target_row_width(frames: Sequence[FrameDescriptor]) -> int:
    total_width = sum([_.width for _ in frames])
    max_height = max([_.height for _ in frames])

    return math.isqrt(total_width * max_height)


def layout_frames(frames: Sequence[FrameDescriptor], target_width: Optional[int] = None) -> PackedLayout:
    '''Place the frames on the sheet; the placements are the top-left
    corners, in the same order of the frames.'''
    if not frames:
        raise MalformedFrameTableException('there are no frames to lay out')

    if target_width is None:
        target_width = target_row_width(frames)

    x, y = 0, 0
    row_height = 0
    width, height = 0, 0
    placements = []

    for frame in frames:
        if x + frame.width > target_width and x > 0:
            x = 0
            y += row_height
            row_height = 0

        placements.append((x, y))

        x += frame.width
        row_height = max(row_height, frame.height)

        width = max(width, x)
        height = max(height, y + row_height)

    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        raise LayoutTooLargeException(
            f'spritesheet dimensions too large: {width}x{height} (max {MAX_DIMENSION}x{MAX_DIMENSION})')

    logger.debug(f'layout of {len(frames)} frames with target width {target_width}: {width}x{height}')

    return PackedLayout(placements=placements, width=width, height=height)


def pack_spritesheet(frames: Sequence[FrameDescriptor], resource, palette: Palette,
                     target_width: Optional[int] = None) -> bytes:
    '''Build the bitmap with all the frames of the resource; the area not
    covered by any frame is white.'''
    layout = layout_frames(frames, target_width=target_width)

    stream = Stream(resource)
    tables = palette.channel_tables()
    canvas = [bytearray([BACKGROUND]) * (layout.width * 3) for _ in range(layout.height)]

    for frame, (x, y) in zip(frames, layout.placements):
        pixels = frame_pixels(frame, stream)
        bmp.check_indices(pixels, palette)

        for row in range(frame.height):
            indices = pixels[row * frame.width:(row + 1) * frame.width]
            canvas[y + row][x * 3:(x + frame.width) * 3] = bmp.convert_row(indices, tables)

    logger.info(f'created spritesheet with {len(frames)} frames, dimensions: {layout.width}x{layout.height}')

    return bmp.encode_bitmap(layout.width, layout.height, canvas)
