'''
# Windows Bitmap

Uncompressed device independent bitmap: a 14 bytes file header, a 40 bytes
info header (BITMAPINFOHEADER) and the pixel data.

The pixel data of a 24 bits per pixel image is stored as blue, green and red
bytes; the rows are stored bottom-up and each row is padded with zeros to a
multiple of 4 bytes.
'''
import logging
from enum import Enum
from typing import List, Sequence

from ..core import Chunk
from .. import fields
from ..exceptions import PixelIndexOutOfRangeException
from .palette import Palette


logger = logging.getLogger(__name__)


class BMPCompression(Enum):
    RGB = 0x00


class BMPFileHeader(Chunk):
    signature   = fields.StringField(2, default=b'BM', is_magic=True)
    file_size   = fields.StructField('I')
    reserved1   = fields.StructField('H')
    reserved2   = fields.StructField('H')
    data_offset = fields.StructField('I')


class BMPInfoHeader(Chunk):
    header_size       = fields.StructField('I', default=40)
    width             = fields.StructField('i')
    height            = fields.StructField('i')
    planes            = fields.StructField('H', default=1)
    bits_per_pixel    = fields.StructField('H', default=24)
    compression       = fields.StructField('I', enum=BMPCompression, default=BMPCompression.RGB)
    image_size        = fields.StructField('I')
    x_pixels_per_m    = fields.StructField('i')
    y_pixels_per_m    = fields.StructField('i')
    colors_used       = fields.StructField('I', default=256)
    important_colors  = fields.StructField('I')


class BMPFile(Chunk):
    file_header = BMPFileHeader()
    info_header = BMPInfoHeader()
    pixels      = fields.PaddingField()

    def __str__(self):
        return '%dx%dx%d' % (
            self.info_header.width.value,
            self.info_header.height.value,
            self.info_header.bits_per_pixel.value,
        )


def padded_row_size(width: int) -> int:
    '''Bytes of a 24 bits row rounded up to a multiple of 4'''
    return (width * 3 + 3) & ~3


def check_indices(indices: bytes, palette: Palette):
    '''An index without a corresponding color means that the frame or the
    palette is wrong: better fail than to guess.'''
    if not indices:
        return

    value = max(indices)
    if value >= len(palette):
        raise PixelIndexOutOfRangeException(
            f'pixel index {value} has no color in {palette!r}')


def convert_row(indices: bytes, tables) -> bytearray:
    '''Convert a row of palette indices into BGR triples using the tables
    returned by Palette.channel_tables().'''
    blue, green, red = tables

    row = bytearray(len(indices) * 3)
    row[0::3] = indices.translate(blue)
    row[1::3] = indices.translate(green)
    row[2::3] = indices.translate(red)

    return row


def encode_bitmap(width: int, height: int, rows: Sequence[bytes]) -> bytes:
    '''Build the bitmap of an image given its BGR rows from top to bottom.'''
    if len(rows) != height:
        raise ValueError(f'expected {height} rows, {len(rows)} given')

    row_size = padded_row_size(width)
    padded: List[bytes] = []

    for row in reversed(rows):
        if len(row) != width * 3:
            raise ValueError(f'a row of width {width} must be {width * 3} bytes, not {len(row)}')
        padded.append(bytes(row) + b'\x00' * (row_size - len(row)))

    bmp = BMPFile()

    bmp.info_header.width.value = width
    bmp.info_header.height.value = height
    bmp.pixels.value = b''.join(padded)

    header_size = bmp.file_header.size + bmp.info_header.size
    bmp.file_header.data_offset.value = header_size
    bmp.file_header.file_size.value = header_size + row_size * height

    logger.debug(f'encoding bitmap {width}x{height} ({bmp.file_header.file_size.value} bytes)')

    return bmp.pack()


def encode_indexed(width: int, height: int, indices: bytes, palette: Palette) -> bytes:
    '''Encode an image of palette indices stored row-major, top to bottom.'''
    if len(indices) != width * height:
        raise ValueError(f'{width}x{height} image needs {width * height} indices, {len(indices)} given')

    check_indices(indices, palette)

    tables = palette.channel_tables()
    rows = [convert_row(indices[_ * width:(_ + 1) * width], tables) for _ in range(height)]

    return encode_bitmap(width, height, rows)
