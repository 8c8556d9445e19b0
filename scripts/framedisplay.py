#!/usr/bin/env python3
'''
Show a frame of a graphic resource, or the whole spritesheet when the frame
index is not given.

 $ framedisplay.py RES.006 0 2
'''
import io
import logging
import sys
import os
import numpy as np
from PIL import Image

from fileunpacker.carving import FormatKind, carve
from fileunpacker.images import d3gr
from fileunpacker.images.d3gr.palettes import get_palette
from fileunpacker.images.d3gr.spritesheet import pack_spritesheet


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <container path> <resource index> [frame index]')
    sys.exit(1)


def frame_image(frame, resource, palette):
    '''Map the indices to colors directly, without passing from a bitmap'''
    colors = np.array(palette.colors, dtype=np.uint8)
    indices = np.frombuffer(d3gr.frame_pixels(frame, resource), dtype=np.uint8)

    pixels = colors[indices.reshape(frame.height, frame.width)]

    return Image.fromarray(pixels, 'RGB')


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    filepath = sys.argv[1]
    resource_index = int(sys.argv[2])

    with open(filepath, 'rb') as f:
        data = f.read()

    spans = carve(data, FormatKind.D3GR)

    for idx, span in enumerate(spans):
        print(f'[{idx:02d}] offset={span.offset} length={span.length}')

    if resource_index >= len(spans):
        print(f'there are only {len(spans)} graphic resources')
        sys.exit(1)

    resource = spans[resource_index].view(data)
    palette = get_palette(filepath)
    frames = d3gr.parse_frames(resource)

    if len(sys.argv) > 3:
        image = frame_image(frames[int(sys.argv[3])], resource, palette)
    else:
        image = Image.open(io.BytesIO(pack_spritesheet(frames, resource, palette)))

    image.show()
