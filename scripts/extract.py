#!/usr/bin/env python3
'''
Extract the resources of a container file.

The raw resources are always saved; for the graphic resources the frames
and/or a spritesheet can be saved as bitmaps.
'''
import os
import sys
import logging
from pathlib import Path

from fileunpacker.carving import FormatKind
from fileunpacker.extraction import extract, extract_all
from fileunpacker.images.d3gr.palettes import get_palette


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)

MODES = {
    'none': (False, False),
    'frames': (True, False),
    'spritesheet': (False, True),
    'both': (True, True),
}

INVALID_CHARS = '<>:"/\\|?*'


def usage(progname):
    print(f'''usage: {progname} [format] [mode] [container] [output directory]

The format is one of {", ".join([_.value for _ in FormatKind])} or "all",
the mode ({", ".join(MODES)}) indicates what to extract from the
graphic resources besides their raw data.

For example

 $ {progname} d3gr both RES.006 output/

saves the resources, their frames and spritesheets under output/extracted_gr/RES.006/.''')
    sys.exit(1)


def clean_folder_name(path):
    '''Keep only the file name, without the characters not allowed on some filesystems'''
    name = Path(path).name
    return ''.join([_ for _ in name if _ not in INVALID_CHARS and ord(_) >= 32])


def extract_container(path, kinds, output, frames, spritesheet):
    data = Path(path).read_bytes()
    if not data:
        logger.error(f'file \'{path}\' is empty')
        return 0

    palette = get_palette(path)
    count = 0

    if len(kinds) == 1:
        resources = extract(data, kinds[0], palette=palette, frames=frames, spritesheet=spritesheet)
    else:
        resources = extract_all(data, kinds, palette=palette, frames=frames, spritesheet=spritesheet)

    for resource in resources:
        count += 1

        info = resource.span.format.info
        subfolder = Path(output) / info.folder / clean_folder_name(path)
        subfolder.mkdir(parents=True, exist_ok=True)

        resource_path = subfolder / f'{info.extension}_{resource.index}.{info.extension}'
        resource_path.write_bytes(resource.data)
        logger.info(f'extracted raw resource to {resource_path}')

        if resource.frames:
            frames_folder = subfolder / f'frames_{resource.index}'
            frames_folder.mkdir(exist_ok=True)

            for index, bitmap in resource.frames.items():
                (frames_folder / f'frame_{index}.bmp').write_bytes(bitmap)

            logger.info(f'  extracted {len(resource.frames)} frames as BMP files to {frames_folder}')

        if resource.spritesheet is not None:
            spritesheet_path = subfolder / f'spritesheet_{resource.index}.bmp'
            spritesheet_path.write_bytes(resource.spritesheet)
            logger.info(f'  extracted spritesheet to {spritesheet_path}')

    return count


if __name__ == '__main__':
    if len(sys.argv) < 4:
        usage(sys.argv[0])

    format_name, mode, path = sys.argv[1:4]
    output = sys.argv[4] if len(sys.argv) > 4 else '.'

    if mode not in MODES:
        usage(sys.argv[0])

    try:
        kinds = list(FormatKind) if format_name == 'all' else [FormatKind(format_name)]
    except ValueError:
        usage(sys.argv[0])

    frames, spritesheet = MODES[mode]

    try:
        total = extract_container(path, kinds, output, frames, spritesheet)
    except OSError as e:
        logger.error(f'failed to handle file at path \'{path}\': {e}')
        sys.exit(1)

    if not total:
        print('No files were extracted.')
        sys.exit(1)

    print('Extraction completed successfully!')
