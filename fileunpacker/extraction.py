'''
Drive the carving and the decoding of the resources of a container.

The failures are confined to the smallest unit that can fail: a frame, a
resource or a spritesheet; they are logged and collected into the result
of the resource without stopping the extraction.
'''
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .carving import FormatKind, ResourceSpan, carve_all, iter_resources
from .exceptions import UnpackerException
from .images import d3gr
from .images.d3gr.palettes import PALETTES, DEFAULT_PALETTE
from .images.d3gr.spritesheet import pack_spritesheet
from .images.palette import Palette


logger = logging.getLogger(__name__)


class ExtractedResource(object):
    '''What has been obtained from a single resource: the raw data is a view
    into the container.'''

    def __init__(self, index: int, span: ResourceSpan, data: memoryview):
        self.index = index
        self.span = span
        self.data = data
        self.frame_count = 0
        self.frames: Dict[int, bytes] = {}
        self.spritesheet: Optional[bytes] = None
        self.errors: List[UnpackerException] = []

    def __repr__(self):
        return '<%s(#%d, offset=%d, length=%d, frames=%d, errors=%d)>' % (
            self.__class__.__name__,
            self.index,
            self.span.offset,
            self.span.length,
            len(self.frames),
            len(self.errors),
        )


def _extract_graphic(resource: ExtractedResource, palette: Palette, frames: bool, spritesheet: bool):
    try:
        descriptors = d3gr.parse_frames(resource.data)
    except UnpackerException as e:
        logger.error(f'resource #{resource.index}: {e}')
        resource.errors.append(e)
        return

    resource.frame_count = len(descriptors)
    logger.info(f'  resource contains {len(descriptors)} frames')

    if frames:
        for frame in descriptors:
            try:
                resource.frames[frame.index] = d3gr.encode_frame(frame, resource.data, palette)
            except UnpackerException as e:
                logger.error(f'resource #{resource.index}, frame {frame.index}: {e}')
                resource.errors.append(e)

        logger.info(f'  extracted {len(resource.frames)} frames')

    if spritesheet:
        try:
            resource.spritesheet = pack_spritesheet(descriptors, resource.data, palette)
        except UnpackerException as e:
            logger.error(f'resource #{resource.index}, failed to create spritesheet: {e}')
            resource.errors.append(e)


def _extract_spans(data, spans: Iterable[ResourceSpan], palette: Optional[Palette],
                   frames: bool, spritesheet: bool) -> Iterator[ExtractedResource]:
    if palette is None:
        palette = PALETTES[DEFAULT_PALETTE]

    view = memoryview(data)
    count, frame_count = 0, 0

    for index, span in enumerate(spans):
        resource = ExtractedResource(index, span, view[span.offset:span.end])

        if span.format is FormatKind.D3GR:
            _extract_graphic(resource, palette, frames, spritesheet)

        count += 1
        frame_count += len(resource.frames)

        yield resource

    logger.info(f'extracted {count} files')
    if frame_count:
        logger.info(f'total frames extracted: {frame_count}')


def extract(data, kind: FormatKind, palette: Optional[Palette] = None,
            frames: bool = True, spritesheet: bool = False) -> Iterator[ExtractedResource]:
    '''Yield the resources of the given format found into data, decoding the
    frames and/or the spritesheet of the graphic resources.'''
    logger.info(f'searching for {kind.info.name} files into {len(data)} bytes')

    return _extract_spans(data, iter_resources(data, kind), palette, frames, spritesheet)


def extract_all(data, kinds: Sequence[FormatKind], palette: Optional[Palette] = None,
                frames: bool = True, spritesheet: bool = False) -> Iterator[ExtractedResource]:
    '''Like extract() but for more formats at once: the resources overlapping
    others found before them are discarded.'''
    logger.info(f'searching for {", ".join([_.info.name for _ in kinds])} files into {len(data)} bytes')

    return _extract_spans(data, carve_all(data, kinds), palette, frames, spritesheet)
