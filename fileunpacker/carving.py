'''
Locate the resources embedded into a container.

A resource is recognized by its signature and its extent is calculated from
its own header: the carving is a greedy left to right partition of the
matches, each span starting the search for the next one at its end.
'''
import logging
from enum import Enum
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .audio import wav
from .images import d3gr
from .exceptions import UnpackException


logger = logging.getLogger(__name__)

# bytes copied at a time when searching into a view
SCAN_WINDOW = 1 << 20


def find_bytes(data, needle: bytes, start: int, end: int) -> int:
    '''Like bytes.find(): the lowest index in data[start:end] where needle
    is found, -1 if it's not there.

    A memoryview has no find(): it's searched a window at a time so that
    the container is never copied as a whole.'''
    if hasattr(data, 'find'):
        return data.find(needle, start, end)

    position = start
    while position + len(needle) <= end:
        window_end = min(end, position + SCAN_WINDOW + len(needle) - 1)
        idx = bytes(data[position:window_end]).find(needle)
        if idx >= 0:
            return position + idx

        position += SCAN_WINDOW

    return -1


class Signature(object):
    '''Fixed bytes at fixed offsets from the start of a resource: the bytes
    not covered by any part (like a size field) are not checked.'''

    def __init__(self, *parts: Tuple[int, bytes]):
        if not parts:
            raise ValueError('a signature needs at least one part')

        self.parts = sorted(parts)
        self.length = max([offset + len(literal) for offset, literal in self.parts])

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ', '.join(
            ['%d:%r' % (offset, literal) for offset, literal in self.parts]))

    def match(self, data, position) -> bool:
        if position + self.length > len(data):
            return False

        return all(
            data[position + offset:position + offset + len(literal)] == literal
            for offset, literal in self.parts)

    def find(self, data, start=0) -> Optional[int]:
        '''Return the first position not before start where the signature
        matches, None if there is none.'''
        anchor_offset, anchor = self.parts[0]
        end = len(data)
        position = start

        while position + self.length <= end:
            idx = find_bytes(data, anchor, position + anchor_offset, end)
            if idx < 0:
                return None

            candidate = idx - anchor_offset
            if self.match(data, candidate):
                return candidate

            position = candidate + 1

        return None


class ResourceFormat(NamedTuple):
    name: str
    extension: str
    folder: str
    signature: Signature
    min_header_size: int
    sizer: Callable[[memoryview], int]


class FormatKind(Enum):
    WAV  = 'wav'
    D3GR = 'd3gr'

    @property
    def info(self) -> ResourceFormat:
        return FORMATS[self]

    def declared_size(self, data) -> int:
        return self.info.sizer(data)


FORMATS = {
    FormatKind.WAV: ResourceFormat(
        name='WAV Audio',
        extension='wav',
        folder='extracted_wav',
        signature=Signature((0, b'RIFF'), (8, b'WAVE')),
        min_header_size=wav.HEADER_SIZE,
        sizer=wav.resource_size,
    ),
    FormatKind.D3GR: ResourceFormat(
        name='D3GR (Sanitarium Graphic Resource file)',
        extension='d3gr',
        folder='extracted_gr',
        signature=Signature((0, b'D3GR')),
        min_header_size=d3gr.HEADER_SIZE,
        sizer=d3gr.resource_size,
    ),
}


class ResourceSpan(NamedTuple):
    offset: int
    length: int
    format: FormatKind

    @property
    def end(self):
        return self.offset + self.length

    def overlaps(self, other: "ResourceSpan") -> bool:
        return self.offset < other.end and other.offset < self.end

    def view(self, data) -> memoryview:
        return memoryview(data)[self.offset:self.end]


def iter_resources(data, kind: FormatKind) -> Iterator[ResourceSpan]:
    info = kind.info
    view = memoryview(data)
    size = len(data)
    position = 0

    while position < size:
        start = info.signature.find(data, position)
        if start is None:
            break

        available = size - start
        if available < info.min_header_size:
            logger.debug(f'{info.name} signature at {start} without room for its header')
            break

        try:
            length = kind.declared_size(view[start:])
        except UnpackException as e:
            logger.warning(f'{info.name} at position {start}: cannot compute its size ({e}), '
                           f'assuming it is truncated')
            length = available

        if length < info.min_header_size:
            logger.warning(f'{info.name} at position {start} declares an implausible size {length}, skipping it')
            position = start + 1
            continue

        if length > available:
            logger.warning(f'{info.name} file appears truncated. Requested size: {length}, '
                           f'but only {available} bytes available.')
            length = available

        logger.info(f'found {info.name} file at position {start}, size: {length} bytes')

        yield ResourceSpan(offset=start, length=length, format=kind)

        position = start + length


def carve(data, kind: FormatKind) -> List[ResourceSpan]:
    '''Return the spans of all the resources of the given format.'''
    return list(iter_resources(data, kind))


def carve_all(data, kinds: Sequence[FormatKind]) -> List[ResourceSpan]:
    '''Carve more formats at once; a span overlapping one found before it
    (in order of offset) is discarded.'''
    candidates = sorted(
        [span for kind in kinds for span in iter_resources(data, kind)],
        key=lambda _: (_.offset, -_.length))

    spans: List[ResourceSpan] = []
    for span in candidates:
        if spans and spans[-1].overlaps(span):
            logger.warning(f'{span.format.info.name} at position {span.offset} overlaps '
                           f'{spans[-1].format.info.name} at position {spans[-1].offset}, discarding it')
            continue

        spans.append(span)

    return spans
