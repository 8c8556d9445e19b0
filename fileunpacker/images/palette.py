'''
Indexed color support: a palette maps a pixel value to an RGB triple.
'''
import logging
from typing import Iterable, Sequence, Tuple


logger = logging.getLogger(__name__)

PALETTE_SIZE = 256

RGB = Tuple[int, int, int]


class Palette(object):
    '''Immutable ordered table of RGB colors.

    Rows with a fourth component (RGBA) are accepted but the alpha is dropped.
    '''

    def __init__(self, colors: Iterable[Sequence[int]], name=None):
        self.name = name
        self.colors = tuple((r, g, b) for r, g, b, *_ in colors)

        for color in self.colors:
            if any(not 0 <= _ <= 0xff for _ in color):
                raise ValueError(f'color {color!r} has a component out of range')

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name or "anonymous"}, {len(self)} colors)>'

    def __len__(self):
        return len(self.colors)

    def __getitem__(self, index) -> RGB:
        return self.colors[index]

    def __iter__(self):
        return iter(self.colors)

    @classmethod
    def from_table(cls, table, name=None, size=PALETTE_SIZE) -> "Palette":
        '''Build a palette completing the table up to the given size with black.'''
        colors = list(table)
        if len(colors) < size:
            logger.debug(f'palette {name} has {len(colors)} colors, completing with black up to {size}')
            colors += [(0, 0, 0)] * (size - len(colors))

        return cls(colors, name=name)

    def channel_tables(self) -> Tuple[bytes, bytes, bytes]:
        '''Return the lookup tables for the blue, green and red channels, usable
        with bytes.translate(); entries beyond the palette length are zero.'''
        padding = [(0, 0, 0)] * (PALETTE_SIZE - len(self.colors))
        colors = self.colors[:PALETTE_SIZE] + tuple(padding)

        return (
            bytes([_[2] for _ in colors]),
            bytes([_[1] for _ in colors]),
            bytes([_[0] for _ in colors]),
        )
