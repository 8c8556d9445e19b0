import struct

import pytest

from fileunpacker.images.palette import Palette


def build_d3gr(frames, unknown=b'\x00' * 0x14):
    '''Build a graphic resource from a list of (width, height, pixels).'''
    header = b'D3GR' + unknown + struct.pack('<HH', len(frames), 0)

    offsets = []
    body = b''
    for width, height, pixels in frames:
        offsets.append(len(body))
        body += b'\x00' * 0x0c + struct.pack('<HH', height, width) + pixels

    return header + b''.join([struct.pack('<I', _) for _ in offsets]) + body


def build_wav(payload):
    data = b'WAVEfmt ' + payload
    return b'RIFF' + struct.pack('<I', len(data)) + data


@pytest.fixture
def d3gr_builder():
    return build_d3gr


@pytest.fixture
def wav_builder():
    return build_wav


@pytest.fixture
def bw_palette():
    '''Black for index 0, white for index 1, the rest black'''
    return Palette.from_table([(0x00, 0x00, 0x00), (0xff, 0xff, 0xff)], name='bw')

