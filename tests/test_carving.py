import logging
import struct

import pytest

from fileunpacker import carving
from fileunpacker.carving import (
    FormatKind,
    ResourceSpan,
    Signature,
    carve,
    carve_all,
)


def test_signature_find():
    signature = Signature((0, b'RIFF'), (8, b'WAVE'))

    assert signature.length == 12

    data = b'RIFF\x00\x00\x00\x00WAVX' + b'..RIFF\x01\x02\x03\x04WAVE'

    assert signature.find(data) == 14
    assert signature.find(data, 15) is None
    assert signature.find(b'') is None


def test_signature_not_enough_bytes():
    signature = Signature((0, b'RIFF'), (8, b'WAVE'))

    # the anchor is there but the rest of the signature would go past the end
    assert signature.find(b'RIFF\x00\x00\x00\x00WAV') is None


def test_signature_anchor_not_at_start():
    signature = Signature((4, b'\xca\xfe'), (0, b'AB'))

    assert signature.find(b'xxAB..\xca\xfeAB') == 2


def test_signature_repeated_find():
    signature = Signature((0, b'D3GR'))
    data = b'D3GR' * 3

    positions = []
    position = signature.find(data)
    while position is not None:
        positions.append(position)
        position = signature.find(data, position + 1)

    assert positions == [0, 4, 8]


def test_signature_find_into_view(monkeypatch):
    signature = Signature((0, b'RIFF'), (8, b'WAVE'))
    data = b'.' * 37 + b'RIFF\x00\x00\x00\x00WAVE' + b'..RIFF'

    # small windows so that the anchor spans two of them
    monkeypatch.setattr(carving, 'SCAN_WINDOW', 8)

    assert signature.find(memoryview(data)) == 37
    assert signature.find(memoryview(data)[1:]) == 36
    assert signature.find(memoryview(data), 38) is None
    assert carving.find_bytes(memoryview(data), b'RIFF', 0, 40) == -1


def test_signature_needs_parts():
    with pytest.raises(ValueError):
        Signature()


@pytest.mark.parametrize('kind', list(FormatKind))
def test_carve_no_match(kind):
    assert carve(b'', kind) == []
    assert carve(b'\x00' * 1024, kind) == []


def test_carve_wav(wav_builder):
    first = wav_builder(b'\x01' * 100)
    second = wav_builder(b'\x02' * 10)
    data = b'junk' + first + b'\x00' * 7 + second

    spans = carve(data, FormatKind.WAV)

    assert spans == [
        ResourceSpan(offset=4, length=len(first), format=FormatKind.WAV),
        ResourceSpan(offset=4 + len(first) + 7, length=len(second), format=FormatKind.WAV),
    ]

    # the size of the span is the declared one
    for span in spans:
        assert FormatKind.WAV.declared_size(span.view(data)) == span.length


def test_carve_d3gr(d3gr_builder):
    first = d3gr_builder([(2, 2, bytes(4)), (3, 1, bytes(3))])
    second = d3gr_builder([(1, 1, b'\x00')])
    data = b'\xff' * 3 + first + second + b'\xff' * 9

    spans = carve(data, FormatKind.D3GR)

    assert [(_.offset, _.length) for _ in spans] == [
        (3, len(first)),
        (3 + len(first), len(second)),
    ]
    assert bytes(spans[1].view(data)) == second


def test_carve_truncated(wav_builder, caplog):
    resource = wav_builder(b'\x01' * 100)
    k = 30
    data = b'..' + resource[:-k]

    with caplog.at_level(logging.WARNING):
        spans = carve(data, FormatKind.WAV)

    assert spans == [ResourceSpan(offset=2, length=len(resource) - k, format=FormatKind.WAV)]
    assert spans[0].end == len(data)
    assert 'truncated' in caplog.text


def test_carve_truncated_d3gr(d3gr_builder):
    resource = d3gr_builder([(4, 4, bytes(16)), (8, 8, bytes(64))])
    data = resource[:-10]

    spans = carve(data, FormatKind.D3GR)

    assert spans == [ResourceSpan(offset=0, length=len(resource) - 10, format=FormatKind.D3GR)]


def test_carve_size_not_computable(caplog):
    '''The table declares more frames than the data contains'''
    data = b'D3GR' + b'\x00' * 0x14 + struct.pack('<HH', 1000, 0) + b'\x00' * 16

    with caplog.at_level(logging.WARNING):
        spans = carve(data, FormatKind.D3GR)

    assert spans == [ResourceSpan(offset=0, length=len(data), format=FormatKind.D3GR)]
    assert 'cannot compute its size' in caplog.text


def test_carve_header_not_available():
    # not enough room for the header after the signature
    assert carve(b'\x00' * 10 + b'RIFF\x10\x00\x00\x00WAVE', FormatKind.WAV) == []
    assert carve(b'D3GR' + b'\x00' * 0x10, FormatKind.D3GR) == []


def test_carve_implausible_size(wav_builder, caplog):
    bogus = b'RIFF' + struct.pack('<I', 0) + b'WAVEfmt '
    resource = wav_builder(b'\x01' * 8)
    data = bogus + resource

    with caplog.at_level(logging.WARNING):
        spans = carve(data, FormatKind.WAV)

    assert spans == [ResourceSpan(offset=len(bogus), length=len(resource), format=FormatKind.WAV)]
    assert 'implausible' in caplog.text


def test_carve_all_rejects_overlaps(wav_builder, d3gr_builder, caplog):
    graphic = d3gr_builder([(1, 1, b'\x00')])
    audio = wav_builder(b'\x00' * 4 + graphic + b'\x00' * 4)
    other = d3gr_builder([(2, 1, b'\x00\x00')])
    data = audio + other

    # alone the graphic inside the audio is found
    assert len(carve(data, FormatKind.D3GR)) == 2

    with caplog.at_level(logging.WARNING):
        spans = carve_all(data, [FormatKind.WAV, FormatKind.D3GR])

    assert spans == [
        ResourceSpan(offset=0, length=len(audio), format=FormatKind.WAV),
        ResourceSpan(offset=len(audio), length=len(other), format=FormatKind.D3GR),
    ]
    assert 'overlaps' in caplog.text


def test_span():
    span = ResourceSpan(offset=4, length=4, format=FormatKind.WAV)

    assert span.end == 8
    assert span.overlaps(ResourceSpan(offset=7, length=10, format=FormatKind.D3GR))
    assert not span.overlaps(ResourceSpan(offset=8, length=10, format=FormatKind.D3GR))
    assert bytes(span.view(b'0123456789')) == b'4567'


def test_format_info():
    assert FormatKind.WAV.info.min_header_size == 16
    assert FormatKind.D3GR.info.min_header_size == 0x1c
    assert FormatKind.D3GR.info.extension == 'd3gr'
    assert FormatKind('wav') is FormatKind.WAV


def test_carve_view(wav_builder, d3gr_builder):
    graphic = d3gr_builder([(1, 1, b'\x00')])
    audio = wav_builder(b'\x00' * 16)
    container = b'..' + graphic + audio + b'..'

    view = memoryview(container)

    assert carve(view, FormatKind.D3GR) == carve(container, FormatKind.D3GR) == [
        ResourceSpan(offset=2, length=len(graphic), format=FormatKind.D3GR),
    ]
    assert carve(view, FormatKind.WAV) == [
        ResourceSpan(offset=2 + len(graphic), length=len(audio), format=FormatKind.WAV),
    ]

    # the offsets are relative to the view
    assert carve(view[1:], FormatKind.D3GR)[0].offset == 1
