import pytest

from fileunpacker.core import Chunk
from fileunpacker.meta import Compliant
from fileunpacker.exceptions import ChunkUnpackException, MagicException, TruncatedException
from fileunpacker.fields import StructField, StringField, ArrayField
from fileunpacker.properties import Dependency
from fileunpacker.streams import Stream


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.size == 0x4
    assert dummy.c.raw == b'\xef\xbe\xad\xde'
    assert dummy.c.offset == 0x14

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.pack() == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )


def test_instances_dont_share_fields():
    class Dummy(Chunk):
        a = StructField('I')

    first, second = Dummy(), Dummy()
    first.a.value = 1

    assert first.a is not second.a
    assert second.a.value == 0


def test_set_value_through_descriptor():
    class Dummy(Chunk):
        a = StructField('H')

    dummy = Dummy()
    dummy.a = 0x0102

    assert dummy.a.value == 0x0102
    assert dummy.raw == b'\x02\x01'


def test_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x10)
        field_b = StructField("I")

    class Son(Father):
        field_c = StringField(0x08)

    field_b_value = b'\x01\x02\x03\x04'
    field_c_value = b'ABCDEFGH'
    son = Son(b'A' * 16 + field_b_value + field_c_value)

    assert son.get_ordered_fields_name() == [
        'field_a', 'field_b', 'field_c',
    ]

    # check values make sense
    assert son.field_b.value == 0x04030201, f'field_b is {son.field_b.value:x}'
    assert son.field_c.value == field_c_value
    assert son.field_c.offset == 0x14


def test_chunk_w_dependencies():
    class Table(Chunk):
        count = StructField('H')
        entries = ArrayField(StructField('I'), n=Dependency('.count'))

    table = Table(b'\x02\x00' + b'\x01\x00\x00\x00' + b'\x02\x00\x00\x00' + b'extra')

    assert [_.value for _ in table.entries] == [1, 2]
    assert table.entries.offset == 2
    assert table.entries[1].offset == 6
    assert table.size == 10
    assert table.stream.tell() == 10


def test_chunk_truncated():
    class Table(Chunk):
        count = StructField('H')
        entries = ArrayField(StructField('I'), n=Dependency('.count'))

    with pytest.raises(ChunkUnpackException) as excinfo:
        Table(b'\x03\x00' + b'\x01\x00\x00\x00' + b'\x02\x00')

    assert excinfo.value.chain == ['1', 'entries']
    assert isinstance(excinfo.value.__cause__, TruncatedException)


def test_chunk_from_stream_position():
    class Pair(Chunk):
        a = StructField('B')
        b = StructField('B')

    stream = Stream(b'\x00\x00\x01\x02')
    stream.seek(2)

    pair = Pair(stream)

    assert (pair.a.value, pair.b.value) == (1, 2)
    assert pair.offset == 2
    assert (pair.a.offset, pair.b.offset) == (2, 3)


def test_chunk_magic_compliant():
    class Magic(Chunk):
        magic = StringField(4, default=b'D3GR', is_magic=True)

    assert Magic(b'D3GR').magic.value == b'D3GR'

    # not compliant: only a warning
    assert Magic(b'RIFF').magic.value == b'RIFF'

    with pytest.raises(MagicException):
        Magic(b'RIFF', compliant=Compliant.MAGIC)


def test_proxy_like_format():
    """Check that a chunk containing other chunks lays them out one after the other."""

    class Proxy(Chunk):
        off = StructField('I')
        sz = StructField('I')

    class Experiment(Chunk):
        proxy_a = Proxy()
        proxy_b = Proxy()

        contents = StringField(0x100)

    experiment = Experiment()

    assert [field.offset for _, field in experiment.get_fields()] == [0, 8, 16]
    assert [field.size for _, field in experiment.get_fields()] == [8, 8, 256]

    assert experiment.proxy_a is not experiment.proxy_b
    assert experiment.proxy_b.sz.offset == 12
    assert experiment.size == 0x100 + 2 * (4 + 4)
    assert len(experiment.raw) == experiment.size
    assert experiment.raw == b'\x00' * experiment.size
