from enum import Enum, auto

import pytest

from fileunpacker.meta import Compliant
from fileunpacker.exceptions import UnpackException, MagicException
from fileunpacker.fields import StructField, StringField, ArrayField, PaddingField
from fileunpacker.meta import Endianess
from fileunpacker.streams import Stream


def test_structfield_conversion_raw_value():
    """Check that the attributes "value" and "raw" are the analogous
    of the integers and bytes representation for a field."""
    field = StructField('I')

    assert field.size == 4
    assert field.raw == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.raw == b'\xfe\xca\x00\x00'


def test_structfield_set_raw():
    field = StructField('I')

    field.raw = b'\x01\x02\x03\x04'
    assert field.value == 0x04030201


def test_structfield_big_endian():
    field = StructField('H', default=0x0102, endianess=Endianess.BIG_ENDIAN)

    assert field.raw == b'\x01\x02'


def test_structfield_signed():
    field = StructField('i')

    field.raw = b'\xff\xff\xff\xff'
    assert field.value == -1


def test_structfield_enum():
    class DummyEnum(Enum):
        NONE = 0
        FIRST = auto()
        SECOND = auto()

    field = StructField('I', enum=DummyEnum, compliant=Compliant.ENUM)

    assert field.value == DummyEnum.NONE

    field.value = DummyEnum.SECOND

    assert field.value == DummyEnum.SECOND
    assert field.raw == b'\x02\x00\x00\x00'

    with pytest.raises(UnpackException):
        field.raw = b'\x04\x00\x00\x00'


def test_structfield_enum_not_compliant():
    class DummyEnum(Enum):
        NONE = 0

    field = StructField('I', enum=DummyEnum, compliant=Compliant.NONE)

    field.raw = b'\x04\x00\x00\x00'

    assert field.value == 4


def test_structfield_unpack_truncated():
    field = StructField('I')

    with pytest.raises(UnpackException):
        field.unpack(Stream(b'\x01\x02'))


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.raw) == field.size
    assert field.raw == b'\x00' * field.size

    with pytest.raises(ValueError):
        field.value = b'kebab'

    data = bytes(range(0x10))

    field.value = data

    assert field.value == data
    assert field.raw == data


def test_stringfield_needs_length():
    with pytest.raises(ValueError):
        StringField()


def test_stringfield_magic():
    field = StringField(4, default=b'D3GR', is_magic=True, compliant=Compliant.MAGIC)

    field.unpack(Stream(b'D3GR'))
    assert field.value == b'D3GR'

    with pytest.raises(MagicException):
        field.unpack(Stream(b'RIFF'))


def test_stringfield_magic_not_compliant():
    field = StringField(4, default=b'D3GR', is_magic=True, compliant=Compliant.NONE)

    field.unpack(Stream(b'RIFF'))

    assert field.value == b'RIFF'


def test_arrayfield():
    length = 10
    array = ArrayField(StructField('I'), n=length)

    # check some basic property
    assert isinstance(array.value, list)
    assert len(array.value) == length
    assert len(array) == length

    # check that the elements are not duplicated
    assert array[0] is not array[1]

    # check the offsets make sense
    assert array[0].offset == 0
    assert array[1].offset == 4
    assert array[9].offset == 36

    # check the value are all zero
    for element in array:
        assert element.value == 0

    assert array.size == 40
    assert array.raw == b'\x00' * 40


def test_arrayfield_unpack():
    array = ArrayField(StructField('H'), n=3)

    array.unpack(Stream(b'\x01\x00\x02\x00\x03\x00\xff'))

    assert [_.value for _ in array] == [1, 2, 3]
    assert [_.offset for _ in array] == [0, 2, 4]
    assert array[0].father is array


def test_arrayfield_wrong_n():
    with pytest.raises(ValueError):
        ArrayField(StructField('I'), n='10')


def test_paddingfield():
    field = PaddingField()

    assert field.size == 0

    stream = Stream(b'\x01\x02\x03\x04\x05')
    stream.seek(2)
    field.unpack(stream)

    assert field.value == b'\x03\x04\x05'
    assert field.size == 3
