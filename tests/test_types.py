import pytest

from tiffstruct import types
from tiffstruct.meta import Endianess
from tiffstruct.values import ValueSet
from tiffstruct.exceptions import ValidationException


def test_registry():
    expected = {
        1: ('BYTE', 1),
        2: ('ASCII', 1),
        3: ('SHORT', 2),
        4: ('LONG', 4),
        5: ('RATIONAL', 8),
        6: ('SBYTE', 1),
        7: ('UNDEFINED', 1),
        8: ('SSHORT', 2),
        9: ('SLONG', 4),
        10: ('SRATIONAL', 8),
        11: ('FLOAT', 4),
        12: ('DOUBLE', 8),
        13: ('IFD', 4),
    }

    assert {_.id: (_.name, _.size) for _ in types.TIFF_TYPES.values()} == expected
    assert types.get_type(3) is types.SHORT

    with pytest.raises(ValidationException):
        types.get_type(0x42)


def test_encode():
    assert types.SHORT.encode(5, Endianess.BIG_ENDIAN) == b'\x00\x05'
    assert types.SHORT.encode(5, Endianess.LITTLE_ENDIAN) == b'\x05\x00'
    assert types.SSHORT.encode(-1, Endianess.LITTLE_ENDIAN) == b'\xff\xff'
    assert types.RATIONAL.encode((72, 1), Endianess.BIG_ENDIAN) == b'\x00\x00\x00\x48\x00\x00\x00\x01'
    assert types.SRATIONAL.encode((-1, 2), Endianess.LITTLE_ENDIAN) == b'\xff\xff\xff\xff\x02\x00\x00\x00'
    assert types.FLOAT.encode(1.0, Endianess.BIG_ENDIAN) == b'\x3f\x80\x00\x00'
    assert types.DOUBLE.encode(-2.0, Endianess.BIG_ENDIAN) == b'\xc0\x00\x00\x00\x00\x00\x00\x00'


def test_helpers():
    values = types.LONG.values([1, 2, 3, 4])

    assert isinstance(values, ValueSet)
    assert values.tiff_type is types.LONG
    assert list(values) == [1, 2, 3, 4]

    assert list(types.SHORT.single(5)) == [5]
    assert list(types.RATIONAL.single(72, 1)) == [(72, 1)]
    assert list(types.SRATIONAL.values([(1, 2), [-3, 4]])) == [(1, 2), (-3, 4)]

    with pytest.raises(ValidationException):
        types.SHORT.single(1, 2)


@pytest.mark.parametrize('tiff_type,value', [
    (types.BYTE, 256),
    (types.BYTE, -1),
    (types.SBYTE, 128),
    (types.SHORT, 0x10000),
    (types.SSHORT, -0x8001),
    (types.LONG, 0x100000000),
    (types.SLONG, 0x80000000),
    (types.RATIONAL, 1),
    (types.RATIONAL, (1, 2, 3)),
    (types.RATIONAL, (-1, 2)),
    (types.FLOAT, 'kebab'),
    (types.FLOAT, 1e300),
])
def test_out_of_range(tiff_type, value):
    with pytest.raises(ValidationException):
        tiff_type.values([value])


def test_ascii():
    values = types.ASCII.from_str('tiff')

    # the terminator is added
    assert list(values) == [ord('t'), ord('i'), ord('f'), ord('f'), 0]
    assert values.count == 5

    # but only if missing
    assert types.ASCII.values(b'ab\x00').count == 3

    with pytest.raises(ValidationException):
        types.ASCII.from_str('caffè')

    # strings go through the same checks
    assert list(types.ASCII.values('ab')) == [ord('a'), ord('b'), 0]

    with pytest.raises(ValidationException):
        types.ASCII.values('€')

    with pytest.raises(ValidationException):
        types.ASCII.values('caffè')

    with pytest.raises(ValidationException):
        types.ASCII.values(b'\x80')

    with pytest.raises(ValidationException):
        types.ASCII.values(b'')


def test_ifd_type_is_private():
    with pytest.raises(ValidationException):
        types.IFD.single(8)

    with pytest.raises(ValidationException):
        ValueSet(types.IFD, [8])
