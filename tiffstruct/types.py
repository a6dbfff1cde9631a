'''
Representation of the TIFF field data types.

Each type is a descriptor with the 16-bit code that identifies it into the
entry, the number of bytes occupied by a single value and the struct format
used to encode one value. All the types are collected into a registry so that
there is no need of a class for each of them.

Each descriptor offers some helpers to build the values of a field

    SHORT.single(5)
    LONG.values([1, 2, 3, 4])
    RATIONAL.single(72, 1)
    ASCII.from_str('tiffstruct')
'''
import logging
import struct
from typing import Dict, Iterable

from .meta import Endianess
from .exceptions import ValidationException


logger = logging.getLogger(__name__)


class TiffType(object):
    '''A type of data for TIFF fields.'''

    def __init__(self, name: str, id: int, format: str, public=True):
        self.name = name
        self.id = id
        self.format = format
        self.public = public  # IFD is reserved to the layout engine
        self.size = struct.calcsize('<' + format)
        self.arity = len(format)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name}, id={self.id}, size={self.size})>'

    def get_format(self, endianess: Endianess) -> str:
        return '%s%s' % (endianess.prefix, self.format)

    def check(self, value):
        '''Raise ValueError if the value cannot be represented by this type.'''
        items = value if self.arity > 1 else (value,)

        if self.arity > 1 and (not isinstance(value, (tuple, list)) or len(value) != self.arity):
            raise ValueError(f'{self.name} needs {self.arity} components, got {value!r}')

        try:
            struct.pack(self.get_format(Endianess.LITTLE_ENDIAN), *items)
        except (struct.error, OverflowError, TypeError) as e:
            raise ValueError(f'{value!r} is not a valid {self.name}: {e}') from e

    def encode(self, value, endianess: Endianess) -> bytes:
        items = value if self.arity > 1 else (value,)
        return struct.pack(self.get_format(endianess), *items)

    def values(self, values: Iterable):
        '''Constructs a ValueSet of this type from a sequence.'''
        from .values import ValueSet

        return ValueSet(self, list(values))

    def single(self, *value):
        '''Constructs a ValueSet consisting of a single value.

        Types with more than one component (the rationals) take them
        as separate arguments: RATIONAL.single(72, 1).'''
        from .values import ValueSet

        if self.arity > 1:
            return ValueSet(self, [tuple(value)])

        if len(value) != 1:
            raise ValidationException(chain=[self.name], message=f'single() takes exactly one value, {len(value)} given')

        return ValueSet(self, [value[0]])


class AsciiType(TiffType):
    '''8-bit byte that contains a 7-bit ASCII code.

    The last byte of a field of ASCIIs must be NUL: it's added
    when missing.'''

    def check(self, value):
        super().check(value)
        if value >= 128:
            raise ValueError(f'{value} is not a 7-bit ASCII code')

    def values(self, values: Iterable):
        if isinstance(values, str):
            return self.from_str(values)

        values = list(values)

        if values and values[-1] != 0:
            values.append(0)

        return super().values(values)

    def from_str(self, s: str):
        for c in s:
            if ord(c) >= 128:
                raise ValidationException(chain=[self.name], message=f'string contains non-ASCII character {c!r}')

        return self.values(s.encode('ascii'))


BYTE      = TiffType('BYTE', 1, 'B')
ASCII     = AsciiType('ASCII', 2, 'B')
SHORT     = TiffType('SHORT', 3, 'H')
LONG      = TiffType('LONG', 4, 'I')
RATIONAL  = TiffType('RATIONAL', 5, 'II')
SBYTE     = TiffType('SBYTE', 6, 'b')
UNDEFINED = TiffType('UNDEFINED', 7, 'B')
SSHORT    = TiffType('SSHORT', 8, 'h')
SLONG     = TiffType('SLONG', 9, 'i')
SRATIONAL = TiffType('SRATIONAL', 10, 'ii')
FLOAT     = TiffType('FLOAT', 11, 'f')
DOUBLE    = TiffType('DOUBLE', 12, 'd')
# 32-bit unsigned integer used exclusively to point to IFDs
IFD       = TiffType('IFD', 13, 'I', public=False)


TIFF_TYPES: Dict[int, TiffType] = {
    _.id: _ for _ in (
        BYTE, ASCII, SHORT, LONG, RATIONAL, SBYTE, UNDEFINED,
        SSHORT, SLONG, SRATIONAL, FLOAT, DOUBLE, IFD,
    )
}


def get_type(id: int) -> TiffType:
    try:
        return TIFF_TYPES[id]
    except KeyError:
        raise ValidationException(chain=[], message=f'unknown TIFF type 0x{id:04x}') from None
