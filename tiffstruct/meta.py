import sys
from enum import Enum, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()
    NETWORK       = auto()
    NATIVE        = auto()

    def resolve(self) -> "Endianess":
        '''Reduce the aliases to one of the two real byte orders.'''
        if self == Endianess.NETWORK:
            return Endianess.BIG_ENDIAN
        if self == Endianess.NATIVE:
            return Endianess.LITTLE_ENDIAN if sys.byteorder == 'little' else Endianess.BIG_ENDIAN

        return self

    @property
    def prefix(self) -> str:
        '''The struct module character for this byte order.'''
        return '<' if self.resolve() == Endianess.LITTLE_ENDIAN else '>'

    @property
    def marker(self) -> bytes:
        '''The two bytes opening a TIFF file written with this byte order.'''
        return b'II' if self.resolve() == Endianess.LITTLE_ENDIAN else b'MM'
