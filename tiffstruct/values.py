'''
The values bound to the fields of a directory.

Every entry of a directory has exactly four bytes for its payload: if the
values fit they are stored there, otherwise they live in a separate block
of the file and the payload contains its offset. The same blocks are what the
layout engine reserves and writes after each directory.

A block is anything with a "size" (the number of bytes it's going to write)
and a "pack(stream, resolver)" method, where the resolver gives back the
offset assigned to any other block.
'''
import logging
from enum import Enum, auto
from typing import List

from .meta import Endianess
from .exceptions import ValidationException


logger = logging.getLogger(__name__)

# the bytes available in an entry for its payload
INLINE_SIZE = 4


class StorageMode(Enum):
    INLINE   = auto()
    OVERFLOW = auto()


def storage_for(size: int) -> StorageMode:
    return StorageMode.INLINE if size <= INLINE_SIZE else StorageMode.OVERFLOW


class ValueSet(object):
    '''Ordered sequence of values of a single TIFF type.

    Empty sets are not allowed, and the values are checked against the
    type when the set is built so that nothing can go wrong while packing.'''

    def __init__(self, tiff_type, values):
        self.logger = logging.getLogger(__name__)
        self.tiff_type = tiff_type
        self.owner = None  # the entry this set is attached to

        if not tiff_type.public:
            raise ValidationException(
                chain=[tiff_type.name],
                message='values of this type are managed by the layout engine and cannot be set directly')

        values = list(values)
        if len(values) == 0:
            raise ValidationException(chain=[tiff_type.name], message='cannot create an empty set of values')

        for idx, value in enumerate(values):
            try:
                tiff_type.check(value)
            except ValueError as e:
                raise ValidationException(chain=[tiff_type.name, f'[{idx}]'], message=str(e)) from e

        self._values = tuple(tuple(_) if isinstance(_, list) else _ for _ in values)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.tiff_type.name}, {list(self._values)!r})>'

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __getitem__(self, item):
        return self._values[item]

    @property
    def values(self):
        return self._values

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def size(self) -> int:
        return self.tiff_type.size * self.count

    total_bytes = size

    @property
    def storage(self) -> StorageMode:
        return storage_for(self.size)

    def raw(self, endianess: Endianess) -> bytes:
        return b''.join(self.tiff_type.encode(_, endianess) for _ in self._values)

    def pack(self, stream, resolver=None):
        for value in self._values:
            stream.write_bytes(self.tiff_type.encode(value, stream.endianess))


class ByteBlock(object):
    '''Raw bytes stored somewhere in the file, e.g. the strips of an image.'''

    def __init__(self, data: bytes):
        if len(data) == 0:
            raise ValidationException(chain=[self.__class__.__name__], message='cannot create an empty block')

        self.data = bytes(data)

    def __repr__(self):
        return f'<{self.__class__.__name__}(size={self.size})>'

    @property
    def size(self) -> int:
        return len(self.data)

    def pack(self, stream, resolver=None):
        stream.write_bytes(self.data)


class OffsetTable(object):
    '''The offsets of other blocks, stored as 32-bit unsigned integers.

    Used when a field points to more things than fit into its payload:
    the values are known only after the offsets have been assigned.'''

    def __init__(self, targets: List):
        self.targets = targets

    def __repr__(self):
        return f'<{self.__class__.__name__}(n={len(self.targets)})>'

    @property
    def size(self) -> int:
        return 4 * len(self.targets)

    def pack(self, stream, resolver):
        for target in self.targets:
            stream.write_u32(resolver.offset_of(target))
