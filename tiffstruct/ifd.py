'''
# Image File Directory

A directory is the main structure of the format: a 2-byte count, the entries
(12 bytes each, sorted by tag) and the 4-byte offset of the next directory
of the chain (zero if it's the last one)

  .------------------------.
  | count                  |  2 bytes
  | entry 1                | 12 bytes
  | ...                    |
  | entry N                | 12 bytes
  | next directory offset  |  4 bytes
  '------------------------'

each entry is made of

  .------------------------.
  | tag                    |  2 bytes
  | type                   |  2 bytes
  | count                  |  4 bytes
  | value or offset        |  4 bytes
  '------------------------'

Three kinds of entry exist: the ones holding values (stored into the entry
itself or, when too large, into a block after the directory), the ones
pointing to other directories (this is how a tree is built) and the ones
pointing to raw data blocks.
'''
import logging
import struct
from typing import Dict, List, Optional

from . import types
from .meta import Endianess
from .properties import LayoutPhase
from .values import (
    INLINE_SIZE,
    StorageMode,
    ValueSet,
    ByteBlock,
    OffsetTable,
    storage_for,
)
from .exceptions import ValidationException, PhaseException


ENTRY_SIZE = 12
MAX_ENTRIES = 0xffff


class Entry(object):
    '''Base class for a tagged field of a directory.'''

    def __init__(self, tag: int, tiff_type: types.TiffType):
        self.logger = logging.getLogger(__name__)
        if not isinstance(tag, int) or not (0 <= tag <= 0xffff):
            raise ValidationException(chain=[f'tag {tag!r}'], message='tag must be a 16-bit unsigned integer')

        self.tag = int(tag)
        self.tiff_type = tiff_type
        self.directory: Optional["Directory"] = None

    def __repr__(self):
        return f'<{self.__class__.__name__}(tag={self.tag}, {self.tiff_type.name}, count={self.count})>'

    @property
    def count(self) -> int:
        raise NotImplementedError()

    @property
    def size(self) -> int:
        '''The record into the directory never grows.'''
        return ENTRY_SIZE

    @property
    def storage(self) -> StorageMode:
        return storage_for(self.tiff_type.size * self.count)

    def attach(self, directory: "Directory"):
        '''Called by the directory once the entry is accepted.'''
        if self.directory is not None:
            raise ValidationException(
                chain=[repr(directory), f'tag {self.tag}'],
                message=f'entry already belongs to {self.directory!r}')

        self.directory = directory

    def blocks(self) -> List:
        '''The blocks to be stored after the directory, in order.'''
        return []

    def children(self) -> List["Directory"]:
        return []

    def payload(self, endianess: Endianess, resolver) -> bytes:
        raise NotImplementedError()

    def pack(self, stream, resolver):
        stream.write_u16(self.tag)
        stream.write_u16(self.tiff_type.id)
        stream.write_u32(self.count)
        stream.write_bytes(self.payload(stream.endianess, resolver))


class ValueEntry(Entry):
    '''Field holding a set of values.'''

    def __init__(self, tag: int, value_set: ValueSet):
        if not isinstance(value_set, ValueSet):
            raise ValidationException(chain=[f'tag {tag}'], message=f'{value_set!r} is not a ValueSet')

        super().__init__(tag, value_set.tiff_type)
        self._check_owner(value_set)

        self.value_set = value_set

    def _check_owner(self, value_set: ValueSet):
        if value_set.owner is not None:
            raise ValidationException(
                chain=[f'tag {self.tag}'],
                message=f'values already used by the field with tag {value_set.owner.tag}')

    def attach(self, directory: "Directory"):
        # the values are taken only when the entry is accepted
        self._check_owner(self.value_set)
        super().attach(directory)
        self.value_set.owner = self

    @property
    def count(self) -> int:
        return self.value_set.count

    def blocks(self) -> List:
        if self.storage == StorageMode.INLINE:
            return []

        return [self.value_set]

    def payload(self, endianess, resolver) -> bytes:
        if self.storage == StorageMode.INLINE:
            return self.value_set.raw(endianess).ljust(INLINE_SIZE, b'\x00')

        return struct.pack(endianess.prefix + 'I', resolver.offset_of(self.value_set))


class _OffsetsEntry(Entry):
    '''Field whose values are the offsets of other elements of the file.

    A single offset fits into the payload, more than one needs an
    OffsetTable stored after the directory.'''

    def __init__(self, tag: int, tiff_type: types.TiffType, targets: List):
        super().__init__(tag, tiff_type)
        self.targets = list(targets)
        self._table = None

    @property
    def count(self) -> int:
        return len(self.targets)

    @property
    def table(self) -> Optional[OffsetTable]:
        if self.storage == StorageMode.INLINE:
            return None

        # the table must be the same instance between layout phases
        if self._table is None:
            self._table = OffsetTable(self.targets)

        return self._table

    def blocks(self) -> List:
        return [self.table] if self.table else []

    def payload(self, endianess, resolver) -> bytes:
        target = self.targets[0] if self.storage == StorageMode.INLINE else self.table
        return struct.pack(endianess.prefix + 'I', resolver.offset_of(target))


class IfdEntry(_OffsetsEntry):
    '''Field pointing to one or more child directories (e.g. SubIFDs).

    Its values are resolved by the layout engine, nobody else is
    supposed to set them.'''

    def __init__(self, tag: int, directories: List["Directory"], tiff_type=types.IFD):
        if tiff_type not in (types.IFD, types.LONG):
            raise ValidationException(chain=[f'tag {tag}'], message=f'a directory cannot be pointed by a {tiff_type.name}')

        for directory in directories:
            if not isinstance(directory, Directory):
                raise ValidationException(chain=[f'tag {tag}'], message=f'{directory!r} is not a Directory')

        if len(directories) == 0:
            raise ValidationException(chain=[f'tag {tag}'], message='a pointer field needs at least one directory')

        super().__init__(tag, tiff_type, directories)

    def append(self, directory: "Directory"):
        if not isinstance(directory, Directory):
            raise ValidationException(chain=[f'tag {self.tag}'], message=f'{directory!r} is not a Directory')

        if self.directory is not None:
            self.directory._check_mutable()

        self.targets.append(directory)

    def children(self) -> List["Directory"]:
        return list(self.targets)


class BlockEntry(_OffsetsEntry):
    '''Field containing the offsets of some raw data blocks (e.g. StripOffsets).

    The blocks are stored after the directory in the order they are given.'''

    def __init__(self, tag: int, blocks: List[ByteBlock]):
        blocks = [_ if isinstance(_, ByteBlock) else ByteBlock(_) for _ in blocks]

        if len(blocks) == 0:
            raise ValidationException(chain=[f'tag {tag}'], message='a data field needs at least one block')

        super().__init__(tag, types.LONG, blocks)

    @property
    def sizes(self) -> List[int]:
        '''Useful for the companion field (e.g. StripByteCounts).'''
        return [_.size for _ in self.targets]

    def blocks(self) -> List:
        return super().blocks() + list(self.targets)


class Directory(object):
    '''Ordered collection of entries with unique tags.

    It can be linked to a sibling via set_next() and can be the father
    of other directories via add_child().'''

    def __init__(self, name=None):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self._entries: Dict[int, Entry] = {}
        self._next: Optional["Directory"] = None
        self._phase = LayoutPhase.BUILT

    def __repr__(self):
        return '<%s(%s%s)>' % (
            self.__class__.__name__,
            f'{self.name}, ' if self.name else '',
            ','.join(str(_.tag) for _ in self.get_entries()),
        )

    def __len__(self):
        return len(self._entries)

    def __contains__(self, tag):
        return int(tag) in self._entries

    def __getitem__(self, tag) -> Entry:
        return self._entries[int(tag)]

    @classmethod
    def chain(cls, *directories: "Directory") -> "Directory":
        '''Links the directories one after the other and returns the first.'''
        if len(directories) == 0:
            raise ValidationException(chain=['chain'], message='at least one directory is needed')

        for idx, directory in enumerate(directories):
            if not isinstance(directory, Directory):
                raise ValidationException(chain=['chain', f'[{idx}]'], message=f'{directory!r} is not a Directory')

        for previous, current in zip(directories, directories[1:]):
            previous.set_next(current)

        return directories[0]

    def _check_mutable(self):
        if self._phase != LayoutPhase.BUILT:
            raise PhaseException(
                chain=[repr(self)],
                message=f'directory cannot be modified in phase {self._phase.name}')

    @property
    def size(self) -> int:
        return 2 + ENTRY_SIZE * len(self._entries) + 4

    @property
    def next(self) -> Optional["Directory"]:
        return self._next

    def set_next(self, directory: Optional["Directory"]):
        self._check_mutable()
        if directory is not None and not isinstance(directory, Directory):
            raise ValidationException(chain=[repr(self)], message=f'{directory!r} is not a Directory')

        self._next = directory

    def get_entries(self) -> List[Entry]:
        '''The entries in the order they are serialized.'''
        return sorted(self._entries.values(), key=lambda _: _.tag)

    def _check_tag(self, tag: int):
        if int(tag) in self._entries:
            raise ValidationException(chain=[repr(self), f'tag {int(tag)}'], message='duplicate tag')

        if len(self._entries) == MAX_ENTRIES:
            raise ValidationException(chain=[repr(self)], message='too many entries')

    def add_entry(self, entry: Entry) -> Entry:
        self._check_mutable()
        self._check_tag(entry.tag)
        entry.attach(self)

        self.logger.debug('adding %r to %r' % (entry, self))
        self._entries[entry.tag] = entry

        return entry

    def add_field(self, tag: int, value_set: ValueSet) -> ValueEntry:
        return self.add_entry(ValueEntry(tag, value_set))

    def add_child(self, tag: int, directory: "Directory", tiff_type=types.IFD) -> IfdEntry:
        '''Makes the directory a child of this one via the field indicated by the tag.

        Adding more children with the same tag makes the field point to
        all of them, in the order they are added.'''
        self._check_mutable()

        entry = self._entries.get(int(tag))

        if entry is None:
            return self.add_entry(IfdEntry(tag, [directory], tiff_type=tiff_type))

        if not isinstance(entry, IfdEntry):
            raise ValidationException(chain=[repr(self), f'tag {tag}'], message='duplicate tag')

        entry.append(directory)

        return entry

    def add_blocks(self, tag: int, blocks: List) -> BlockEntry:
        return self.add_entry(BlockEntry(tag, blocks))

    def children(self) -> List["Directory"]:
        children = []
        for entry in self.get_entries():
            children.extend(entry.children())

        return children

    def pack(self, stream, resolver):
        entries = self.get_entries()

        stream.write_u16(len(entries))
        for entry in entries:
            self.logger.debug('packing %r' % entry)
            entry.pack(stream, resolver)

        stream.write_u32(resolver.offset_of(self._next) if self._next is not None else 0)
