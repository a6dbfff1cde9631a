"""
Core module: the layout engine and the document.

The directories reference each other (and their values) by absolute offset
and the destination is not required to be seekable, so nothing can be
written before knowing where everything goes. The layout happens in three
phases, over the whole document and never interleaved

 1. measure(): computes the size of each block (directories, values that
    don't fit into their entry, tables of offsets and data blocks), bottom-up.
 2. relayout(): assigns to each block its absolute offset walking the
    document in a fixed order.
 3. pack(): walks the document in the same order and writes the blocks,
    substituting the offsets assigned before.

The order is: a directory, then the blocks of its entries (ascending tag),
then its child directories (ascending tag of the pointing entry) each one
with its own blocks and children, then the next directory of the chain.
"""
import logging
from typing import Dict, Iterator, List, Union

from .ifd import Directory
from .meta import Endianess
from .streams import Stream
from .properties import LayoutPhase, align
from .exceptions import (
    ValidationException,
    PhaseException,
    StreamException,
    UnrecoverableException,
)


TIFF_MAGIC = 42
HEADER_SIZE = 8
MAX_OFFSET = 0xffffffff


class LayoutEngine(object):
    '''Turns a chain of directories into a linear sequence of bytes.

    Each block is identified by its instance: the same instance must
    appear only once into the document.'''

    def __init__(self, root: Directory, base=HEADER_SIZE, word_align=True):
        self.logger = logging.getLogger(__name__)
        self.root = root
        self.base = base
        self.word_align = word_align
        self.phase = LayoutPhase.BUILT
        self.sizes: Dict[object, int] = {}
        self.subtree_sizes: Dict[Directory, int] = {}
        self.offsets: Dict[object, int] = {}
        self.end = None

    def __repr__(self):
        return f'<{self.__class__.__name__}(phase={self.phase.name}, base={self.base})>'

    def _enter(self, phase: LayoutPhase):
        if not phase.follows(self.phase):
            raise PhaseException(
                chain=[repr(self)],
                message=f'cannot move from {self.phase.name} to {phase.name}')

        self.phase = phase

    def directories(self) -> Iterator[Directory]:
        for block in self.iter_blocks():
            if isinstance(block, Directory):
                yield block

    def iter_blocks(self, directory=None) -> Iterator:
        '''Yields all the blocks of the document in the order they are stored.

        Both relayout() and pack() use this, so they can't disagree.'''
        directory = self.root if directory is None else directory

        while directory is not None:
            yield directory

            entries = directory.get_entries()
            for entry in entries:
                yield from entry.blocks()

            for child in directory.children():
                yield from self.iter_blocks(child)

            directory = directory.next

    def _measure_chain(self, directory: Directory, chain: List[str]) -> int:
        total = 0
        idx = 0

        while directory is not None:
            where = chain + [f'ifd[{idx}]']

            if directory in self.sizes:
                raise ValidationException(chain=where, message=f'{directory!r} is reachable more than once')

            if directory._phase != LayoutPhase.BUILT:
                raise PhaseException(chain=where, message=f'{directory!r} already belongs to a document')

            size = align(directory.size, self.word_align)
            self.sizes[directory] = size

            subtree = size
            for entry in directory.get_entries():
                for block in entry.blocks():
                    if block in self.sizes:
                        raise ValidationException(
                            chain=where + [f'tag {entry.tag}'],
                            message=f'{block!r} is used more than once')

                    self.sizes[block] = align(block.size, self.word_align)
                    subtree += self.sizes[block]

            for entry in directory.get_entries():
                for n, child in enumerate(entry.children()):
                    subtree += self._measure_chain(child, where + [f'tag {entry.tag}', f'[{n}]'])

            self.subtree_sizes[directory] = subtree
            self.logger.debug('measured %r: %d bytes (%d with its subtree)' % (directory, size, subtree))

            total += subtree
            directory = directory.next
            idx += 1

        return total

    def measure(self) -> int:
        '''Phase 1: computes the size of every block, no I/O is involved.

        If the document is not valid nothing is changed.'''
        if self.phase != LayoutPhase.BUILT:
            raise PhaseException(chain=[repr(self)], message='the document has already been measured')

        try:
            total = self._measure_chain(self.root, [])
        except (ValidationException, PhaseException):
            self.sizes.clear()
            self.subtree_sizes.clear()
            raise

        if self.base + total > MAX_OFFSET:
            self.sizes.clear()
            self.subtree_sizes.clear()
            raise ValidationException(chain=[], message=f'document too large ({total} bytes)')

        self._enter(LayoutPhase.MEASURED)

        # from now on the engine owns the directories
        for directory in self.subtree_sizes:
            directory._phase = LayoutPhase.MEASURED

        self.logger.debug('measured %d blocks, %d bytes' % (len(self.sizes), total))

        return total

    def relayout(self) -> int:
        '''Phase 2: assigns an absolute offset to every block, no I/O is involved.'''
        self._enter(LayoutPhase.ASSIGNED)

        cursor = self.base
        for block in self.iter_blocks():
            self.offsets[block] = cursor
            self.logger.debug('block %r at offset 0x%08x' % (block, cursor))
            cursor += self.sizes[block]

        for directory in self.subtree_sizes:
            directory._phase = LayoutPhase.ASSIGNED

        self.end = cursor

        return cursor

    def reset(self):
        '''Gives the directories back, possible only until nothing has been written.'''
        if self.phase == LayoutPhase.EMITTED:
            raise PhaseException(chain=[repr(self)], message='the document has already been written')

        for directory in self.subtree_sizes:
            directory._phase = LayoutPhase.BUILT

        self.sizes.clear()
        self.subtree_sizes.clear()
        self.offsets.clear()
        self.end = None
        self.phase = LayoutPhase.BUILT

    def offset_of(self, block) -> int:
        try:
            return self.offsets[block]
        except KeyError:
            raise UnrecoverableException(chain=[repr(block)], message='no offset has been assigned') from None

    def pack(self, stream: Stream) -> int:
        '''Phase 3: writes all the blocks in a single forward pass.

        If the stream fails the document is left consumed.'''
        self._enter(LayoutPhase.EMITTED)

        for directory in self.subtree_sizes:
            directory._phase = LayoutPhase.EMITTED

        if stream.position != self.base:
            raise UnrecoverableException(
                chain=[repr(stream)],
                message=f'stream at 0x{stream.position:08x} but the layout starts at 0x{self.base:08x}')

        for block in self.iter_blocks():
            offset = self.offsets[block]
            if stream.position != offset:
                raise UnrecoverableException(
                    chain=[repr(block)],
                    message=f'written at 0x{stream.position:08x} but assigned to 0x{offset:08x}')

            self.logger.debug('packing %r at offset 0x%08x' % (block, offset))
            block.pack(stream, self)

            written = stream.position - offset
            if written != block.size:
                raise UnrecoverableException(
                    chain=[repr(block)],
                    message=f'{written} bytes written but {block.size} were measured')

            padding = self.sizes[block] - written
            if padding:
                stream.write_bytes(b'\x00' * padding)

        if stream.position != self.end:
            raise UnrecoverableException(
                chain=[repr(stream)],
                message=f'stream ended at 0x{stream.position:08x} instead of 0x{self.end:08x}')

        return stream.position

    def run(self, stream: Stream) -> int:
        self.measure()
        self.relayout()
        return self.pack(stream)


class TiffFile(object):
    '''The whole document: the header and the chain of directories.

    It can be written only once

        ifd = Directory()
        ifd.add_field(256, SHORT.single(100))
        ...
        TiffFile(ifd).write_to('image.tif')
    '''

    def __init__(self, ifds: Union[Directory, List[Directory]], endianess=Endianess.LITTLE_ENDIAN, word_align=True):
        self.logger = logging.getLogger(__name__)

        if isinstance(ifds, (list, tuple)):
            if len(ifds) == 0:
                raise ValidationException(chain=['TiffFile'], message='a document needs at least one directory')
            ifds = Directory.chain(*ifds)

        if not isinstance(ifds, Directory):
            raise ValidationException(chain=['TiffFile'], message=f'{ifds!r} is not a Directory')

        self.ifds = ifds
        self.endianess = endianess
        self.engine = LayoutEngine(ifds, base=HEADER_SIZE, word_align=word_align)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.endianess.name}, phase={self.phase.name})>'

    @property
    def phase(self) -> LayoutPhase:
        return self.engine.phase

    @property
    def layout(self) -> Dict[object, tuple]:
        '''(offset, size) for each block, available after the offsets are assigned.'''
        return {_: (self.engine.offsets[_], self.engine.sizes[_]) for _ in self.engine.offsets}

    def pack_header(self, stream: Stream):
        stream.write_bytes(self.endianess.marker)
        stream.write_u16(TIFF_MAGIC)
        stream.write_u32(HEADER_SIZE)

    def write_to(self, obj) -> int:
        '''Writes the document into a path, a bytearray or a file-like object.

        Returns the number of bytes written.'''
        if self.phase != LayoutPhase.BUILT:
            raise PhaseException(chain=[repr(self)], message='the document has already been written')

        # validate before touching the destination
        self.engine.measure()
        self.engine.relayout()

        try:
            stream = Stream(obj, endianess=self.endianess)
        except StreamException:
            # nothing has been written, the document can be used again
            self.engine.reset()
            raise

        with stream:
            self.logger.info('writing %d bytes into %r' % (self.engine.end, stream))
            self.pack_header(stream)
            return self.engine.pack(stream)

    def pack(self) -> bytes:
        '''Returns the document encoded.'''
        data = bytearray()
        self.write_to(data)

        return bytes(data)
