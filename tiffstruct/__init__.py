"""
# tiffstruct: write TIFF files without seeking.

A TIFF file is a header followed by a chain of Image File Directories (IFDs),
each one a sorted list of tagged fields. The values that don't fit into the
four bytes of a field are stored elsewhere and the field contains their
absolute offset; the same happens for the directories pointed by a field
(SubIFDs, EXIF) and for the data blocks (the strips of an image).

The document is built completely in memory

    ifd = Directory()
    ifd.add_field(TiffTag.ImageWidth, LONG.single(640))
    ifd.add_blocks(TiffTag.StripOffsets, strips)
    ifd.add_child(TiffTag.SubIFDs, thumbnail_ifd)

and then handed to TiffFile that writes it in one go. Since the destination
doesn't need to be seekable, the offsets are computed before writing a
single byte: the layout goes through the following phases

 1. BUILT: the directories can be modified
 2. MEASURED: the size of each block is known
 3. ASSIGNED: the offset of each block is known
 4. EMITTED: the bytes have been written, the document cannot be used anymore

"""
from .meta import Endianess
from .types import (
    BYTE,
    ASCII,
    SHORT,
    LONG,
    RATIONAL,
    SBYTE,
    UNDEFINED,
    SSHORT,
    SLONG,
    SRATIONAL,
    FLOAT,
    DOUBLE,
    IFD,
)
from .values import ValueSet, ByteBlock, StorageMode
from .ifd import Directory, ValueEntry, IfdEntry, BlockEntry
from .core import LayoutEngine, TiffFile
from .enum import TiffTag
from .exceptions import (
    TiffStructException,
    ValidationException,
    StreamException,
    PhaseException,
    UnrecoverableException,
)
