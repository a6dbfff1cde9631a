'''
Build baseline TIFF documents from Pillow images.

Only uncompressed, chunky images are produced: bilevel ('1'), grayscale
('L'), palette ('P', with 1, 2, 4 or 8 bits per index), 'RGB' and 'RGBA'.
Each image becomes a directory, the pixels are split into strips stored
as data blocks and the reduced resolution versions (if requested) are
attached as children via the SubIFDs field.
'''
import logging
import math
from typing import Iterator, List, Sequence, Tuple

from bitstring import Bits
from PIL import Image

from . import types
from .core import TiffFile
from .ifd import Directory
from .meta import Endianess
from .enum import (
    TiffTag,
    Compression,
    PhotometricInterpretation,
    PlanarConfiguration,
    ResolutionUnit,
    ExtraSamples,
    NewSubfileType,
)
from .exceptions import ValidationException


logger = logging.getLogger(__name__)

# the recommended size of a strip
STRIP_SIZE = 8 * 1024

# mode -> (photometric, bits per sample)
MODES = {
    '1':    (PhotometricInterpretation.BLACK_IS_ZERO, (1,)),
    'L':    (PhotometricInterpretation.BLACK_IS_ZERO, (8,)),
    'P':    (PhotometricInterpretation.PALETTE, (8,)),
    'RGB':  (PhotometricInterpretation.RGB, (8, 8, 8)),
    'RGBA': (PhotometricInterpretation.RGB, (8, 8, 8, 8)),
}


def iter_rows(data: bytes, row_size: int) -> Iterator[bytes]:
    for idx in range(0, len(data), row_size):
        yield data[idx:idx + row_size]


def pack_indexes(indexes: Sequence[int], depth: int) -> bytes:
    '''Packs the palette indexes of a row using depth bits for each of them,
    the row is padded to a byte boundary.'''
    return Bits().join(Bits(uint=_, length=depth) for _ in indexes).tobytes()


def get_pixel_data(image: Image.Image, depth: int) -> Tuple[bytes, int]:
    '''Returns the pixel data and the number of bytes of each row.'''
    width, _ = image.size

    if image.mode != 'P' or depth == 8:
        row_size = math.ceil(width * sum(MODES[image.mode][1]) / 8)
        return image.tobytes(), row_size

    data = image.tobytes()
    if max(data) >= (1 << depth):
        raise ValidationException(chain=['P'], message=f'the palette indexes don\'t fit into {depth} bits')

    rows = [pack_indexes(row, depth) for row in iter_rows(data, width)]

    return b''.join(rows), math.ceil(width * depth / 8)


def get_color_map(image: Image.Image, depth: int) -> List[int]:
    '''The color map has all the red values first, then the green and
    then the blue, scaled to 16 bits.'''
    palette = image.getpalette() or []
    n_colors = 1 << depth

    palette = (palette + [0] * (3 * n_colors))[:3 * n_colors]

    return [
        palette[3 * idx + channel] * 0x101
        for channel in range(3)
        for idx in range(n_colors)
    ]


def split_strips(data: bytes, row_size: int, rows_per_strip: int) -> List[bytes]:
    strip_size = row_size * rows_per_strip
    return [data[idx:idx + strip_size] for idx in range(0, len(data), strip_size)]


def from_image(image: Image.Image, depth=8, rows_per_strip=None, resolution=(72, 1),
               software=None, subfile_type=NewSubfileType.FULL_RESOLUTION, thumbnails=()) -> Directory:
    '''Returns a directory describing the image.

    The depth is used only for palette images. The thumbnails are the
    sizes of the reduced resolution images to attach.'''
    if image.mode not in MODES:
        raise ValidationException(chain=[image.mode], message='mode not supported')

    if depth not in (1, 2, 4, 8):
        raise ValidationException(chain=[image.mode], message=f'{depth} bits per index are not supported')

    width, height = image.size
    if width == 0 or height == 0:
        raise ValidationException(chain=[image.mode], message='the image is empty')

    photometric, bits = MODES[image.mode]
    if image.mode == 'P':
        bits = (depth,)

    data, row_size = get_pixel_data(image, depth)

    if rows_per_strip is None:
        rows_per_strip = max(1, STRIP_SIZE // row_size)
    rows_per_strip = min(rows_per_strip, height)

    strips = split_strips(data, row_size, rows_per_strip)

    logger.debug('%s image %dx%d in %d strips of %d rows' % (
        image.mode, width, height, len(strips), rows_per_strip))

    ifd = Directory(name=image.mode)
    ifd.add_field(TiffTag.NewSubfileType, types.LONG.single(subfile_type))
    ifd.add_field(TiffTag.ImageWidth, types.LONG.single(width))
    ifd.add_field(TiffTag.ImageLength, types.LONG.single(height))
    ifd.add_field(TiffTag.BitsPerSample, types.SHORT.values(bits))
    ifd.add_field(TiffTag.Compression, types.SHORT.single(Compression.NONE))
    ifd.add_field(TiffTag.PhotometricInterpretation, types.SHORT.single(photometric))
    strip_offsets = ifd.add_blocks(TiffTag.StripOffsets, strips)
    ifd.add_field(TiffTag.SamplesPerPixel, types.SHORT.single(len(bits)))
    ifd.add_field(TiffTag.RowsPerStrip, types.LONG.single(rows_per_strip))
    ifd.add_field(TiffTag.StripByteCounts, types.LONG.values(strip_offsets.sizes))
    ifd.add_field(TiffTag.XResolution, types.RATIONAL.single(*resolution))
    ifd.add_field(TiffTag.YResolution, types.RATIONAL.single(*resolution))
    ifd.add_field(TiffTag.PlanarConfiguration, types.SHORT.single(PlanarConfiguration.CHUNKY))
    ifd.add_field(TiffTag.ResolutionUnit, types.SHORT.single(ResolutionUnit.INCH))

    if software:
        ifd.add_field(TiffTag.Software, types.ASCII.from_str(software))

    if image.mode == 'P':
        ifd.add_field(TiffTag.ColorMap, types.SHORT.values(get_color_map(image, depth)))

    if image.mode == 'RGBA':
        ifd.add_field(TiffTag.ExtraSamples, types.SHORT.single(ExtraSamples.UNASSOCIATED_ALPHA))

    for size in thumbnails:
        thumbnail = image.copy()
        thumbnail.thumbnail(size)
        ifd.add_child(TiffTag.SubIFDs, from_image(
            thumbnail,
            depth=depth,
            resolution=resolution,
            subfile_type=NewSubfileType.REDUCED,
        ))

    return ifd


def from_images(images: Sequence[Image.Image], **kwargs) -> List[Directory]:
    '''One directory per page, already chained.'''
    if len(images) == 0:
        raise ValidationException(chain=[], message='no image to encode')

    subfile_type = NewSubfileType.PAGE if len(images) > 1 else NewSubfileType.FULL_RESOLUTION
    ifds = [from_image(_, subfile_type=subfile_type, **kwargs) for _ in images]
    Directory.chain(*ifds)

    return ifds


def save(images, obj, endianess=Endianess.LITTLE_ENDIAN, word_align=True, **kwargs) -> int:
    '''Writes one or more images as a TIFF file and returns the number of bytes written.'''
    if isinstance(images, Image.Image):
        images = [images]

    ifds = from_images(images, **kwargs)

    return TiffFile(ifds[0], endianess=endianess, word_align=word_align).write_to(obj)
