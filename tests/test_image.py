import io

import pytest
from PIL import Image

from tiffstruct import types
from tiffstruct.core import TiffFile
from tiffstruct.enum import TiffTag, NewSubfileType
from tiffstruct.image import (
    from_image,
    from_images,
    pack_indexes,
    get_color_map,
    save,
)
from tiffstruct.meta import Endianess
from tiffstruct.exceptions import ValidationException


def _palette_image(size, indexes):
    image = Image.frombytes('P', size, bytes(indexes))
    image.putpalette([
        0xff, 0x00, 0x00,
        0x00, 0xff, 0x00,
        0x00, 0x00, 0xff,
        0xff, 0xff, 0xff,
    ])
    return image


def _encode(image, **kwargs):
    buffer = io.BytesIO()
    save(image, buffer, **kwargs)
    return buffer.getvalue()


def test_pack_indexes():
    assert pack_indexes([1, 2, 3], 4) == b'\x12\x30'
    assert pack_indexes([1, 0, 1], 1) == b'\xa0'
    assert pack_indexes([3, 2, 1, 0, 3], 2) == b'\xe4\xc0'


def test_color_map():
    image = _palette_image((2, 2), [0, 1, 2, 3])

    color_map = get_color_map(image, 2)

    assert len(color_map) == 3 * 4
    assert color_map == [
        0xffff, 0x0000, 0x0000, 0xffff,  # red
        0x0000, 0xffff, 0x0000, 0xffff,  # green
        0x0000, 0x0000, 0xffff, 0xffff,  # blue
    ]


def test_directory():
    image = Image.frombytes('RGB', (5, 4), bytes(range(60)))

    ifd = from_image(image, software='tiffstruct')

    assert ifd[TiffTag.ImageWidth].value_set.values == (5,)
    assert ifd[TiffTag.ImageLength].value_set.values == (4,)
    assert ifd[TiffTag.BitsPerSample].value_set.values == (8, 8, 8)
    assert ifd[TiffTag.SamplesPerPixel].value_set.values == (3,)
    assert ifd[TiffTag.StripByteCounts].value_set.values == (60,)
    assert ifd[TiffTag.Software].tiff_type is types.ASCII
    assert ifd[TiffTag.StripOffsets].sizes == [60]


@pytest.mark.parametrize('mode,size', [
    ('L', (10, 7)),
    ('RGB', (5, 4)),
    ('RGBA', (5, 3)),
])
@pytest.mark.parametrize('endianess', [Endianess.LITTLE_ENDIAN, Endianess.BIG_ENDIAN])
def test_roundtrip_pillow(read_tiff, mode, size, endianess):
    n_bytes = size[0] * size[1] * len(mode)
    image = Image.frombytes(mode, size, bytes(_ % 256 for _ in range(n_bytes)))

    result = read_tiff(_encode(image, endianess=endianess))

    assert result.mode == mode
    assert result.size == size
    assert result.tobytes() == image.tobytes()


@pytest.mark.parametrize('word_align', [True, False])
def test_roundtrip_strips(read_tiff, word_align):
    """Odd sized strips, with and without padding."""
    image = Image.frombytes('L', (3, 7), bytes(range(21)))

    ifd = from_image(image, rows_per_strip=3)

    assert ifd[TiffTag.StripOffsets].sizes == [9, 9, 3]
    assert ifd[TiffTag.StripByteCounts].value_set.values == (9, 9, 3)

    data = TiffFile(ifd, word_align=word_align).pack()
    result = read_tiff(data)

    assert result.tobytes() == image.tobytes()


def test_roundtrip_bilevel(read_tiff):
    image = Image.frombytes('1', (10, 3), b'\xff\xc0\x00\x00\xaa\x80')

    result = read_tiff(_encode(image))

    assert result.mode == '1'
    assert result.tobytes() == image.tobytes()


def test_roundtrip_palette(read_tiff):
    image = _palette_image((4, 4), [0, 1, 2, 3] * 4)

    result = read_tiff(_encode(image))

    assert result.mode == 'P'
    assert result.convert('RGB').tobytes() == image.convert('RGB').tobytes()


def test_roundtrip_palette_4_bits(read_tiff):
    image = _palette_image((5, 2), [0, 1, 2, 3, 0, 3, 2, 1, 0, 3])

    ifd = from_image(image, depth=4)

    assert ifd[TiffTag.BitsPerSample].value_set.values == (4,)
    assert ifd[TiffTag.ColorMap].count == 3 * 16
    assert ifd[TiffTag.StripByteCounts].value_set.values == (6,)

    result = read_tiff(TiffFile(ifd).pack())

    assert result.convert('RGB').tobytes() == image.convert('RGB').tobytes()


def test_palette_too_many_colors():
    image = _palette_image((2, 1), [0, 3])

    with pytest.raises(ValidationException):
        from_image(image, depth=1)


def test_multipage(read_tiff):
    first = Image.frombytes('L', (4, 4), bytes(range(16)))
    second = Image.frombytes('RGB', (2, 3), bytes(range(18)))

    ifds = from_images([first, second])

    assert ifds[0].next is ifds[1]
    assert ifds[0][TiffTag.NewSubfileType].value_set.values == (NewSubfileType.PAGE,)

    result = read_tiff(TiffFile(ifds).pack())

    assert result.n_frames == 2
    assert result.tobytes() == first.tobytes()

    result.seek(1)
    result.load()

    assert result.mode == 'RGB'
    assert result.tobytes() == second.tobytes()


def test_thumbnails(read_tiff):
    image = Image.frombytes('L', (16, 16), bytes(range(256)))

    ifd = from_image(image, thumbnails=[(8, 8), (4, 4)])

    children = ifd.children()
    assert len(children) == 2
    assert children[0][TiffTag.ImageWidth].value_set.values == (8,)
    assert children[1][TiffTag.ImageWidth].value_set.values == (4,)
    assert children[0][TiffTag.NewSubfileType].value_set.values == (NewSubfileType.REDUCED,)

    tiff = TiffFile(ifd)
    result = read_tiff(tiff.pack())

    # the children come after the blocks of the main image
    assert tiff.engine.offsets[children[0]] > tiff.engine.offsets[ifd[TiffTag.StripOffsets].targets[0]]
    assert result.size == (16, 16)
    assert result.tobytes() == image.tobytes()


def test_unsupported():
    with pytest.raises(ValidationException):
        from_image(Image.new('CMYK', (2, 2)))

    with pytest.raises(ValidationException):
        from_image(Image.new('L', (2, 2)), depth=3)

    with pytest.raises(ValidationException):
        from_images([])


def test_save_path(tmp_path, read_tiff):
    image = Image.frombytes('L', (2, 2), b'\x00\x40\x80\xff')
    path = tmp_path / 'image.tif'

    size = save(image, str(path))

    assert path.stat().st_size == size
    assert read_tiff(path.read_bytes()).tobytes() == image.tobytes()
