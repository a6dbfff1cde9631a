import io
import struct

import pytest
from PIL import Image

from tiffstruct.meta import Endianess


@pytest.fixture
def read_tiff():
    '''Opens the bytes of a TIFF file with Pillow.'''
    def _read(data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image

    return _read


@pytest.fixture
def unpack():
    '''Decodes a single value from the bytes of a document.'''
    def _unpack(data: bytes, offset: int, fmt: str, endianess=Endianess.LITTLE_ENDIAN):
        return struct.unpack_from(endianess.prefix + fmt, data, offset)[0]

    return _unpack
