#!/usr/bin/env python3
'''
Converts one or more images (anything Pillow can open) into an uncompressed
TIFF file, one page for each image, and prints where each block ended up.

 $ convert -size 5x5 xc:red -size 5x5 xc:green -append red_green.png
 $ img2tiff.py red_green.tif red_green.png

Set BIG_ENDIAN in the environment to write a big-endian file.
'''
import logging
import os
import sys

from PIL import Image

from tiffstruct.core import TiffFile
from tiffstruct.image import from_images
from tiffstruct.meta import Endianess
from tiffstruct.exceptions import TiffStructException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} <tiff file path> <image path> [image path...]')
    sys.exit(1)


def dump_layout(tiff):
    print(f'''Layout:
 {"Offset":<12}{"Size":<10}Block''')
    for block, (offset, size) in sorted(tiff.layout.items(), key=lambda _: _[1][0]):
        print(f' 0x{offset:08x}  {size:<8}  {block!r}')


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    output = sys.argv[1]
    images = [Image.open(_) for _ in sys.argv[2:]]
    images = [_ if _.mode in ('1', 'L', 'P', 'RGB', 'RGBA') else _.convert('RGB') for _ in images]

    endianess = Endianess.BIG_ENDIAN if 'BIG_ENDIAN' in os.environ else Endianess.LITTLE_ENDIAN

    try:
        ifds = from_images(images, software='tiffstruct')
        tiff = TiffFile(ifds, endianess=endianess)
        size = tiff.write_to(output)
    except TiffStructException as e:
        logger.error(f'failed to write \'{output}\': {e}')
        sys.exit(1)

    dump_layout(tiff)
    logger.info(f'written {size} bytes into \'{output}\'')
