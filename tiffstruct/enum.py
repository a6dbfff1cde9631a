'''
This module contains the constant values used throughout the TIFF 6.0
specification <https://www.itu.int/itudoc/itu-t/com16/tiff-fx/docs/tiff6.pdf>.

Note: the tags are IntEnum so that they can be used directly where a tag
is expected.
'''
from enum import IntEnum


class TiffTag(IntEnum):
    # baseline
    NewSubfileType            = 254
    SubfileType               = 255
    ImageWidth                = 256
    ImageLength               = 257
    BitsPerSample             = 258
    Compression               = 259
    PhotometricInterpretation = 262
    Threshholding             = 263
    CellWidth                 = 264
    CellLength                = 265
    FillOrder                 = 266
    DocumentName              = 269
    ImageDescription          = 270
    Make                      = 271
    Model                     = 272
    StripOffsets              = 273
    Orientation               = 274
    SamplesPerPixel           = 277
    RowsPerStrip              = 278
    StripByteCounts           = 279
    MinSampleValue            = 280
    MaxSampleValue            = 281
    XResolution               = 282
    YResolution               = 283
    PlanarConfiguration       = 284
    PageName                  = 285
    XPosition                 = 286
    YPosition                 = 287
    FreeOffsets               = 288
    FreeByteCounts            = 289
    GrayResponseUnit          = 290
    GrayResponseCurve         = 291
    ResolutionUnit            = 296
    PageNumber                = 297
    Software                  = 305
    DateTime                  = 306
    Artist                    = 315
    HostComputer              = 316
    Predictor                 = 317
    ColorMap                  = 320
    TileWidth                 = 322
    TileLength                = 323
    TileOffsets               = 324
    TileByteCounts            = 325
    SubIFDs                   = 330
    ExtraSamples              = 338
    SampleFormat              = 339
    Copyright                 = 33432
    # private tags pointing to other directories
    ExifIFD                   = 34665
    GPSIFD                    = 34853


class Compression(IntEnum):
    NONE     = 1
    CCITT_1D = 2
    GROUP_3  = 3
    GROUP_4  = 4
    LZW      = 5
    JPEG     = 6
    PACKBITS = 32773


class PhotometricInterpretation(IntEnum):
    WHITE_IS_ZERO = 0
    BLACK_IS_ZERO = 1
    RGB           = 2
    PALETTE       = 3
    MASK          = 4
    CMYK          = 5
    YCBCR         = 6


class PlanarConfiguration(IntEnum):
    CHUNKY = 1
    PLANAR = 2


class ResolutionUnit(IntEnum):
    NONE       = 1
    INCH       = 2
    CENTIMETER = 3


class ExtraSamples(IntEnum):
    UNSPECIFIED      = 0
    ASSOCIATED_ALPHA = 1
    UNASSOCIATED_ALPHA = 2


class NewSubfileType(IntEnum):
    FULL_RESOLUTION = 0
    REDUCED         = 1
    PAGE            = 2
    MASK            = 4


class Orientation(IntEnum):
    TOP_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_RIGHT = 3
    BOTTOM_LEFT = 4
