import io
import logging
import struct

from .meta import Endianess
from .exceptions import StreamException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to
    uniform their properties when writing: the data is only appended,
    the position is tracked by counting the bytes written so the
    destination doesn't need to be seekable.

    The endianess is chosen once and it's used by all the write_*()
    methods.'''
    def __init__(self, obj=None, endianess=Endianess.LITTLE_ENDIAN):
        '''Here we normalize the object in order to be accessed as a writable file object'''
        self._type = type(obj)
        self.endianess = endianess
        self.obj = obj
        self._position = 0
        self._owned = False

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_writable)

        init_method()

    def __repr__(self):
        return '<%s(%s, position=%d)>' % (
            self.__class__.__name__,
            self._type.__name__,
            self._position,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def init_NoneType(self):
        '''Nothing passed, we write in memory'''
        self.obj = io.BytesIO()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\' for writing' % self.obj)
        try:
            self.obj = open(self.obj, 'wb')
        except OSError as e:
            raise StreamException(chain=[str(self.obj)], message=str(e)) from e
        self._owned = True

    def init_bytearray(self):
        '''Raw bytes grow in place: keep the caller's buffer'''
        self.obj = _BytearrayWriter(self.obj)

    def init_writable(self):
        if not hasattr(self.obj, 'write'):
            raise StreamException(
                chain=[self._type.__name__],
                message='wrong kind of object to write into')

    @property
    def position(self) -> int:
        return self._position

    def tell(self) -> int:
        return self._position

    def close(self):
        if self._owned:
            self.obj.close()
            self._owned = False

    def getvalue(self) -> bytes:
        '''Returns what has been written, only for in-memory destinations.'''
        if not hasattr(self.obj, 'getvalue'):
            raise AttributeError(f'{self._type.__name__} doesn\'t keep the data in memory')

        return bytes(self.obj.getvalue())

    def write_bytes(self, data: bytes) -> int:
        try:
            written = self.obj.write(data)
        except OSError as e:
            raise StreamException(chain=[f'0x{self._position:08x}'], message=str(e)) from e

        # some file-like objects return None, we trust them in that case
        if written is not None and written != len(data):
            raise StreamException(
                chain=[f'0x{self._position:08x}'],
                message=f'short write ({written} of {len(data)} bytes)')

        self._position += len(data)

        return len(data)

    def _write_struct(self, fmt, value) -> int:
        try:
            raw = struct.pack(self.endianess.prefix + fmt, value)
        except (struct.error, OverflowError) as e:
            raise ValueError(f'{value!r} cannot be encoded as \'{fmt}\': {e}') from e

        return self.write_bytes(raw)

    def write_u8(self, value: int) -> int:
        return self._write_struct('B', value)

    def write_i8(self, value: int) -> int:
        return self._write_struct('b', value)

    def write_u16(self, value: int) -> int:
        return self._write_struct('H', value)

    def write_i16(self, value: int) -> int:
        return self._write_struct('h', value)

    def write_u32(self, value: int) -> int:
        return self._write_struct('I', value)

    def write_i32(self, value: int) -> int:
        return self._write_struct('i', value)

    def write_f32(self, value: float) -> int:
        return self._write_struct('f', value)

    def write_f64(self, value: float) -> int:
        return self._write_struct('d', value)


class _BytearrayWriter(object):
    '''Appends to a bytearray owned by somebody else.'''

    def __init__(self, buffer: bytearray):
        self.buffer = buffer

    def write(self, data) -> int:
        self.buffer.extend(data)
        return len(data)

    def getvalue(self) -> bytearray:
        return self.buffer

    def close(self):
        pass
