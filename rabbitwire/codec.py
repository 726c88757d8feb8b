"""Big-endian primitives for reading and writing AMQP wire data."""

from __future__ import annotations

import struct

from rabbitwire.errors import BadAmqpDataError, InvalidParameterError, TableTooBigError

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_U64 = struct.Struct(">Q")


class Reader:
    """Sequential reader over a byte buffer; running past the end is an error."""

    def __init__(self, data: bytes | bytearray | memoryview, offset: int = 0) -> None:
        self._data = memoryview(data).cast("B")
        self.offset = offset

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return max(0, len(self._data) - self.offset)

    def _take(self, size: int) -> memoryview:
        start = self.offset
        end = start + size
        if start < 0 or end > len(self._data):
            raise BadAmqpDataError(
                f"need {size} bytes at offset {start}, buffer holds {len(self._data)}"
            )
        self.offset = end
        return self._data[start:end]

    def _unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self._take(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_bytes(self, length: int) -> bytes:
        if length < 0:
            raise InvalidParameterError(f"negative length {length}")
        return bytes(self._take(length))


class Writer:
    """Growing output buffer with an optional size limit."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def offset(self) -> int:
        """Number of bytes written so far."""
        return len(self._buf)

    def _check_room(self, end: int) -> None:
        if self.limit is not None and end > self.limit:
            raise TableTooBigError(f"{end} bytes exceed the limit of {self.limit}")

    def _pack(self, fmt: struct.Struct, value: int) -> None:
        try:
            packed = fmt.pack(value)
        except struct.error as exc:
            raise InvalidParameterError(f"value {value!r} out of range") from exc
        self._check_room(len(self._buf) + len(packed))
        self._buf += packed

    def write_u8(self, value: int) -> None:
        self._pack(_U8, value)

    def write_u16(self, value: int) -> None:
        self._pack(_U16, value)

    def write_u32(self, value: int) -> None:
        self._pack(_U32, value)

    def write_u64(self, value: int) -> None:
        self._pack(_U64, value)

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        if not data:
            return
        self._check_room(len(self._buf) + len(data))
        self._buf += data

    def patch_u32(self, position: int, value: int) -> None:
        """Overwrite four already written bytes at position."""
        try:
            packed = _U32.pack(value)
        except struct.error as exc:
            raise InvalidParameterError(f"value {value!r} out of range") from exc
        self._check_room(position + 4)
        if position < 0 or position + 4 > len(self._buf):
            raise InvalidParameterError(f"position {position} is outside written data")
        self._buf[position : position + 4] = packed

    def getvalue(self) -> bytes:
        return bytes(self._buf)