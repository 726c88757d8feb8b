"""AMQP field tables: the typed values, their wire encoding and helpers."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Any, Union

from rabbitwire.codec import Reader, Writer
from rabbitwire.errors import BadAmqpDataError, InvalidParameterError

_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")


class FieldKind(enum.Enum):
    """Type tag of a field value, as it appears on the wire."""

    BOOLEAN = ord("t")
    I8 = ord("b")
    U8 = ord("B")
    I16 = ord("s")
    U16 = ord("u")
    I32 = ord("I")
    U32 = ord("i")
    I64 = ord("l")
    U64 = ord("L")
    F32 = ord("f")
    F64 = ord("d")
    DECIMAL = ord("D")
    UTF8 = ord("S")
    ARRAY = ord("A")
    TIMESTAMP = ord("T")
    TABLE = ord("F")
    VOID = ord("V")
    BYTES = ord("x")

    @property
    def code(self) -> str:
        """The single-character tag."""
        return chr(self.value)


@dataclass(frozen=True)
class DecimalValue:
    """A decimal number: ``value`` scaled down by ``decimals`` digits."""

    decimals: int
    value: int


@dataclass
class FieldValue:
    """A typed value.

    The Python type of ``value`` depends on ``kind``: bool, int, float,
    DecimalValue, bytes (UTF8 and BYTES), list of FieldValue (ARRAY),
    list of TableEntry (TABLE) or None (VOID).
    """

    kind: FieldKind
    value: Any = None


@dataclass
class TableEntry:
    """A named value within a table."""

    key: bytes
    value: FieldValue = field(default_factory=lambda: FieldValue(FieldKind.VOID))


_INT_WIDTHS = {
    FieldKind.I8: (8, True),
    FieldKind.U8: (8, False),
    FieldKind.I16: (16, True),
    FieldKind.U16: (16, False),
    FieldKind.I32: (32, True),
    FieldKind.U32: (32, False),
    FieldKind.I64: (64, True),
    FieldKind.U64: (64, False),
    FieldKind.TIMESTAMP: (64, False),
}


def _as_bytes(text: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


def _read_uint(reader: Reader, bits: int) -> int:
    return {
        8: reader.read_u8,
        16: reader.read_u16,
        32: reader.read_u32,
        64: reader.read_u64,
    }[bits]()


def _write_uint(writer: Writer, bits: int, value: int) -> None:
    {
        8: writer.write_u8,
        16: writer.write_u16,
        32: writer.write_u32,
        64: writer.write_u64,
    }[bits](value)


def _to_signed(value: int, bits: int) -> int:
    if value >= 1 << (bits - 1):
        return value - (1 << bits)
    return value


def _to_unsigned(value: int, bits: int) -> int:
    low = -(1 << (bits - 1))
    high = 1 << (bits - 1)
    if not low <= value < high:
        raise InvalidParameterError(f"value {value} does not fit in a signed {bits}-bit field")
    return value & ((1 << bits) - 1)


# ---------------------------------------------------------------------------
# Decoding


def _decode_field_value(reader: Reader) -> FieldValue:
    tag = reader.read_u8()
    try:
        kind = FieldKind(tag)
    except ValueError:
        raise BadAmqpDataError(f"unknown field kind {tag:#04x}") from None

    if kind is FieldKind.BOOLEAN:
        return FieldValue(kind, reader.read_u8() != 0)
    if kind in _INT_WIDTHS:
        bits, signed = _INT_WIDTHS[kind]
        raw = _read_uint(reader, bits)
        return FieldValue(kind, _to_signed(raw, bits) if signed else raw)
    if kind is FieldKind.F32:
        return FieldValue(kind, _F32.unpack(reader.read_bytes(4))[0])
    if kind is FieldKind.F64:
        return FieldValue(kind, _F64.unpack(reader.read_bytes(8))[0])
    if kind is FieldKind.DECIMAL:
        decimals = reader.read_u8()
        return FieldValue(kind, DecimalValue(decimals, reader.read_u32()))
    if kind in (FieldKind.UTF8, FieldKind.BYTES):
        length = reader.read_u32()
        return FieldValue(kind, reader.read_bytes(length))
    if kind is FieldKind.ARRAY:
        return FieldValue(kind, _decode_array(reader))
    if kind is FieldKind.TABLE:
        return FieldValue(kind, _decode_table(reader))
    return FieldValue(FieldKind.VOID)


def _sized_region_end(reader: Reader) -> int:
    size = reader.read_u32()
    if size > reader.remaining:
        raise BadAmqpDataError(f"declared size {size} exceeds the {reader.remaining} bytes left")
    return reader.offset + size


def _decode_array(reader: Reader) -> list[FieldValue]:
    limit = _sized_region_end(reader)
    values: list[FieldValue] = []
    while reader.offset < limit:
        values.append(_decode_field_value(reader))
    return values


def _decode_table(reader: Reader) -> list[TableEntry]:
    limit = _sized_region_end(reader)
    entries: list[TableEntry] = []
    while reader.offset < limit:
        key = reader.read_bytes(reader.read_u8())
        entries.append(TableEntry(key, _decode_field_value(reader)))
    return entries


def decode_table(
    data: Union[bytes, bytearray, memoryview], offset: int = 0
) -> tuple[list[TableEntry], int]:
    """Decode a table starting at ``offset``; return its entries and the offset after it."""
    reader = Reader(data, offset)
    entries = _decode_table(reader)
    return entries, reader.offset


# ---------------------------------------------------------------------------
# Encoding


def _encode_field_value(writer: Writer, value: FieldValue) -> None:
    kind = value.kind
    if not isinstance(kind, FieldKind):
        raise InvalidParameterError(f"unknown field kind {kind!r}")
    writer.write_u8(kind.value)

    if kind is FieldKind.BOOLEAN:
        writer.write_u8(1 if value.value else 0)
    elif kind in _INT_WIDTHS:
        bits, signed = _INT_WIDTHS[kind]
        raw = _to_unsigned(value.value, bits) if signed else value.value
        _write_uint(writer, bits, raw)
    elif kind is FieldKind.F32:
        writer.write_bytes(_F32.pack(value.value))
    elif kind is FieldKind.F64:
        writer.write_bytes(_F64.pack(value.value))
    elif kind is FieldKind.DECIMAL:
        writer.write_u8(value.value.decimals)
        writer.write_u32(value.value.value)
    elif kind in (FieldKind.UTF8, FieldKind.BYTES):
        data = _as_bytes(value.value)
        writer.write_u32(len(data))
        writer.write_bytes(data)
    elif kind is FieldKind.ARRAY:
        _encode_sized(writer, lambda: _encode_array_items(writer, value.value))
    elif kind is FieldKind.TABLE:
        _encode_sized(writer, lambda: _encode_table_items(writer, value.value))


def _encode_sized(writer: Writer, body) -> None:
    start = writer.offset
    writer.write_u32(0)  # size is filled in once the body is written
    body()
    writer.patch_u32(start, writer.offset - start - 4)


def _encode_array_items(writer: Writer, values: list[FieldValue]) -> None:
    for item in values:
        _encode_field_value(writer, item)


def _encode_table_items(writer: Writer, entries: list[TableEntry]) -> None:
    for entry in entries:
        key = _as_bytes(entry.key)
        writer.write_u8(len(key))
        writer.write_bytes(key)
        _encode_field_value(writer, entry.value)


def encode_table(entries: list[TableEntry], limit: int | None = None) -> bytes:
    """Encode a table; raise TableTooBigError if it exceeds ``limit`` bytes."""
    writer = Writer(limit)
    _encode_sized(writer, lambda: _encode_table_items(writer, entries))
    return writer.getvalue()


# ---------------------------------------------------------------------------
# Helpers


def entry_sort_key(entry: TableEntry) -> bytes:
    """Sort key ordering entries bytewise by key, shorter keys first on a tie."""
    return _as_bytes(entry.key)


def _clone_value(value: FieldValue) -> FieldValue:
    kind = value.kind
    if not isinstance(kind, FieldKind):
        raise InvalidParameterError(f"unknown field kind {kind!r}")
    if kind in (FieldKind.UTF8, FieldKind.BYTES):
        return FieldValue(kind, _as_bytes(value.value))
    if kind is FieldKind.ARRAY:
        return FieldValue(kind, [_clone_value(item) for item in value.value or []])
    if kind is FieldKind.TABLE:
        return FieldValue(kind, clone_table(value.value or []))
    return FieldValue(kind, value.value)


def clone_table(entries: list[TableEntry]) -> list[TableEntry]:
    """Deep copy of a table; an entry with an empty key is invalid."""
    cloned: list[TableEntry] = []
    for entry in entries:
        key = _as_bytes(entry.key)
        if not key:
            raise InvalidParameterError("table entry has an empty key")
        cloned.append(TableEntry(key, _clone_value(entry.value)))
    return cloned


def utf8_entry(key: Union[str, bytes], value: Union[str, bytes]) -> TableEntry:
    return TableEntry(_as_bytes(key), FieldValue(FieldKind.UTF8, _as_bytes(value)))


def table_entry(key: Union[str, bytes], value: list[TableEntry]) -> TableEntry:
    return TableEntry(_as_bytes(key), FieldValue(FieldKind.TABLE, value))


def bool_entry(key: Union[str, bytes], value: Any) -> TableEntry:
    return TableEntry(_as_bytes(key), FieldValue(FieldKind.BOOLEAN, bool(value)))


def get_entry_by_key(entries: list[TableEntry], key: Union[str, bytes]) -> TableEntry | None:
    """First entry whose key equals ``key``, or None."""
    wanted = _as_bytes(key)
    return next((entry for entry in entries if _as_bytes(entry.key) == wanted), None)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _format_lines(value: FieldValue, indent: int, out: list[str]) -> None:
    pad = " " * indent
    kind = value.kind
    head = pad + kind.code
    if kind is FieldKind.BOOLEAN:
        out.append(f"{head} {'true' if value.value else 'false'}\n")
    elif kind in _INT_WIDTHS:
        out.append(f"{head} {value.value}\n")
    elif kind in (FieldKind.F32, FieldKind.F64):
        out.append(f"{head} {value.value:g}\n")
    elif kind is FieldKind.DECIMAL:
        out.append(f"{head} {value.value.decimals}:::{value.value.value}\n")
    elif kind is FieldKind.UTF8:
        out.append(f"{head} {_text(_as_bytes(value.value))}\n")
    elif kind is FieldKind.BYTES:
        out.append(f"{head} {_as_bytes(value.value).hex()}\n")
    elif kind is FieldKind.ARRAY:
        out.append(head + "\n")
        for item in value.value:
            _format_lines(item, indent + 2, out)
    elif kind is FieldKind.TABLE:
        out.append(head + "\n")
        for entry in value.value:
            out.append(f"{' ' * (indent + 2)}{_text(_as_bytes(entry.key))} ->\n")
            _format_lines(entry.value, indent + 4, out)
    else:
        out.append(head + "\n")


def format_value(value: FieldValue, indent: int = 0) -> str:
    """Readable multi-line dump of a value, one line per scalar."""
    lines: list[str] = []
    _format_lines(value, indent, lines)
    return "".join(lines)