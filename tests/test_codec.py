import pytest

from rabbitwire.codec import Reader, Writer
from rabbitwire.errors import BadAmqpDataError, InvalidParameterError, TableTooBigError


def test_reader_is_big_endian():
    reader = Reader(b"\x01\x02\x03\x04")
    assert reader.read_u16() == 0x0102
    assert reader.offset == 2
    assert reader.read_u8() == 0x03


def test_writer_is_big_endian():
    writer = Writer()
    writer.write_u32(0x01020304)
    assert writer.getvalue() == b"\x01\x02\x03\x04"


@pytest.mark.parametrize(
    "write,read,value",
    [
        ("write_u8", "read_u8", 0xFF),
        ("write_u16", "read_u16", 0xBEEF),
        ("write_u32", "read_u32", 0xDEADBEEF),
        ("write_u64", "read_u64", 0x0102030405060708),
        ("write_u64", "read_u64", 0),
    ],
)
def test_round_trip(write, read, value):
    writer = Writer()
    getattr(writer, write)(value)
    reader = Reader(writer.getvalue())
    assert getattr(reader, read)() == value
    assert reader.remaining == 0


def test_bytes_round_trip_with_offset():
    writer = Writer()
    writer.write_u8(3)
    writer.write_bytes(b"abc")
    reader = Reader(b"xx" + writer.getvalue(), 2)
    length = reader.read_u8()
    assert reader.read_bytes(length) == b"abc"
    assert reader.offset == len(reader)


def test_read_past_end_raises():
    reader = Reader(b"\x00\x01\x02")
    with pytest.raises(BadAmqpDataError):
        reader.read_u32()


def test_read_bytes_past_end_raises():
    reader = Reader(b"ab")
    with pytest.raises(BadAmqpDataError):
        reader.read_bytes(3)


def test_read_zero_bytes_at_end():
    reader = Reader(b"ab", 2)
    assert reader.read_bytes(0) == b""
    assert reader.remaining == 0


def test_negative_length_rejected():
    with pytest.raises(InvalidParameterError):
        Reader(b"abc").read_bytes(-1)


def test_writer_limit_is_enforced():
    writer = Writer(limit=3)
    writer.write_u16(1)
    with pytest.raises(TableTooBigError):
        writer.write_u16(2)
    assert writer.getvalue() == b"\x00\x01"


def test_empty_bytes_always_fit():
    writer = Writer(limit=1)
    writer.write_u8(7)
    writer.write_bytes(b"")
    assert writer.getvalue() == b"\x07"


def test_write_bytes_over_limit():
    writer = Writer(limit=2)
    with pytest.raises(TableTooBigError):
        writer.write_bytes(b"abc")
    assert len(writer) == 0


def test_out_of_range_value_rejected():
    writer = Writer()
    with pytest.raises(InvalidParameterError):
        writer.write_u8(256)
    with pytest.raises(InvalidParameterError):
        writer.write_u16(-1)


def test_patch_u32_fills_reserved_length():
    writer = Writer()
    writer.write_u32(0)
    writer.write_bytes(b"hello")
    writer.patch_u32(0, len(writer) - 4)
    reader = Reader(writer.getvalue())
    assert reader.read_u32() == len(b"hello")
    assert reader.read_bytes(5) == b"hello"


def test_patch_u32_outside_written_data():
    writer = Writer()
    writer.write_u16(0)
    with pytest.raises(InvalidParameterError):
        writer.patch_u32(0, 1)


def test_patch_u32_beyond_limit():
    writer = Writer(limit=4)
    writer.write_u32(0)
    with pytest.raises(TableTooBigError):
        writer.patch_u32(2, 1)