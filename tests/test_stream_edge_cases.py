import io
import logging
import struct
from dataclasses import replace

import pytest

from bfast import pack_buffers, unpack
from bfast.api import ReadOptions
from bfast.packing.constants import MAGIC, SWAPPED_ENDIAN
from bfast.packing.errors import (
    AlignmentError,
    ErrorKind,
    LayoutError,
    StructuralError,
)
from bfast.packing.models import Header, Preamble, Range
from bfast.packing.planner import create_header
from bfast.packing.reader import read_bfast, read_header
from bfast.packing.writer import check_alignment, write_bfast, write_body, write_header


class OneWayStream:
    """Minimal non-seekable stream (pipe/socket stand-in)."""

    def __init__(self, data: bytes = b""):
        self._buf = io.BytesIO(data)

    def read(self, n=-1):
        return self._buf.read(n)

    def write(self, b):
        return self._buf.write(b)

    def seekable(self):
        return False

    def getvalue(self):
        return self._buf.getvalue()


def _single() -> bytes:
    # data_start=64, names 64..66, "a" 96..100, file length 128
    return pack_buffers([("a", b"abcd")])


def test_non_seekable_round_trip():
    sink = OneWayStream()
    write_bfast(sink, ["a", "b"], [4, 40], lambda s, i, n, size: s.write(b"z" * size))
    data = sink.getvalue()
    assert data == pack_buffers([("a", b"z" * 4), ("b", b"z" * 40)])
    assert read_bfast(OneWayStream(data)) == [("a", b"zzzz"), ("b", b"z" * 40)]


def test_swapped_endian_header_is_decoded():
    header = create_header(["xs", "ys"], [3, 5])
    swapped = replace(header, preamble=replace(header.preamble, magic=SWAPPED_ENDIAN))
    sink = io.BytesIO()
    write_header(sink, swapped)
    write_body(sink, ["xs", "ys"], [3, 5], lambda s, i, n, size: s.write(b"\x07" * size))
    data = sink.getvalue()
    assert struct.unpack_from(">Q", data, 8)[0] == header.preamble.data_start
    back = read_header(io.BytesIO(data))
    assert back.preamble.byte_order == ">"
    assert back.ranges == header.ranges
    assert read_bfast(io.BytesIO(data)) == [("xs", b"\x07" * 3), ("ys", b"\x07" * 5)]


def test_bad_magic_fails_first():
    data = bytearray(_single())
    data[0:8] = b"\x00" * 8
    # also break the bounds; the magic must still be reported
    data[8:16] = (1).to_bytes(8, "little")
    with pytest.raises(StructuralError) as ei:
        unpack(bytes(data))
    assert ei.value.kind is ErrorKind.MAGIC_MISMATCH


@pytest.mark.parametrize("cut", [20, 50, 65, 98])
def test_truncated_stream(cut):
    with pytest.raises(StructuralError) as ei:
        unpack(_single()[:cut])
    assert ei.value.kind is ErrorKind.TRUNCATED


def test_missing_trailing_padding_is_accepted():
    assert unpack(_single()[:100]) == [("a", b"abcd")]


def test_oversized_range_is_truncation_not_allocation():
    data = bytearray(_single())
    huge = 1 << 40
    data[16:24] = huge.to_bytes(8, "little")  # data_end
    data[56:64] = huge.to_bytes(8, "little")  # ranges[1].end
    with pytest.raises(StructuralError) as ei:
        unpack(bytes(data))
    assert ei.value.kind is ErrorKind.TRUNCATED


def test_zero_arrays_has_no_name_buffer():
    data = struct.pack("<3Qq", MAGIC, 32, 32, 0)
    with pytest.raises(StructuralError) as ei:
        unpack(data)
    assert ei.value.kind is ErrorKind.NAME_COUNT_MISMATCH


def _fragment_blob() -> bytes:
    # names blob "a\0bc\0" at 96..101; shrink range 0 so "bc" loses its NUL
    data = bytearray(pack_buffers([("a", b"1"), ("bc", b"2")]))
    assert data[96:101] == b"a\x00bc\x00"
    data[40:48] = (100).to_bytes(8, "little")
    return bytes(data)


def test_unterminated_name_tolerated_by_default(caplog):
    with caplog.at_level(logging.WARNING, logger="bfast"):
        out = unpack(_fragment_blob())
    assert out == [("a", b"1"), ("bc", b"2")]
    assert caplog.records


def test_unterminated_name_rejected_when_strict():
    with pytest.raises(StructuralError) as ei:
        unpack(_fragment_blob(), options=ReadOptions(strict_names=True))
    assert ei.value.kind is ErrorKind.NAME_COUNT_MISMATCH


def test_check_alignment_is_relative_to_origin():
    s = io.BytesIO(b"\x00" * 64)
    s.seek(37)
    with pytest.raises(AlignmentError) as ei:
        check_alignment(s)
    assert ei.value.kind is ErrorKind.ALIGNMENT_DRIFT
    check_alignment(s, origin=5)


def test_check_alignment_skips_non_seekable():
    check_alignment(OneWayStream(b"abc"))


def test_write_header_rejects_mismatched_names():
    header = Header(Preamble(MAGIC, 64, 64, 2), (Range(64, 64), Range(64, 64)), ())
    with pytest.raises(LayoutError) as ei:
        write_header(io.BytesIO(), header)
    assert ei.value.kind is ErrorKind.COUNT_MISMATCH


def test_error_rendering():
    with pytest.raises(StructuralError) as ei:
        unpack(_single()[:20])
    err = ei.value
    assert str(err).startswith("E_TRUNCATED: ")
    d = err.to_dict()
    assert d["kind"] == "TRUNCATED"
    assert d["context"]["expected"] == 32


class TrickleStream(io.RawIOBase):
    """Raw stream that hands out at most ``step`` bytes per read."""

    def __init__(self, data: bytes, step: int = 5):
        self._data = data
        self._pos = 0
        self._step = step

    def readable(self):
        return True

    def readinto(self, b):
        n = min(len(b), self._step, len(self._data) - self._pos)
        b[:n] = self._data[self._pos : self._pos + n]
        self._pos += n
        return n


def test_short_reads_are_retried():
    data = pack_buffers([("xs", b"\x01" * 40), ("title", b"hello")])
    source = TrickleStream(data)
    assert source.read(100) == data[:5]
    assert read_bfast(TrickleStream(data)) == [("xs", b"\x01" * 40), ("title", b"hello")]


def test_short_reads_still_detect_truncation():
    data = _single()
    with pytest.raises(StructuralError) as ei:
        read_bfast(TrickleStream(data[:98]))
    assert ei.value.kind is ErrorKind.TRUNCATED


def test_invalid_utf8_name_is_structural_error():
    data = bytearray(pack_buffers([("xs", b"abc")]))
    data[64] = 0xFF
    with pytest.raises(StructuralError) as ei:
        unpack(bytes(data))
    assert ei.value.kind is ErrorKind.NAME_ENCODING
    assert ei.value.context["offset"] == 0
    assert ei.value.context["index"] == 0


def test_write_header_validates_range_table():
    header = Header(
        Preamble(MAGIC, 96, 132, 3), (Range(96, 98), Range(128, 132)), ("a",)
    )
    with pytest.raises(StructuralError) as ei:
        write_header(io.BytesIO(), header)
    assert ei.value.kind is ErrorKind.BOUNDS_VIOLATION
