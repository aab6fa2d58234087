"""Validator checks, one violated invariant at a time.

Baseline header: one buffer "a" of 4 bytes.
  data_start=64, names blob 64..66, "a" 96..100, data_end=100
"""

from dataclasses import replace

import pytest

from bfast.packing.constants import MAGIC
from bfast.packing.errors import ErrorKind, StructuralError
from bfast.packing.models import Header, Preamble, Range
from bfast.packing.planner import create_header
from bfast.packing.validator import (
    check_header,
    check_preamble,
    validate_header,
    validate_preamble,
)


def _base() -> Header:
    return create_header(["a"], [4])


def _kind(header: Header) -> ErrorKind:
    violation = check_header(header)
    assert violation is not None
    return violation.kind


def test_baseline_is_valid():
    h = _base()
    assert h.preamble.data_start == 64
    assert h.ranges == (Range(64, 66), Range(96, 100))
    assert check_header(h) is None
    assert validate_header(h) is h
    # idempotent
    assert validate_header(validate_header(h)) is h


def test_magic_checked_before_anything_else():
    p = Preamble(magic=0x1234, data_start=0, data_end=0, num_arrays=-5)
    violation = check_preamble(p)
    assert violation.kind is ErrorKind.MAGIC_MISMATCH
    with pytest.raises(StructuralError) as ei:
        validate_preamble(p)
    assert ei.value.kind is ErrorKind.MAGIC_MISMATCH
    assert ei.value.code == "E_MAGIC"


@pytest.mark.parametrize(
    "preamble",
    [
        Preamble(MAGIC, data_start=16, data_end=100, num_arrays=1),
        Preamble(MAGIC, data_start=128, data_end=100, num_arrays=1),
        Preamble(MAGIC, data_start=64, data_end=100, num_arrays=-1),
        Preamble(MAGIC, data_start=32, data_end=40, num_arrays=100),
        Preamble(MAGIC, data_start=32, data_end=1000, num_arrays=3),
    ],
)
def test_bounds_violations(preamble):
    assert check_preamble(preamble).kind is ErrorKind.BOUNDS_VIOLATION


def test_misaligned_begin():
    h = _base()
    bad = replace(h, ranges=(h.ranges[0], Range(97, 100)))
    assert _kind(bad) is ErrorKind.MISALIGNED_OFFSET


def test_begin_past_data_end():
    h = _base()
    bad = replace(h, ranges=(h.ranges[0], Range(128, 130)))
    assert _kind(bad) is ErrorKind.RANGE_OUT_OF_BOUNDS


def test_begin_before_data_start():
    h = _base()
    bad = replace(
        h,
        preamble=replace(h.preamble, data_start=96),
        ranges=(Range(64, 66), Range(96, 100)),
    )
    assert _kind(bad) is ErrorKind.RANGE_OUT_OF_BOUNDS


def test_end_past_data_end():
    h = _base()
    bad = replace(h, ranges=(h.ranges[0], Range(96, 200)))
    assert _kind(bad) is ErrorKind.RANGE_OUT_OF_BOUNDS


def test_overlapping_ranges():
    h = _base()
    bad = replace(h, ranges=(Range(64, 70), Range(64, 68)))
    assert _kind(bad) is ErrorKind.RANGE_OVERLAP


def test_names_count_mismatch():
    h = _base()
    bad = replace(h, names=())
    assert _kind(bad) is ErrorKind.NAME_COUNT_MISMATCH
    with pytest.raises(StructuralError) as ei:
        validate_header(bad)
    assert ei.value.context == {"names": 0, "ranges": 2}


def test_violation_to_dict():
    h = _base()
    violation = check_header(replace(h, names=()))
    d = violation.to_dict()
    assert d["code"] == "E_NAME_COUNT"
    assert "names" in d["context"]


def test_range_table_shorter_than_num_arrays():
    bad = Header(
        Preamble(MAGIC, data_start=96, data_end=132, num_arrays=3),
        (Range(96, 98), Range(128, 132)),
        ("a",),
    )
    assert _kind(bad) is ErrorKind.BOUNDS_VIOLATION
    with pytest.raises(StructuralError) as ei:
        validate_header(bad)
    assert ei.value.context == {"ranges": 2, "num_arrays": 3}
