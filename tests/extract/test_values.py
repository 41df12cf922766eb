from __future__ import annotations

import pytest
from pydicom.dataelem import DataElement
from pydicom.dataset import Dataset
from pydicom.sequence import Sequence

from dicom_json.config import OutputFormat
from dicom_json.extract.values import ValueKind, classify, native_text, normalize_value


COMPREHENSIVE = OutputFormat.COMPREHENSIVE


def test_single_text_uses_native_string():
    element = DataElement(0x00100010, "PN", "Doe^John")
    normalized = normalize_value(element, COMPREHENSIVE)

    assert normalized.value == "Doe^John"
    assert normalized.raw_value == "Doe^John"


def test_single_decimal_string_stays_text():
    element = DataElement(0x00180050, "DS", "1.50")

    assert normalize_value(element, COMPREHENSIVE).value == "1.50"


@pytest.mark.parametrize(
    ("vr", "value", "expected"),
    [
        ("US", 512, 512),
        ("US", [1, 2, 3], [1, 2, 3]),
        ("SS", [-4, 7], [-4, 7]),
        ("UL", 70000, 70000),
        ("FD", 2.5, 2.5),
        ("FL", [0.5, 1.5], [0.5, 1.5]),
        ("IS", ["3", "1", "2"], [3, 1, 2]),
        ("DS", ["0.5", "0.25"], [0.5, 0.25]),
    ],
)
def test_numeric_vectors_collapse_by_length(vr, value, expected):
    element = DataElement(0x00191001, vr, value)
    normalized = normalize_value(element, COMPREHENSIVE)

    assert normalized.value == expected
    assert normalized.raw_value is None


def test_integer_values_keep_integer_type():
    element = DataElement(0x00280010, "US", 512)

    assert isinstance(normalize_value(element, COMPREHENSIVE).value, int)


def test_multi_valued_strings_become_array():
    element = DataElement(0x00080008, "CS", ["ORIGINAL", "PRIMARY", "AXIAL"])

    assert classify(element) is ValueKind.STRINGS
    assert normalize_value(element, COMPREHENSIVE).value == ["ORIGINAL", "PRIMARY", "AXIAL"]


def test_multi_valued_dates_become_array():
    element = DataElement(0x00181202, "DA", ["20240101", "20240215"])

    assert classify(element) is ValueKind.DATES
    assert normalize_value(element, COMPREHENSIVE).value == ["20240101", "20240215"]


def test_tag_references_render_canonical_keys():
    single = DataElement(0x00209165, "AT", 0x0010ABCD)
    multiple = DataElement(0x00209165, "AT", [0x00100010, 0x7FE00010])

    assert normalize_value(single, COMPREHENSIVE).value == "(0010,ABCD)"
    assert normalize_value(multiple, COMPREHENSIVE).value == ["(0010,0010)", "(7FE0,0010)"]


def test_sequence_renders_placeholders():
    element = DataElement(0x00081140, "SQ", Sequence([Dataset(), Dataset(), Dataset()]))

    normalized = normalize_value(element, COMPREHENSIVE)

    assert normalized.value == ["Sequence Item 1", "Sequence Item 2", "Sequence Item 3"]
    assert normalized.raw_value is None


def test_empty_sequence_renders_empty_list():
    element = DataElement(0x00081140, "SQ", Sequence([]))

    assert normalize_value(element, COMPREHENSIVE).value == []


@pytest.mark.parametrize(
    "tag, vr",
    [
        (0x00100010, "PN"),
        (0x00100020, "LO"),
        (0x00100040, "CS"),
        (0x00100030, "DA"),
    ],
)
def test_empty_text_element_keeps_empty_string(tag, vr):
    normalized = normalize_value(DataElement(tag, vr, ""), COMPREHENSIVE)

    assert normalized.value == ""
    assert normalized.raw_value == ""


def test_empty_value_is_null():
    element = DataElement(0x00280010, "US", None)

    assert classify(element) is ValueKind.EMPTY
    assert normalize_value(element, COMPREHENSIVE).value is None


def test_non_finite_float_is_null():
    element = DataElement(0x00189087, "FD", float("nan"))

    assert normalize_value(element, COMPREHENSIVE).value is None


def test_bytes_fall_back_to_debug_dump():
    element = DataElement(0x00291010, "OB", b"\x00\x01\x02\x03")

    normalized = normalize_value(element, COMPREHENSIVE)

    assert classify(element) is ValueKind.OTHER
    assert normalized.value == element.repval
    assert normalized.raw_value is None


def test_raw_format_uses_debug_dump_for_everything():
    element = DataElement(0x00280030, "DS", ["0.5", "0.5"])

    normalized = normalize_value(element, OutputFormat.RAW)

    assert normalized.value == element.repval
    assert normalized.raw_value == element.repval


def test_native_text_requires_single_character_value():
    assert native_text(DataElement(0x00080060, "CS", "MR")) == "MR"
    assert native_text(DataElement(0x00080008, "CS", ["A", "B"])) is None
    assert native_text(DataElement(0x00280010, "US", 512)) is None
    assert native_text(DataElement(0x00080060, "CS", "")) == ""


def test_normalization_is_deterministic():
    element = DataElement(0x00200037, "DS", ["1", "0", "0", "0", "1", "0"])

    first = normalize_value(element, COMPREHENSIVE)
    second = normalize_value(element, COMPREHENSIVE)

    assert first == second
    assert first.value == [1.0, 0.0, 0.0, 0.0, 1.0, 0.0]
