"""Normalization of decoded element values into JSON-safe data.

Every element is first offered to :func:`native_text`, the text form that
character-string VRs carry natively. Elements without one are classified into a
closed set of :class:`ValueKind` cases and rendered by kind: single values
collapse to scalars and multi-values become ordered arrays. Sequences are never
expanded; they render as ``"Sequence Item k"`` placeholders.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydicom.dataelem import DataElement
from pydicom.multival import MultiValue
from pydicom.sequence import Sequence
from pydicom.valuerep import PersonName

from ..config import OutputFormat
from .tags import tag_key


TEXT_VRS = frozenset(
    {"AE", "AS", "CS", "DA", "DS", "DT", "IS", "LO", "LT", "PN", "SH", "ST", "TM", "UC", "UI", "UR", "UT"}
)
DATE_VRS = frozenset({"DA", "DT", "TM"})


class ValueKind(str, Enum):
    INTEGERS = "integers"
    FLOATS = "floats"
    STRINGS = "strings"
    TAGS = "tags"
    DATES = "dates"
    SEQUENCE = "sequence"
    EMPTY = "empty"
    OTHER = "other"


@dataclass(frozen=True)
class NormalizedValue:
    value: Any
    raw_value: Optional[str]


def _items(value: Any) -> List[Any]:
    if isinstance(value, (MultiValue, list, tuple)):
        return list(value)
    return [value]


def _is_number(item: Any) -> bool:
    return isinstance(item, (int, float, Decimal)) and not isinstance(item, bool)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, MultiValue, list, tuple)):
        return len(value) == 0
    return False


def native_text(element: DataElement) -> Optional[str]:
    """Return the element's own text form, or ``None`` when it has none.

    Only single-valued elements of a character-string VR have one. An empty
    character-string element has the empty text.
    """
    if element.VR not in TEXT_VRS or element.VM > 1:
        return None
    value = element.value
    if _is_empty(value):
        return ""
    if isinstance(value, (MultiValue, list, tuple, bytes)):
        return None
    return str(value)


def classify(element: DataElement) -> ValueKind:
    value = element.value
    if element.VR == "SQ" or isinstance(value, Sequence):
        return ValueKind.SEQUENCE
    if _is_empty(value):
        return ValueKind.EMPTY
    if element.VR == "AT":
        return ValueKind.TAGS
    if isinstance(value, bytes):
        return ValueKind.OTHER

    items = _items(value)
    if element.VR in DATE_VRS or all(isinstance(item, (date, time, datetime)) for item in items):
        return ValueKind.DATES
    if all(_is_number(item) for item in items):
        if all(isinstance(item, int) for item in items):
            return ValueKind.INTEGERS
        return ValueKind.FLOATS
    if all(isinstance(item, (str, PersonName)) for item in items):
        return ValueKind.STRINGS
    return ValueKind.OTHER


def _collapse(items: List[Any]) -> Any:
    if len(items) == 1:
        return items[0]
    return items


def _json_float(item: Any) -> Optional[float]:
    number = float(item)
    # JSON has no representation for NaN or infinities.
    if not math.isfinite(number):
        return None
    return number


def _render(kind: ValueKind, element: DataElement) -> Any:
    value = element.value
    if kind is ValueKind.SEQUENCE:
        return [f"Sequence Item {index}" for index in range(1, len(value or []) + 1)]
    if kind is ValueKind.EMPTY:
        return None
    if kind is ValueKind.INTEGERS:
        return _collapse([int(item) for item in _items(value)])
    if kind is ValueKind.FLOATS:
        return _collapse([int(item) if isinstance(item, int) else _json_float(item) for item in _items(value)])
    if kind is ValueKind.STRINGS:
        return _collapse([str(item) for item in _items(value)])
    if kind is ValueKind.TAGS:
        return _collapse([tag_key(item) for item in _items(value)])
    if kind is ValueKind.DATES:
        return _collapse([str(item) for item in _items(value)])
    if kind is ValueKind.OTHER:
        return element.repval
    raise TypeError(f"Unhandled value kind: {kind!r}")


def normalize_value(element: DataElement, output_format: OutputFormat) -> NormalizedValue:
    """Convert one element into its JSON value and optional raw text."""
    if output_format is OutputFormat.RAW:
        dump = element.repval
        return NormalizedValue(value=dump, raw_value=dump)

    text = native_text(element)
    if text is not None:
        return NormalizedValue(value=text, raw_value=text)

    return NormalizedValue(value=_render(classify(element), element), raw_value=None)
