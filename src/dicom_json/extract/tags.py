"""Well-known DICOM tags and helpers for canonical tag keys."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydicom.datadict import tag_for_keyword
from pydicom.tag import BaseTag, Tag


def tag_key(tag: int) -> str:
    """Render *tag* as ``(GGGG,EEEE)`` with uppercase hex digits."""
    tag = Tag(tag)
    return f"({tag.group:04X},{tag.element:04X})"


def _key(keyword: str) -> str:
    tag = tag_for_keyword(keyword)
    if tag is None:  # pragma: no cover - dictionary is static
        raise KeyError(keyword)
    return tag_key(tag)


SOP_CLASS_UID: BaseTag = Tag("SOPClassUID")
SOP_INSTANCE_UID: BaseTag = Tag("SOPInstanceUID")
INSTANCE_NUMBER: BaseTag = Tag("InstanceNumber")
PIXEL_DATA: BaseTag = Tag("PixelData")

PATIENT_ID = _key("PatientID")
PATIENT_NAME = _key("PatientName")
PATIENT_BIRTH_DATE = _key("PatientBirthDate")
PATIENT_SEX = _key("PatientSex")
PATIENT_AGE = _key("PatientAge")

STUDY_INSTANCE_UID = _key("StudyInstanceUID")
STUDY_DATE = _key("StudyDate")
STUDY_TIME = _key("StudyTime")
STUDY_DESCRIPTION = _key("StudyDescription")

SERIES_INSTANCE_UID = _key("SeriesInstanceUID")
SERIES_NUMBER = _key("SeriesNumber")
SERIES_DESCRIPTION = _key("SeriesDescription")
MODALITY = _key("Modality")

ROWS = _key("Rows")
COLUMNS = _key("Columns")
BITS_ALLOCATED = _key("BitsAllocated")
PHOTOMETRIC_INTERPRETATION = _key("PhotometricInterpretation")


def tag_text(tags: Mapping[str, Any], key: str) -> Optional[str]:
    """Return the text form of *key* in a tag map, or ``None``.

    The native text (``raw_value``) wins; scalar values without one (binary
    numbers, single tag references) fall back to ``str(value)``.
    """
    record = tags.get(key)
    if record is None:
        return None
    if record.raw_value is not None:
        return record.raw_value
    value = record.value
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None
