"""Worker logic for turning one DICOM file into an :class:`Instance`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import pydicom
from pydicom.datadict import keyword_for_tag
from pydicom.dataelem import DataElement
from pydicom.dataset import Dataset
from pydicom.errors import InvalidDicomError

from ..config import OutputFormat
from ..errors import InstanceExtractionError
from ..models import Instance, TagRecord
from .tags import INSTANCE_NUMBER, PIXEL_DATA, SOP_CLASS_UID, SOP_INSTANCE_UID, tag_key
from .values import native_text, normalize_value


logger = logging.getLogger(__name__)


def _wants_names(output_format: OutputFormat) -> bool:
    return output_format in (OutputFormat.COMPREHENSIVE, OutputFormat.MEDICAL)


def build_tag_record(element: DataElement, output_format: OutputFormat) -> TagRecord:
    name: Optional[str] = None
    if _wants_names(output_format):
        name = keyword_for_tag(element.tag) or None
    normalized = normalize_value(element, output_format)
    return TagRecord(
        tag=tag_key(element.tag),
        vr=str(element.VR),
        name=name,
        value=normalized.value,
        raw_value=normalized.raw_value,
        is_private=element.tag.group % 2 == 1,
    )


def _collect_records(
    elements: Iterable[DataElement],
    *,
    include_private: bool,
    output_format: OutputFormat,
) -> Dict[str, TagRecord]:
    records: Dict[str, TagRecord] = {}
    for element in elements:
        if not include_private and element.tag.group % 2 == 1:
            continue
        record = build_tag_record(element, output_format)
        records[record.tag] = record
    return records


def _element_text(dataset: Dataset, tag) -> Optional[str]:
    if tag not in dataset:
        return None
    return native_text(dataset[tag]) or None


def _read_instance(path: Path, *, include_private: bool, output_format: OutputFormat) -> Instance:
    dataset = pydicom.dcmread(path, force=True)

    file_meta = getattr(dataset, "file_meta", None)
    if not file_meta and len(dataset) == 0:
        raise InvalidDicomError("no file meta information or dataset elements found")
    transfer_syntax: Optional[str] = None
    meta_records: Dict[str, TagRecord] = {}
    if file_meta is not None:
        ts_uid = file_meta.get("TransferSyntaxUID")
        if ts_uid is not None:
            transfer_syntax = str(ts_uid)
        meta_records = _collect_records(file_meta, include_private=include_private, output_format=output_format)

    records = _collect_records(dataset, include_private=include_private, output_format=output_format)

    return Instance(
        sop_instance_uid=_element_text(dataset, SOP_INSTANCE_UID) or "unknown",
        instance_number=_element_text(dataset, INSTANCE_NUMBER),
        file_path=str(path),
        tags=records,
        transfer_syntax=transfer_syntax,
        sop_class_uid=_element_text(dataset, SOP_CLASS_UID),
        has_pixel_data=PIXEL_DATA in dataset,
        file_meta_information=meta_records,
    )


def extract_instance(
    path: Path,
    *,
    include_private: bool = False,
    output_format: OutputFormat = OutputFormat.COMPREHENSIVE,
) -> Instance:
    """Open *path* and build its :class:`Instance`.

    Raises :class:`InstanceExtractionError` when the file cannot be read or one
    of its elements cannot be decoded.
    """
    path = Path(path)
    try:
        instance = _read_instance(path, include_private=include_private, output_format=output_format)
    except Exception as exc:
        raise InstanceExtractionError(path, str(exc)) from exc
    logger.debug("Extracted %s tags=%d sop=%s", path, len(instance.tags), instance.sop_instance_uid)
    return instance
