"""Projection of instances and studies into the four output shapes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..config import OutputFormat
from ..extract import tags as well_known
from ..models import Instance, ProcessingInfo, Study
from .summary import RunStamp, build_processing_info, files_with_pixel_data, unique_modalities


BASIC_TAG_LIMIT = 10


def _basic_tags(instance: Instance) -> Dict[str, Any]:
    selected: Dict[str, Any] = {}
    for key, record in instance.tags.items():
        if record.is_private:
            continue
        if len(selected) >= BASIC_TAG_LIMIT:
            break
        selected[key] = record.value
    return selected


def render_basic(instances: Sequence[Instance]) -> Dict[str, Any]:
    return {
        "format": OutputFormat.BASIC.value,
        "total_files": len(instances),
        "instances": [
            {
                "file_path": instance.file_path,
                "sop_instance_uid": instance.sop_instance_uid,
                "tags": _basic_tags(instance),
            }
            for instance in instances
        ],
    }


def render_comprehensive(instances: Sequence[Instance], info: ProcessingInfo) -> Dict[str, Any]:
    return {
        "format": OutputFormat.COMPREHENSIVE.value,
        "processing_info": info.model_dump(mode="json"),
        "instances": [instance.model_dump(mode="json") for instance in instances],
    }


def _medical_instance(instance: Instance) -> Dict[str, Any]:
    text = instance.text
    return {
        "file_path": instance.file_path,
        "patient": {
            "id": text(well_known.PATIENT_ID),
            "name": text(well_known.PATIENT_NAME),
            "birth_date": text(well_known.PATIENT_BIRTH_DATE),
            "sex": text(well_known.PATIENT_SEX),
            "age": text(well_known.PATIENT_AGE),
        },
        "study": {
            "uid": text(well_known.STUDY_INSTANCE_UID),
            "date": text(well_known.STUDY_DATE),
            "time": text(well_known.STUDY_TIME),
            "description": text(well_known.STUDY_DESCRIPTION),
        },
        "series": {
            "uid": text(well_known.SERIES_INSTANCE_UID),
            "number": text(well_known.SERIES_NUMBER),
            "description": text(well_known.SERIES_DESCRIPTION),
            "modality": text(well_known.MODALITY),
        },
        "instance": {
            "uid": instance.sop_instance_uid,
            "number": instance.instance_number,
            "has_pixel_data": instance.has_pixel_data,
        },
        "imaging": {
            "rows": text(well_known.ROWS),
            "columns": text(well_known.COLUMNS),
            "bits_allocated": text(well_known.BITS_ALLOCATED),
            "photometric_interpretation": text(well_known.PHOTOMETRIC_INTERPRETATION),
            "transfer_syntax": instance.transfer_syntax,
        },
    }


def render_medical(instances: Sequence[Instance]) -> Dict[str, Any]:
    return {
        "format": OutputFormat.MEDICAL.value,
        "summary": {
            "total_instances": len(instances),
            "files_with_images": files_with_pixel_data(instances),
            "unique_modalities": unique_modalities(instances),
        },
        "instances": [_medical_instance(instance) for instance in instances],
    }


def render_raw(instances: Sequence[Instance]) -> Dict[str, Any]:
    return {
        "format": OutputFormat.RAW.value,
        "instances": [
            {
                "file": instance.file_path,
                "tags": {
                    key: {"vr": record.vr, "raw": record.raw_value, "private": record.is_private}
                    for key, record in instance.tags.items()
                },
            }
            for instance in instances
        ],
    }


def render_flat(
    instances: Sequence[Instance],
    output_format: OutputFormat,
    info: Optional[ProcessingInfo] = None,
    stamp: Optional[RunStamp] = None,
) -> Dict[str, Any]:
    """Render a flat document; *info* is built from *stamp* when not given."""
    if output_format is OutputFormat.BASIC:
        return render_basic(instances)
    if output_format is OutputFormat.COMPREHENSIVE:
        if info is None:
            info = build_processing_info(instances, stamp or RunStamp())
        return render_comprehensive(instances, info)
    if output_format is OutputFormat.MEDICAL:
        return render_medical(instances)
    if output_format is OutputFormat.RAW:
        return render_raw(instances)
    raise ValueError(f"Unsupported output format: {output_format!r}")


def _study_modalities(study: Study) -> List[str]:
    return sorted({series.modality for series in study.series.values() if series.modality})


def render_basic_study(study: Study) -> Dict[str, Any]:
    return {
        "format": OutputFormat.BASIC.value,
        "study_uid": study.study_instance_uid,
        "study_date": study.study_date,
        "series_count": len(study.series),
        "total_instances": study.instance_count,
        "modalities": _study_modalities(study),
    }


def render_medical_study(study: Study) -> Dict[str, Any]:
    series_summary = [
        {
            "uid": series.series_instance_uid,
            "number": series.series_number,
            "description": series.series_description,
            "modality": series.modality,
            "instance_count": len(series.instances),
            "has_images": any(instance.has_pixel_data for instance in series.instances),
        }
        for series in study.series.values()
    ]
    return {
        "format": OutputFormat.MEDICAL.value,
        "study": {
            "uid": study.study_instance_uid,
            "date": study.study_date,
            "time": study.study_time,
            "description": study.study_description,
        },
        "patient": study.patient_info.model_dump(mode="json"),
        "series": series_summary,
        "summary": {
            "total_series": len(study.series),
            "total_instances": study.instance_count,
            "imaging_instances": sum(1 for instance in study.iter_instances() if instance.has_pixel_data),
        },
    }


def render_raw_study(study: Study) -> Dict[str, Any]:
    instances = list(study.iter_instances())
    return {
        "format": OutputFormat.RAW.value,
        "study_uid": study.study_instance_uid,
        "files": [instance.file_path for instance in instances],
        "tag_count": sum(len(instance.tags) for instance in instances),
    }


def render_study(study: Study, output_format: OutputFormat) -> Dict[str, Any]:
    if output_format is OutputFormat.BASIC:
        return render_basic_study(study)
    if output_format is OutputFormat.COMPREHENSIVE:
        return study.model_dump(mode="json")
    if output_format is OutputFormat.MEDICAL:
        return render_medical_study(study)
    if output_format is OutputFormat.RAW:
        return render_raw_study(study)
    raise ValueError(f"Unsupported output format: {output_format!r}")
