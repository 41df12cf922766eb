"""Grouping of instances into studies and series."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from ..extract import tags as well_known
from ..models import Instance, PatientInfo, Series, Study
from .summary import RunStamp, build_processing_info


logger = logging.getLogger(__name__)


UNKNOWN_STUDY = "unknown_study"
UNKNOWN_SERIES = "unknown_series"


def sanitize_filename(name: str) -> str:
    """Replace everything except alphanumerics, ``-`` and ``_`` with ``_``."""
    return "".join(char if char.isalnum() or char in "-_" else "_" for char in name)


def study_dir_name(study_uid: str) -> str:
    return f"study_{sanitize_filename(study_uid)}"


def _new_study(
    study_uid: str,
    instance: Instance,
    instances: Sequence[Instance],
    stamp: RunStamp,
    total_files: Optional[int],
) -> Study:
    # Totals describe the whole result set, not this study alone.
    return Study(
        study_instance_uid=study_uid,
        study_date=instance.text(well_known.STUDY_DATE),
        study_time=instance.text(well_known.STUDY_TIME),
        study_description=instance.text(well_known.STUDY_DESCRIPTION),
        patient_info=PatientInfo.from_instance(instance),
        series={},
        processing_info=build_processing_info(instances, stamp, total_files),
    )


def _new_series(series_uid: str, instance: Instance) -> Series:
    return Series(
        series_instance_uid=series_uid,
        series_number=instance.text(well_known.SERIES_NUMBER),
        series_description=instance.text(well_known.SERIES_DESCRIPTION),
        modality=instance.text(well_known.MODALITY),
        instances=[],
    )


def organize_studies(
    instances: Sequence[Instance],
    stamp: Optional[RunStamp] = None,
    total_files: Optional[int] = None,
) -> Dict[str, Study]:
    """Group *instances* by study and series UID.

    Study, patient and series fields come from the first instance seen for
    each key and are never revisited.
    """
    stamp = stamp or RunStamp()
    studies: Dict[str, Study] = {}
    for instance in instances:
        study_uid = instance.text(well_known.STUDY_INSTANCE_UID) or UNKNOWN_STUDY
        series_uid = instance.text(well_known.SERIES_INSTANCE_UID) or UNKNOWN_SERIES

        study = studies.get(study_uid)
        if study is None:
            study = _new_study(study_uid, instance, instances, stamp, total_files)
            studies[study_uid] = study

        series = study.series.get(series_uid)
        if series is None:
            series = _new_series(series_uid, instance)
            study.series[series_uid] = series

        series.instances.append(instance)

    logger.info("Organized %d instances into %d studies", len(instances), len(studies))
    return studies
