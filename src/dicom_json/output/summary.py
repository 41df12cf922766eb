"""Run-level processing metadata."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .. import __version__
from ..extract import tags as well_known
from ..models import ExtractionSummary, Instance, ProcessingInfo


def _new_uuid() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunStamp:
    """Source of processing identifiers and timestamps.

    Tests inject fixed callables to get reproducible documents.
    """

    new_id: Callable[[], str] = field(default=_new_uuid)
    now: Callable[[], datetime] = field(default=_utc_now)


def unique_modalities(instances: Sequence[Instance]) -> List[str]:
    modalities = {instance.text(well_known.MODALITY) for instance in instances}
    return sorted(modality for modality in modalities if modality)


def files_with_pixel_data(instances: Sequence[Instance]) -> int:
    return sum(1 for instance in instances if instance.has_pixel_data)


def study_date_range(instances: Sequence[Instance]) -> Optional[tuple[str, str]]:
    dates = [date for date in (instance.text(well_known.STUDY_DATE) for instance in instances) if date]
    if not dates:
        return None
    return min(dates), max(dates)


def build_processing_info(
    instances: Sequence[Instance],
    stamp: RunStamp,
    total_files: Optional[int] = None,
) -> ProcessingInfo:
    successful = len(instances)
    total = successful if total_files is None else max(total_files, successful)
    return ProcessingInfo(
        processing_id=stamp.new_id(),
        timestamp=stamp.now(),
        version=__version__,
        total_files=total,
        successful_files=successful,
        failed_files=total - successful,
        extraction_summary=ExtractionSummary(
            files_with_pixel_data=files_with_pixel_data(instances),
            unique_modalities=unique_modalities(instances),
            date_range=study_date_range(instances),
        ),
    )
