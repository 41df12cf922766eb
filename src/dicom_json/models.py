"""Pydantic models for extracted instances and the study/series hierarchy."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .extract import tags as well_known
from .extract.tags import tag_text


class TagRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    vr: str
    name: Optional[str] = None
    value: Any = None
    raw_value: Optional[str] = None
    is_private: bool = False


class Instance(BaseModel):
    model_config = ConfigDict(frozen=True)

    sop_instance_uid: str = "unknown"
    instance_number: Optional[str] = None
    file_path: str
    tags: Dict[str, TagRecord] = Field(default_factory=dict)
    transfer_syntax: Optional[str] = None
    sop_class_uid: Optional[str] = None
    has_pixel_data: bool = False
    file_meta_information: Dict[str, TagRecord] = Field(default_factory=dict)

    def text(self, key: str) -> Optional[str]:
        return tag_text(self.tags, key)


class PatientInfo(BaseModel):
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    patient_birth_date: Optional[str] = None
    patient_sex: Optional[str] = None
    patient_age: Optional[str] = None

    @classmethod
    def from_instance(cls, instance: Instance) -> "PatientInfo":
        return cls(
            patient_id=instance.text(well_known.PATIENT_ID),
            patient_name=instance.text(well_known.PATIENT_NAME),
            patient_birth_date=instance.text(well_known.PATIENT_BIRTH_DATE),
            patient_sex=instance.text(well_known.PATIENT_SEX),
            patient_age=instance.text(well_known.PATIENT_AGE),
        )


class ExtractionSummary(BaseModel):
    files_with_pixel_data: int = 0
    unique_modalities: List[str] = Field(default_factory=list)
    date_range: Optional[Tuple[str, str]] = None


class ProcessingInfo(BaseModel):
    processing_id: str
    timestamp: datetime
    version: str
    total_files: int
    successful_files: int
    failed_files: int
    extraction_summary: ExtractionSummary


class Series(BaseModel):
    series_instance_uid: str
    series_number: Optional[str] = None
    series_description: Optional[str] = None
    modality: Optional[str] = None
    instances: List[Instance] = Field(default_factory=list)


class Study(BaseModel):
    study_instance_uid: str
    study_date: Optional[str] = None
    study_time: Optional[str] = None
    study_description: Optional[str] = None
    patient_info: PatientInfo = Field(default_factory=PatientInfo)
    series: Dict[str, Series] = Field(default_factory=dict)
    processing_info: ProcessingInfo

    def iter_instances(self):
        for series in self.series.values():
            yield from series.instances

    @property
    def instance_count(self) -> int:
        return sum(len(series.instances) for series in self.series.values())
