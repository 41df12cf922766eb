from __future__ import annotations

from datetime import datetime, timezone

from dicom_json.models import Instance, TagRecord
from dicom_json.output.hierarchy import organize_studies, sanitize_filename, study_dir_name
from dicom_json.output.summary import RunStamp


def _stamp() -> RunStamp:
    counter = iter(range(1000))
    return RunStamp(
        new_id=lambda: f"run-{next(counter)}",
        now=lambda: datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


def _text(key: str, value: str) -> TagRecord:
    return TagRecord(tag=key, vr="LO", value=value, raw_value=value)


def _instance(sop: str, study: str | None, series: str | None, **fields: str) -> Instance:
    keys = {
        "study_description": "(0008,1030)",
        "series_description": "(0008,103E)",
        "modality": "(0008,0060)",
        "patient_id": "(0010,0020)",
        "study_date": "(0008,0020)",
    }
    tags = {}
    if study is not None:
        tags["(0020,000D)"] = _text("(0020,000D)", study)
    if series is not None:
        tags["(0020,000E)"] = _text("(0020,000E)", series)
    for name, value in fields.items():
        tags[keys[name]] = _text(keys[name], value)
    return Instance(sop_instance_uid=sop, file_path=f"/data/{sop}.dcm", tags=tags)


def test_same_study_different_series():
    instances = [
        _instance("1", "1.2.3", "1.2.3.1"),
        _instance("2", "1.2.3", "1.2.3.2"),
        _instance("3", "1.2.3", "1.2.3.1"),
    ]

    studies = organize_studies(instances, _stamp())

    assert list(studies) == ["1.2.3"]
    series = studies["1.2.3"].series
    assert set(series) == {"1.2.3.1", "1.2.3.2"}
    assert [i.sop_instance_uid for i in series["1.2.3.1"].instances] == ["1", "3"]
    assert studies["1.2.3"].instance_count == 3


def test_missing_uids_collapse_into_sentinel_buckets():
    instances = [_instance(str(n), None, None) for n in range(4)]

    studies = organize_studies(instances, _stamp())

    assert list(studies) == ["unknown_study"]
    assert list(studies["unknown_study"].series) == ["unknown_series"]
    assert len(studies["unknown_study"].series["unknown_series"].instances) == 4


def test_first_seen_fields_win():
    instances = [
        _instance("1", "1.2.3", "1.2.3.1", study_description="First", series_description="Axial", patient_id="P1"),
        _instance("2", "1.2.3", "1.2.3.1", study_description="Second", series_description="Coronal", patient_id="P2"),
    ]

    studies = organize_studies(instances, _stamp())
    study = studies["1.2.3"]

    assert study.study_description == "First"
    assert study.patient_info.patient_id == "P1"
    assert study.series["1.2.3.1"].series_description == "Axial"


def test_study_processing_info_covers_whole_result_set():
    instances = [
        _instance("1", "A", "A.1", modality="CT", study_date="20240105"),
        _instance("2", "B", "B.1", modality="MR", study_date="20231231"),
        _instance("3", "B", "B.1", modality="MR"),
    ]

    studies = organize_studies(instances, _stamp(), total_files=5)

    info = studies["A"].processing_info
    assert info.total_files == 5
    assert info.successful_files == 3
    assert info.failed_files == 2
    assert info.extraction_summary.unique_modalities == ["CT", "MR"]
    assert info.extraction_summary.date_range == ("20231231", "20240105")
    assert studies["A"].processing_info.processing_id != studies["B"].processing_info.processing_id


def test_sanitize_filename():
    assert sanitize_filename("1.2.840/abc def") == "1_2_840_abc_def"
    assert sanitize_filename("keep-this_one") == "keep-this_one"
    assert study_dir_name("1.2.3") == "study_1_2_3"
