from __future__ import annotations

import json
from pathlib import Path

import pydicom
from pydicom.dataset import FileDataset, FileMetaDataset
from typer.testing import CliRunner

from dicom_json import __version__
from dicom_json.cli.app import app


runner = CliRunner()


def _create_dicom(path: Path, sop_suffix: str) -> Path:
    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.4"
    file_meta.MediaStorageSOPInstanceUID = f"1.2.826.0.1.3680043.2.1125.{sop_suffix}"
    file_meta.TransferSyntaxUID = pydicom.uid.ImplicitVRLittleEndian

    ds = FileDataset(str(path), {}, file_meta=file_meta, preamble=b"\0" * 128)
    ds.PatientID = "CLI-1"
    ds.StudyInstanceUID = "9.8.7"
    ds.SeriesInstanceUID = "9.8.7.1"
    ds.SOPInstanceUID = file_meta.MediaStorageSOPInstanceUID
    ds.SOPClassUID = file_meta.MediaStorageSOPClassUID
    ds.Modality = "MR"
    ds.save_as(path, enforce_file_format=True)
    return path


def test_convert_directory(tmp_path):
    source = tmp_path / "in"
    source.mkdir()
    _create_dicom(source / "one.dcm", "1")
    out = tmp_path / "out"

    result = runner.invoke(app, [str(source), "--output", str(out), "--format", "basic", "--pretty"])

    assert result.exit_code == 0, result.output
    document = json.loads((out / "dicom_data.json").read_text(encoding="utf-8"))
    assert document["format"] == "basic"
    assert document["total_files"] == 1


def test_partial_failures_still_succeed(tmp_path):
    source = tmp_path / "in"
    source.mkdir()
    _create_dicom(source / "one.dcm", "1")
    (source / "bad.dcm").write_bytes(b"junk")
    out = tmp_path / "out"

    result = runner.invoke(app, [str(source), "-o", str(out), "--organize-hierarchy"])

    assert result.exit_code == 0, result.output
    document = json.loads((out / "study_9_8_7" / "study.json").read_text(encoding="utf-8"))
    assert document["processing_info"]["failed_files"] == 1


def test_missing_input_exits_with_error(tmp_path):
    result = runner.invoke(app, [str(tmp_path / "missing"), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Error: Input path does not exist" in result.output


def test_empty_directory_exits_with_error(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()

    result = runner.invoke(app, [str(empty), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "No DICOM files found" in result.output


def test_version_flag():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
