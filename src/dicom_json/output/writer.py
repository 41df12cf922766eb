"""JSON persistence of rendered documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..errors import OutputError
from .hierarchy import study_dir_name


logger = logging.getLogger(__name__)


FLAT_FILENAME = "dicom_data.json"
STUDY_FILENAME = "study.json"


def ensure_directory(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Cannot create output directory {path}: {exc}") from exc
    return path


def dumps(document: Any, pretty: bool = False) -> str:
    try:
        if pretty:
            return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise OutputError(f"Failed to serialize JSON output: {exc}") from exc


def write_document(document: Any, path: Path, pretty: bool = False) -> Path:
    content = dumps(document, pretty)
    ensure_directory(path.parent)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Cannot write {path}: {exc}") from exc
    logger.info("Wrote %s bytes=%d", path, len(content))
    return path


def write_flat(document: Any, output_dir: Path, pretty: bool = False) -> Path:
    return write_document(document, Path(output_dir) / FLAT_FILENAME, pretty)


def write_studies(documents: Dict[str, Any], output_dir: Path, pretty: bool = False) -> List[Path]:
    """Write one ``study_<uid>/study.json`` per study document."""
    written: List[Path] = []
    for study_uid, document in documents.items():
        target = Path(output_dir) / study_dir_name(study_uid) / STUDY_FILENAME
        written.append(write_document(document, target, pretty))
    return written
