"""Conversion orchestrator."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import ConversionConfig
from .errors import NoCandidatesError
from .extract.process_pool import FileFailure, run_extraction
from .extract.progress import ProgressCallback
from .extract.scanner import discover_files
from .models import Instance
from .output.hierarchy import organize_studies
from .output.renderers import render_flat, render_study
from .output.summary import RunStamp, build_processing_info, files_with_pixel_data, unique_modalities
from .output.writer import ensure_directory, write_flat, write_studies


logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    instances: List[Instance]
    failures: List[FileFailure] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)

    def summary(self) -> Dict[str, object]:
        return {
            "total_instances": len(self.instances),
            "failed_files": len(self.failures),
            "files_with_pixel_data": files_with_pixel_data(self.instances),
            "unique_modalities": unique_modalities(self.instances),
        }


def convert(
    input_path: Path,
    config: ConversionConfig,
    *,
    stamp: Optional[RunStamp] = None,
    progress: Optional[ProgressCallback] = None,
) -> ConversionResult:
    """Discover, extract, render and write DICOM metadata for *input_path*.

    Raises :class:`~dicom_json.errors.ConversionError` subclasses on fatal
    errors; files that fail extraction are reported in the result instead.
    """
    stamp = stamp or RunStamp()
    started = time.perf_counter()
    logger.info(
        "Conversion start input=%s output=%s format=%s parallel=%s hierarchy=%s",
        input_path,
        config.output_dir,
        config.output_format.value,
        config.parallel,
        config.organize_hierarchy,
    )

    output_dir = ensure_directory(Path(config.output_dir))
    discovery = discover_files(Path(input_path), config.max_depth, config.staging_root)
    try:
        if not discovery.candidates:
            raise NoCandidatesError(input_path)
        logger.info("Found %d DICOM files to process", len(discovery.candidates))

        batch = run_extraction(discovery.candidates, config, progress)
        total_files = len(discovery.candidates)

        if config.organize_hierarchy:
            studies = organize_studies(batch.instances, stamp, total_files)
            documents = {uid: render_study(study, config.output_format) for uid, study in studies.items()}
            written = write_studies(documents, output_dir, config.pretty)
        else:
            info = build_processing_info(batch.instances, stamp, total_files)
            document = render_flat(batch.instances, config.output_format, info)
            written = [write_flat(document, output_dir, config.pretty)]
    finally:
        discovery.cleanup()

    logger.info(
        "Conversion finished instances=%d failed=%d files_written=%d elapsed=%.2fs",
        len(batch.instances),
        len(batch.failures),
        len(written),
        time.perf_counter() - started,
    )
    return ConversionResult(instances=batch.instances, failures=batch.failures, written=written)
