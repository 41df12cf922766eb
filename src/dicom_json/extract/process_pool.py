"""Sequential and process-pool execution of per-file extraction.

This is the only place where per-file failures are absorbed: a file that
cannot be extracted is recorded as a :class:`FileFailure` and left out of the
results, and the batch carries on.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config import ConversionConfig, OutputFormat
from ..errors import InstanceExtractionError
from ..models import Instance
from .progress import ExtractionProgressTracker, ProgressCallback
from .worker import extract_instance


logger = logging.getLogger(__name__)


# Global worker state (initialized per process)
_WORKER_INCLUDE_PRIVATE: bool = False
_WORKER_FORMAT: OutputFormat = OutputFormat.COMPREHENSIVE


def _worker_init(include_private: bool, output_format: OutputFormat) -> None:
    """Install extraction settings once per worker process."""
    global _WORKER_INCLUDE_PRIVATE, _WORKER_FORMAT
    _WORKER_INCLUDE_PRIVATE = include_private
    _WORKER_FORMAT = output_format


@dataclass
class FileFailure:
    path: Path
    message: str


@dataclass
class FileOutcome:
    path: Path
    instance: Optional[Instance] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    instances: List[Instance] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.instances) + len(self.failures)


def _process_file(path: Path, include_private: bool, output_format: OutputFormat) -> FileOutcome:
    try:
        instance = extract_instance(path, include_private=include_private, output_format=output_format)
    except InstanceExtractionError as exc:
        return FileOutcome(path=path, error=str(exc))
    return FileOutcome(path=path, instance=instance)


def _process_file_worker(path: Path) -> FileOutcome:
    """Pool entry point; reads the settings installed by :func:`_worker_init`."""
    return _process_file(path, _WORKER_INCLUDE_PRIVATE, _WORKER_FORMAT)


def _collect(outcome: FileOutcome, result: BatchResult, verbose: bool) -> None:
    if outcome.instance is not None:
        result.instances.append(outcome.instance)
        return
    message = outcome.error or f"Failed to process {outcome.path}"
    result.failures.append(FileFailure(path=outcome.path, message=message))
    if verbose:
        logger.warning(message)
    else:
        logger.debug(message)


def extract_sequential(
    paths: Sequence[Path],
    config: ConversionConfig,
    tracker: Optional[ExtractionProgressTracker] = None,
) -> BatchResult:
    result = BatchResult()
    for path in paths:
        outcome = _process_file(Path(path), config.include_private, config.output_format)
        _collect(outcome, result, config.verbose)
        if tracker:
            tracker.advance()
    return result


def extract_parallel(
    paths: Sequence[Path],
    config: ConversionConfig,
    tracker: Optional[ExtractionProgressTracker] = None,
) -> BatchResult:
    """Extract files with a process pool; results arrive in completion order."""
    max_workers = config.workers or os.cpu_count() or 1
    logger.info("Starting parallel extraction with %d worker processes", max_workers)

    result = BatchResult()
    with ProcessPoolExecutor(
        max_workers=max_workers,
        initializer=_worker_init,
        initargs=(config.include_private, config.output_format),
    ) as executor:
        futures: Dict[Future, Path] = {
            executor.submit(_process_file_worker, Path(path)): Path(path) for path in paths
        }
        for future in as_completed(futures):
            path = futures[future]
            try:
                outcome = future.result()
            except Exception as exc:
                # Worker process died or the result could not be transferred back.
                outcome = FileOutcome(path=path, error=f"Failed to process {path}: {exc}")
            _collect(outcome, result, config.verbose)
            if tracker:
                tracker.advance()
    return result


def run_extraction(
    paths: Sequence[Path],
    config: ConversionConfig,
    progress: Optional[ProgressCallback] = None,
) -> BatchResult:
    """Drive the extractor over *paths*, sequentially or in parallel."""
    tracker = ExtractionProgressTracker(total=len(paths), send=progress)
    tracker.start()
    if config.parallel and len(paths) > 1:
        result = extract_parallel(paths, config, tracker)
    else:
        result = extract_sequential(paths, config, tracker)
    logger.info(
        "Extraction finished files=%d instances=%d failed=%d",
        len(paths),
        len(result.instances),
        len(result.failures),
    )
    return result
