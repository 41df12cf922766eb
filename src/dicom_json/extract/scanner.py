"""Filesystem and archive discovery of candidate DICOM files."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Optional

from ..errors import ArchiveError, InputNotFoundError


logger = logging.getLogger(__name__)


DICOM_EXTENSIONS = frozenset({".dcm", ".dicom", ".ima", ".img"})
ARCHIVE_EXTENSIONS = frozenset({".zip"})
DICOM_MAGIC = b"DICM"
_PREAMBLE_LENGTH = 128


@dataclass
class DiscoveryResult:
    candidates: List[Path]
    staging_dir: Optional[Path] = None

    def cleanup(self) -> None:
        if self.staging_dir is None:
            return
        shutil.rmtree(self.staging_dir, ignore_errors=True)
        logger.debug("Removed archive staging directory %s", self.staging_dir)
        self.staging_dir = None


def is_likely_dicom_file(path: Path) -> bool:
    """Extension match, or the ``DICM`` signature after the 128-byte preamble."""
    if path.suffix.lower() in DICOM_EXTENSIONS:
        return True
    try:
        with open(path, "rb") as handle:
            header = handle.read(_PREAMBLE_LENGTH + len(DICOM_MAGIC))
    except OSError:
        return False
    return header[_PREAMBLE_LENGTH:] == DICOM_MAGIC


def _walk_files(root: Path, max_depth: int, depth: int = 0) -> Iterator[Path]:
    if depth >= max_depth:
        return
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", root, exc)
        return
    for entry in entries:
        try:
            if entry.is_file(follow_symlinks=False):
                yield Path(entry.path)
            elif entry.is_dir(follow_symlinks=False):
                yield from _walk_files(Path(entry.path), max_depth, depth + 1)
        except FileNotFoundError:
            # Race: entry vanished after scandir listed it.
            continue


def _staging_target(staging_dir: Path, member_name: str) -> Path:
    parts = PurePosixPath(member_name.replace("\\", "/")).parts
    if not parts or member_name.startswith(("/", "\\")) or ".." in parts or ":" in parts[0]:
        raise ArchiveError(f"Refusing to extract archive entry outside staging directory: {member_name}")
    return staging_dir.joinpath(*parts)


def extract_archive(archive_path: Path, staging_root: Optional[Path] = None) -> DiscoveryResult:
    """Unpack every file entry of a ZIP archive and keep the likely DICOM ones."""
    parent = Path(staging_root) if staging_root is not None else Path(tempfile.gettempdir())
    staging_dir = parent / f"dicom_extract_{uuid.uuid4()}"
    result = DiscoveryResult(candidates=[], staging_dir=staging_dir)
    try:
        staging_dir.mkdir(parents=True, exist_ok=False)
        with zipfile.ZipFile(archive_path) as archive:
            for member in archive.infolist():
                if member.is_dir():
                    continue
                target = _staging_target(staging_dir, member.filename)
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(member) as source, open(target, "wb") as sink:
                    shutil.copyfileobj(source, sink)
                if is_likely_dicom_file(target):
                    result.candidates.append(target)
    except ArchiveError:
        result.cleanup()
        raise
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, RuntimeError, EOFError) as exc:
        result.cleanup()
        raise ArchiveError(f"Failed to extract archive {archive_path}: {exc}") from exc

    logger.info(
        "Extracted archive %s into %s candidates=%d",
        archive_path,
        staging_dir,
        len(result.candidates),
    )
    return result


def discover_files(root: Path, max_depth: int = 10, staging_root: Optional[Path] = None) -> DiscoveryResult:
    """Locate candidate DICOM files under *root*.

    A directly named file is always a candidate unless it is an archive; only
    files found by walking a directory or unpacking an archive are sniffed.
    """
    root = Path(root)
    if root.is_file():
        if root.suffix.lower() in ARCHIVE_EXTENSIONS:
            return extract_archive(root, staging_root)
        return DiscoveryResult(candidates=[root])
    if root.is_dir():
        candidates = [path for path in _walk_files(root, max_depth) if is_likely_dicom_file(path)]
        logger.debug("Discovered %d candidate files under %s", len(candidates), root)
        return DiscoveryResult(candidates=candidates)
    raise InputNotFoundError(root)
