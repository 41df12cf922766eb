"""Custom conversion-related exceptions."""

from __future__ import annotations

from pathlib import Path


class ConversionError(RuntimeError):
    """Fatal error that aborts a conversion run."""


class InputNotFoundError(ConversionError):
    """Raised when the input path does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Input path does not exist: {self.path}")


class NoCandidatesError(ConversionError):
    """Raised when discovery yields no DICOM candidates."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"No DICOM files found in the specified input: {self.path}")


class ArchiveError(ConversionError):
    """Raised when an input archive cannot be opened, read or extracted."""


class OutputError(ConversionError):
    """Raised when results cannot be serialized or written."""


class InstanceExtractionError(RuntimeError):
    """Per-file failure; the batch continues without this file."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        self.path = Path(path)
        base = f"Failed to process {self.path}"
        if message:
            base = f"{base}: {message}"
        super().__init__(base)
