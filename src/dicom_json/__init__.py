"""DICOM to JSON conversion toolkit."""

__version__ = "1.0.0"
