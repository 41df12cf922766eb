"""DICOM file discovery and metadata extraction."""
