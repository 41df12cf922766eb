"""Configuration models for DICOM to JSON conversion."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    BASIC = "basic"
    COMPREHENSIVE = "comprehensive"
    MEDICAL = "medical"
    RAW = "raw"


class ConversionConfig(BaseModel):
    output_dir: Path = Field(default_factory=Path.cwd)
    output_format: OutputFormat = OutputFormat.COMPREHENSIVE
    pretty: bool = False
    parallel: bool = Field(
        default=False,
        description="Use ProcessPoolExecutor to extract files concurrently",
    )
    include_private: bool = Field(default=False, description="Keep tags with an odd group number")
    organize_hierarchy: bool = Field(
        default=False,
        description="Write one study.json per study instead of a single dicom_data.json",
    )
    max_depth: int = Field(default=10, ge=0, description="Maximum directory walk depth")
    workers: Optional[int] = Field(
        default=None,
        ge=1,
        le=128,
        description="Number of worker processes (defaults to os.cpu_count() if None)",
    )
    staging_root: Optional[Path] = Field(
        default=None,
        description="Parent directory for archive staging (defaults to the system temp dir)",
    )
    verbose: bool = False

