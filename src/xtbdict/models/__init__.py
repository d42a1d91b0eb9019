"""Pydantic models shared by the build pipeline."""

from .pipeline import Completed, PipelineStage, StageResult
from .source import (
    IMAGE_BUNDLE_SUFFIX,
    TEXT_BUNDLE_SUFFIX,
    FederatedDump,
    LocalFile,
    PackagedExport,
    SecondaryDump,
    SourceSpec,
)

__all__ = [
    "Completed",
    "FederatedDump",
    "IMAGE_BUNDLE_SUFFIX",
    "LocalFile",
    "PackagedExport",
    "PipelineStage",
    "SecondaryDump",
    "SourceSpec",
    "StageResult",
    "TEXT_BUNDLE_SUFFIX",
]
