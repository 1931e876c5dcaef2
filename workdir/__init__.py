"""Sharded fuzzing work-directory layout."""

from .enumeration import enumerate_raw_coverage_profiles, list_shard_files, shard_index_of  # noqa: F401
from .layout import (  # noqa: F401
    InvalidAnnotationError,
    ReportKind,
    ShardedFileGroup,
    WorkDir,
    normalize_annotation,
)

__all__ = [
    "InvalidAnnotationError",
    "ReportKind",
    "ShardedFileGroup",
    "WorkDir",
    "normalize_annotation",
    "enumerate_raw_coverage_profiles",
    "list_shard_files",
    "shard_index_of",
]
