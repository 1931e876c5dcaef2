"""Path address scheme of a sharded fuzzing work directory.

Every shard process of a campaign writes into one shared directory tree.
Names are a pure function of the shard's identity, so concurrently running
shards never collide and a merge job can address any shard's files::

    root/corpus.NNNNNN
    root/distilled-B.NNNNNN
    root/crashes/
    root/B-H/                              (coverage dir)
    root/B-H/binary-info/
    root/B-H/features.NNNNNN
    root/B-H/distilled-features-B.NNNNNN
    root/B-H/clang_coverage.NNNNNN.%m.profraw
    root/B-H/clang_coverage.profdata
    root/<report-prefix>-B.NNNNNN[.annotation][.ext]
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from workdir_shared.constants import (
    ANNOTATION_SEPARATOR,
    BINARY_INFO_DIR_NAME,
    CLANG_COVERAGE_STEM,
    CORPUS_SHARD_STEM,
    CRASH_REPRODUCER_DIR_NAME,
    GLOB_MAGIC_CHARS,
    GLOB_WILDCARD,
    INDEXED_PROFILE_EXTENSION,
    RAW_PROFILE_EXTENSION,
    RAW_PROFILE_MODULE_PLACEHOLDER,
)
from workdir_shared.sharding import encode_shard_index, split_corpus_shard_path

if TYPE_CHECKING:
    from .config import Environment


class InvalidAnnotationError(ValueError):
    """Raised when a report annotation starts with the reserved separator."""


class ReportKind(enum.Enum):
    """Per-shard report files stored at the root of the work directory."""

    COVERAGE_REPORT = ("coverage-report", ".txt")
    CORPUS_STATS = ("corpus-stats", ".json")
    FUZZING_STATS = ("fuzzing-stats", ".csv")
    RUSAGE_REPORT = ("rusage-report", ".txt")
    SOURCE_COVERAGE_REPORT = ("source-coverage-report", "")

    @property
    def prefix(self) -> str:
        return self.value[0]

    @property
    def extension(self) -> str:
        return self.value[1]


def normalize_annotation(annotation: str) -> str:
    """Return ``annotation`` as a dotted file name segment.

    Args:
        annotation: Free-text qualifier, possibly empty.

    Returns:
        str: ``""`` for an empty annotation, otherwise ``"." + annotation``.

    Raises:
        InvalidAnnotationError: If ``annotation`` already starts with ``.``.
    """
    if not annotation:
        return ""
    if annotation.startswith(ANNOTATION_SEPARATOR):
        raise InvalidAnnotationError(
            f"Annotation must not start with {ANNOTATION_SEPARATOR!r}: {annotation!r}"
        )
    return f"{ANNOTATION_SEPARATOR}{annotation}"


@dataclass(frozen=True)
class ShardedFileGroup:
    """One artifact kind written as one file per shard.

    File names are ``base_dir/name_prefix + NNNNNN``.
    """

    base_dir: str
    name_prefix: str
    own_shard_index: int

    def __post_init__(self):
        if any(ch in self.name_prefix for ch in GLOB_MAGIC_CHARS):
            raise ValueError(
                f"Sharded file prefix must not contain glob characters: {self.name_prefix!r}"
            )

    def shard_path(self, shard_index: int) -> str:
        """Return the path of the file owned by ``shard_index``."""
        return os.path.join(self.base_dir, self.name_prefix + encode_shard_index(shard_index))

    def own_shard_path(self) -> str:
        """Return the path of the file owned by this process's shard."""
        return self.shard_path(self.own_shard_index)

    def all_shards_glob(self) -> str:
        """Return a glob pattern matching the files of every shard."""
        return os.path.join(self.base_dir, self.name_prefix + GLOB_WILDCARD)


@dataclass(frozen=True)
class WorkDir:
    """Identity of one shard of one build inside a campaign work directory.

    All path methods are pure functions of the four fields.
    """

    root_dir: str
    binary_name: str
    binary_hash: str
    shard_index: int

    def __post_init__(self):
        if isinstance(self.shard_index, bool) or not isinstance(self.shard_index, int):
            raise ValueError(f"Shard index must be an integer, got {self.shard_index!r}")
        if self.shard_index < 0:
            raise ValueError(f"Shard index must be non-negative, got {self.shard_index}")

    @classmethod
    def from_environment(cls, env: "Environment") -> "WorkDir":
        """Build the identity from a resolved shard configuration.

        The fields are copied out of ``env``; the returned value does not keep
        a reference to it.

        Args:
            env: Configuration of the current shard process.

        Returns:
            WorkDir: Identity of the current shard.
        """
        return cls(
            root_dir=env.workdir,
            binary_name=env.binary_name,
            binary_hash=env.binary_hash,
            shard_index=env.my_shard_index,
        )

    @classmethod
    def from_corpus_shard_path(
        cls, corpus_shard_path: str, binary_name: str, binary_hash: str
    ) -> "WorkDir":
        """Recover the identity of the shard that owns a corpus file.

        Args:
            corpus_shard_path: Path produced by ``corpus_files().shard_path(i)``.
            binary_name: Name of the binary, supplied out of band.
            binary_hash: Hash of the binary, supplied out of band.

        Returns:
            WorkDir: Identity rooted at the corpus file's directory.

        Raises:
            MalformedShardPathError: If the path is not a corpus shard path.
        """
        root_dir, shard_index = split_corpus_shard_path(corpus_shard_path)
        return cls(
            root_dir=root_dir,
            binary_name=binary_name,
            binary_hash=binary_hash,
            shard_index=shard_index,
        )

    # Directories

    def coverage_dir_path(self) -> str:
        """Per-build directory, so builds sharing a root never collide."""
        return os.path.join(self.root_dir, f"{self.binary_name}-{self.binary_hash}")

    def crash_reproducer_dir_path(self) -> str:
        """Crash directory shared by all binaries and shards of the campaign."""
        return os.path.join(self.root_dir, CRASH_REPRODUCER_DIR_NAME)

    def binary_info_dir_path(self) -> str:
        return os.path.join(self.coverage_dir_path(), BINARY_INFO_DIR_NAME)

    # Sharded files

    def corpus_files(self) -> ShardedFileGroup:
        return ShardedFileGroup(self.root_dir, f"{CORPUS_SHARD_STEM}.", self.shard_index)

    def distilled_corpus_files(self) -> ShardedFileGroup:
        return ShardedFileGroup(self.root_dir, f"distilled-{self.binary_name}.", self.shard_index)

    def features_files(self) -> ShardedFileGroup:
        return ShardedFileGroup(self.coverage_dir_path(), "features.", self.shard_index)

    def distilled_features_files(self) -> ShardedFileGroup:
        return ShardedFileGroup(
            self.coverage_dir_path(),
            f"distilled-features-{self.binary_name}.",
            self.shard_index,
        )

    # Reports

    def report_path(self, kind: ReportKind, annotation: str = "") -> str:
        """Return the path of this shard's report of the given kind.

        Args:
            kind: Report kind selecting the name prefix and extension.
            annotation: Optional qualifier; must not start with ``.``.

        Returns:
            str: ``root/<prefix>-<binary>.<NNNNNN>[.<annotation>]<ext>``.
        """
        name = (
            f"{kind.prefix}-{self.binary_name}."
            f"{encode_shard_index(self.shard_index)}"
            f"{normalize_annotation(annotation)}{kind.extension}"
        )
        return os.path.join(self.root_dir, name)

    def coverage_report_path(self, annotation: str = "") -> str:
        return self.report_path(ReportKind.COVERAGE_REPORT, annotation)

    def corpus_stats_path(self, annotation: str = "") -> str:
        return self.report_path(ReportKind.CORPUS_STATS, annotation)

    def fuzzing_stats_path(self, annotation: str = "") -> str:
        return self.report_path(ReportKind.FUZZING_STATS, annotation)

    def rusage_report_path(self, annotation: str = "") -> str:
        return self.report_path(ReportKind.RUSAGE_REPORT, annotation)

    def source_based_coverage_report_path(self, annotation: str = "") -> str:
        return self.report_path(ReportKind.SOURCE_COVERAGE_REPORT, annotation)

    # Source-based coverage profiles

    def source_based_coverage_raw_profile_path(self) -> str:
        """Raw profile path handed to the instrumentation runtime.

        ``%m`` is expanded by the runtime to its module signature, which lets
        it merge into the same file across runs of one build.
        """
        name = (
            f"{CLANG_COVERAGE_STEM}.{encode_shard_index(self.shard_index)}."
            f"{RAW_PROFILE_MODULE_PLACEHOLDER}{RAW_PROFILE_EXTENSION}"
        )
        return os.path.join(self.coverage_dir_path(), name)

    def source_based_coverage_indexed_profile_path(self) -> str:
        return os.path.join(
            self.coverage_dir_path(), f"{CLANG_COVERAGE_STEM}{INDEXED_PROFILE_EXTENSION}"
        )


__all__ = ["InvalidAnnotationError", "ReportKind", "ShardedFileGroup", "WorkDir", "normalize_annotation"]
