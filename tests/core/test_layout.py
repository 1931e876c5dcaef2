import fnmatch
import os

import pytest

from workdir.config import Environment
from workdir.layout import (
    InvalidAnnotationError,
    ReportKind,
    ShardedFileGroup,
    WorkDir,
    normalize_annotation,
)
from workdir_shared.sharding import MalformedShardPathError, ShardIndexOverflowError

ROOT = os.path.join(os.sep, "data", "run1")


@pytest.fixture
def workdir():
    return WorkDir(root_dir=ROOT, binary_name="target", binary_hash="abcd1234", shard_index=7)


def test_concrete_scenario(workdir):
    """Check the documented example identity end to end."""
    corpus_path = workdir.corpus_files().own_shard_path()
    assert corpus_path == os.path.join(ROOT, "corpus.000007")
    assert workdir.coverage_dir_path() == os.path.join(ROOT, "target-abcd1234")

    decoded = WorkDir.from_corpus_shard_path(corpus_path, "target", "abcd1234")
    assert decoded == workdir
    assert decoded.shard_index == 7
    assert decoded.root_dir == ROOT


def test_directories(workdir):
    coverage_dir = os.path.join(ROOT, "target-abcd1234")
    assert workdir.crash_reproducer_dir_path() == os.path.join(ROOT, "crashes")
    assert workdir.binary_info_dir_path() == os.path.join(coverage_dir, "binary-info")


def test_sharded_file_groups(workdir):
    coverage_dir = os.path.join(ROOT, "target-abcd1234")
    assert workdir.corpus_files().shard_path(3) == os.path.join(ROOT, "corpus.000003")
    assert workdir.distilled_corpus_files().own_shard_path() == os.path.join(
        ROOT, "distilled-target.000007"
    )
    assert workdir.features_files().own_shard_path() == os.path.join(coverage_dir, "features.000007")
    assert workdir.distilled_features_files().shard_path(12) == os.path.join(
        coverage_dir, "distilled-features-target.000012"
    )


def test_all_shards_glob(workdir):
    coverage_dir = os.path.join(ROOT, "target-abcd1234")
    assert workdir.corpus_files().all_shards_glob() == os.path.join(ROOT, "corpus.*")
    assert workdir.distilled_features_files().all_shards_glob() == os.path.join(
        coverage_dir, "distilled-features-target.*"
    )


def test_glob_matches_own_group_only(workdir):
    groups = [
        workdir.corpus_files(),
        workdir.distilled_corpus_files(),
        workdir.features_files(),
        workdir.distilled_features_files(),
    ]
    for group in groups:
        pattern = group.all_shards_glob()
        for other in groups:
            for shard_index in (0, 7, 999999):
                matched = fnmatch.fnmatchcase(other.shard_path(shard_index), pattern)
                assert matched == (other is group)


def test_shard_paths_are_distinct_and_fixed_width(workdir):
    group = workdir.corpus_files()
    paths = [group.shard_path(i) for i in range(0, 1000, 7)] + [group.shard_path(999999)]
    assert len(set(paths)) == len(paths)
    for path in paths:
        suffix = path[-6:]
        assert suffix.isdigit()
        assert not path[-7].isdigit()


def test_shard_path_overflow_is_rejected(workdir):
    with pytest.raises(ShardIndexOverflowError):
        workdir.corpus_files().shard_path(1_000_000)
    with pytest.raises(ShardIndexOverflowError):
        WorkDir(ROOT, "target", "abcd1234", 1_000_000).coverage_report_path()


def test_corpus_path_round_trip():
    for root in (ROOT, os.path.join("relative", "dir"), ""):
        for shard_index in (0, 1, 42, 999999):
            original = WorkDir(root, "bin", "ffff", shard_index)
            path = original.corpus_files().own_shard_path()
            assert WorkDir.from_corpus_shard_path(path, "bin", "ffff") == original


def test_from_corpus_shard_path_rejects_other_files(workdir):
    with pytest.raises(MalformedShardPathError):
        WorkDir.from_corpus_shard_path(workdir.features_files().own_shard_path(), "target", "abcd1234")
    with pytest.raises(MalformedShardPathError):
        WorkDir.from_corpus_shard_path(os.path.join(ROOT, "corpus.7"), "target", "abcd1234")


def test_from_environment():
    env = Environment(workdir=ROOT, binary_name="target", binary_hash="abcd1234", my_shard_index=3)
    assert WorkDir.from_environment(env) == WorkDir(ROOT, "target", "abcd1234", 3)


@pytest.mark.parametrize("bad", [-1, "3", 2.0, True])
def test_invalid_shard_index_rejected(bad):
    with pytest.raises(ValueError):
        WorkDir(ROOT, "target", "abcd1234", bad)


def test_report_paths(workdir):
    assert workdir.coverage_report_path() == os.path.join(ROOT, "coverage-report-target.000007.txt")
    assert workdir.corpus_stats_path() == os.path.join(ROOT, "corpus-stats-target.000007.json")
    assert workdir.fuzzing_stats_path() == os.path.join(ROOT, "fuzzing-stats-target.000007.csv")
    assert workdir.rusage_report_path() == os.path.join(ROOT, "rusage-report-target.000007.txt")
    assert workdir.source_based_coverage_report_path() == os.path.join(
        ROOT, "source-coverage-report-target.000007"
    )


def test_report_paths_with_annotation(workdir):
    assert workdir.coverage_report_path("initial") == os.path.join(
        ROOT, "coverage-report-target.000007.initial.txt"
    )
    assert workdir.report_path(ReportKind.CORPUS_STATS, "latest") == os.path.join(
        ROOT, "corpus-stats-target.000007.latest.json"
    )
    assert workdir.source_based_coverage_report_path("foo") == os.path.join(
        ROOT, "source-coverage-report-target.000007.foo"
    )


def test_report_path_rejects_dotted_annotation(workdir):
    with pytest.raises(InvalidAnnotationError):
        workdir.fuzzing_stats_path(".foo")


def test_normalize_annotation():
    assert normalize_annotation("") == ""
    assert normalize_annotation("foo") == ".foo"
    assert normalize_annotation("foo.bar") == ".foo.bar"
    with pytest.raises(InvalidAnnotationError):
        normalize_annotation(".foo")


def test_profile_paths(workdir):
    coverage_dir = os.path.join(ROOT, "target-abcd1234")
    assert workdir.source_based_coverage_raw_profile_path() == os.path.join(
        coverage_dir, "clang_coverage.000007.%m.profraw"
    )
    assert workdir.source_based_coverage_indexed_profile_path() == os.path.join(
        coverage_dir, "clang_coverage.profdata"
    )


def test_indexed_profile_path_is_shared_across_shards(workdir):
    other = WorkDir(ROOT, "target", "abcd1234", 8)
    assert other.source_based_coverage_indexed_profile_path() == workdir.source_based_coverage_indexed_profile_path()
    assert other.source_based_coverage_raw_profile_path() != workdir.source_based_coverage_raw_profile_path()


def test_builds_sharing_root_do_not_collide(workdir):
    other_build = WorkDir(ROOT, "target", "ffff0000", 7)
    assert other_build.coverage_dir_path() != workdir.coverage_dir_path()
    assert other_build.features_files().own_shard_path() != workdir.features_files().own_shard_path()
    assert other_build.crash_reproducer_dir_path() == workdir.crash_reproducer_dir_path()


@pytest.mark.parametrize("prefix", ["corpus*.", "feat?.", "x[0]."])
def test_sharded_file_group_rejects_glob_prefix(prefix):
    with pytest.raises(ValueError):
        ShardedFileGroup(ROOT, prefix, 0)
