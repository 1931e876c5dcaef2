"""Discovery of work-directory artifacts that exist on disk right now.

Results reflect one snapshot of the filesystem. Other shards may be writing
concurrently, so a listed file can be incomplete or gone by the time it is
read; callers treat both as transient.
"""

from __future__ import annotations

import glob
import os
from typing import List

from workdir_shared.constants import GLOB_WILDCARD, RAW_PROFILE_EXTENSION
from workdir_shared.sharding import MalformedShardPathError, decode_shard_index

from .layout import ShardedFileGroup, WorkDir
from .logging_config import log


def enumerate_raw_coverage_profiles(workdir: WorkDir) -> List[str]:
    """List the raw coverage profiles in the coverage directory.

    The instrumentation runtime picks part of the file name itself, so the
    profiles can only be found by scanning. A missing or unreadable directory
    is logged and yields no profiles.

    Args:
        workdir: Identity whose coverage directory is scanned.

    Returns:
        List[str]: Paths of regular ``.profraw`` files, in no particular order.
    """
    dir_path = workdir.coverage_dir_path()
    try:
        entries = os.scandir(dir_path)
    except OSError as exc:
        log.error("Failed to access coverage dir '%s': %s", dir_path, exc)
        return []

    raw_profiles: List[str] = []
    with entries:
        for entry in entries:
            if entry.is_file() and os.path.splitext(entry.name)[1] == RAW_PROFILE_EXTENSION:
                raw_profiles.append(entry.path)
    return raw_profiles


def shard_index_of(group: ShardedFileGroup, path: str) -> int:
    """Return the shard index encoded in a path of ``group``.

    Args:
        group: File group the path is expected to belong to.
        path: Path as produced by ``group.shard_path``.

    Returns:
        int: Decoded shard index.

    Raises:
        MalformedShardPathError: If ``path`` is not a shard file of ``group``.
    """
    prefix = os.path.join(group.base_dir, group.name_prefix)
    if not path.startswith(prefix):
        raise MalformedShardPathError(f"Path {path} does not start with {prefix}")
    return decode_shard_index(path[len(prefix):])


def list_shard_files(group: ShardedFileGroup) -> List[str]:
    """List the existing files of every shard of ``group``, ordered by shard index.

    Names that match the glob but do not end in a valid shard index (e.g.
    temporary files) are skipped.

    Args:
        group: File group to expand.

    Returns:
        List[str]: Existing shard files.
    """
    # The base directory is matched literally; only the shard suffix is a wildcard.
    pattern = os.path.join(glob.escape(group.base_dir), group.name_prefix + GLOB_WILDCARD)
    indexed = []
    for path in glob.glob(pattern):
        try:
            indexed.append((shard_index_of(group, path), path))
        except MalformedShardPathError:
            log.debug("Skipping non-shard file %s", path)
    indexed.sort()
    return [path for _, path in indexed]


__all__ = ["enumerate_raw_coverage_profiles", "list_shard_files", "shard_index_of"]
