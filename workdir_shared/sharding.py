"""Shard index codec for work-directory file names.

A shard index is rendered as a fixed-width, zero-padded decimal segment so
that file names sort naturally and a glob such as ``corpus.*`` can be mapped
back to shard indices. Encoding and decoding must use the same width.
"""

from __future__ import annotations

import os

from .constants import CORPUS_SHARD_STEM, DIGITS_IN_SHARD_INDEX


class MalformedShardPathError(ValueError):
    """Raised when a path segment is not a shard index of the expected width."""


class ShardIndexOverflowError(ValueError):
    """Raised when a shard index does not fit into the fixed digit width."""


def encode_shard_index(shard_index: int, width: int = DIGITS_IN_SHARD_INDEX) -> str:
    """Render a shard index as a zero-padded decimal segment.

    Args:
        shard_index: Non-negative shard index.
        width: Exact number of digits of the result.

    Returns:
        str: Decimal string of exactly ``width`` characters, e.g. ``000007``.

    Raises:
        ValueError: If ``shard_index`` is not a non-negative integer.
        ShardIndexOverflowError: If the index needs more than ``width`` digits.
    """
    if isinstance(shard_index, bool) or not isinstance(shard_index, int):
        raise ValueError(f"Shard index must be an integer, got {shard_index!r}")
    if shard_index < 0:
        raise ValueError(f"Shard index must be non-negative, got {shard_index}")
    digits = str(shard_index)
    if len(digits) > width:
        raise ShardIndexOverflowError(
            f"Shard index {shard_index} does not fit into {width} digits"
        )
    return digits.zfill(width)


def decode_shard_index(segment: str, width: int = DIGITS_IN_SHARD_INDEX) -> int:
    """Parse a zero-padded shard index segment.

    Args:
        segment: Candidate segment, e.g. the extension of ``corpus.000007``
            without its leading dot.
        width: Exact number of digits expected.

    Returns:
        int: Decoded shard index.

    Raises:
        MalformedShardPathError: If ``segment`` is not exactly ``width`` ASCII digits.
    """
    if len(segment) != width:
        raise MalformedShardPathError(
            f"Shard index segment {segment!r} must have exactly {width} digits"
        )
    if not (segment.isascii() and segment.isdigit()):
        raise MalformedShardPathError(
            f"Shard index segment {segment!r} must contain only decimal digits"
        )
    return int(segment)


def split_corpus_shard_path(path: str, width: int = DIGITS_IN_SHARD_INDEX) -> tuple[str, int]:
    """Split a corpus shard path into its directory and shard index.

    Args:
        path: Path of the form ``<dir>/corpus.<NNNNNN>``.
        width: Digit width the path was generated with.

    Returns:
        tuple[str, int]: Containing directory and decoded shard index.

    Raises:
        MalformedShardPathError: If the stem is not ``corpus`` or the extension
            is not a valid shard index.
    """
    directory, basename = os.path.split(path)
    stem, dot_ext = os.path.splitext(basename)
    if stem != CORPUS_SHARD_STEM:
        raise MalformedShardPathError(
            f"Not a corpus shard path (stem {stem!r} != {CORPUS_SHARD_STEM!r}): {path}"
        )
    ext = dot_ext[1:]
    if not ext:
        raise MalformedShardPathError(f"Corpus shard path has no shard index: {path}")
    try:
        shard_index = decode_shard_index(ext, width)
    except MalformedShardPathError as exc:
        raise MalformedShardPathError(f"{exc}: {path}") from exc
    return directory, shard_index


__all__ = [
    "MalformedShardPathError",
    "ShardIndexOverflowError",
    "encode_shard_index",
    "decode_shard_index",
    "split_corpus_shard_path",
]
