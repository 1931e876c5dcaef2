"""Shared exports for work-directory producers and consumers."""

from .constants import (  # noqa: F401
    CORPUS_SHARD_STEM,
    DIGITS_IN_SHARD_INDEX,
    RAW_PROFILE_EXTENSION,
    SHARD_LAYOUT_VERSION,
)
from .sharding import (  # noqa: F401
    MalformedShardPathError,
    ShardIndexOverflowError,
    decode_shard_index,
    encode_shard_index,
    split_corpus_shard_path,
)

__all__ = [
    "CORPUS_SHARD_STEM",
    "DIGITS_IN_SHARD_INDEX",
    "RAW_PROFILE_EXTENSION",
    "SHARD_LAYOUT_VERSION",
    "MalformedShardPathError",
    "ShardIndexOverflowError",
    "decode_shard_index",
    "encode_shard_index",
    "split_corpus_shard_path",
]
