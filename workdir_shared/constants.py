"""Shared work-directory layout constants used by every shard process."""

# Fixed decimal width of a shard index inside a path segment. Every process
# sharing a work directory must agree on it; changing it requires a new
# SHARD_LAYOUT_VERSION.
DIGITS_IN_SHARD_INDEX = 6
SHARD_LAYOUT_VERSION = 1

# Name segments
CORPUS_SHARD_STEM = "corpus"
ANNOTATION_SEPARATOR = "."
GLOB_WILDCARD = "*"
GLOB_MAGIC_CHARS = "*?["

# Directories
CRASH_REPRODUCER_DIR_NAME = "crashes"
BINARY_INFO_DIR_NAME = "binary-info"

# Source-based coverage profiles
CLANG_COVERAGE_STEM = "clang_coverage"
RAW_PROFILE_EXTENSION = ".profraw"
INDEXED_PROFILE_EXTENSION = ".profdata"
RAW_PROFILE_MODULE_PLACEHOLDER = "%m"
