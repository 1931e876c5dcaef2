"""Command-line front end for inspecting a sharded work directory."""
# Example:
# python -m workdir_cli.main --action paths --workdir /data/run1 --binary-name target --binary-hash abcd1234 --shard-index 7

from __future__ import annotations

import json
import sys
from argparse import (
    ArgumentDefaultsHelpFormatter,
    ArgumentParser,
    RawDescriptionHelpFormatter,
)
from pathlib import Path

from workdir import WorkDir, enumerate_raw_coverage_profiles, list_shard_files
from workdir.config import DEFAULT_CONFIG_PATH, ConfigError, load_environment, set_config
from workdir.logging_config import configure_logging, log

_GROUPS = {
    "corpus": WorkDir.corpus_files,
    "distilled-corpus": WorkDir.distilled_corpus_files,
    "features": WorkDir.features_files,
    "distilled-features": WorkDir.distilled_features_files,
}


# Combine both formatters to allow newlines and showing default arguments
class RawDescriptionDefaultsHelpFormatter(
    RawDescriptionHelpFormatter,
    ArgumentDefaultsHelpFormatter,
):
    pass


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Inspect the layout of a sharded fuzzing work directory.\n\n"
                    "Identity values are read from the config file and FUZZ_* environment "
                    "variables; command-line options override both.",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--action",
        choices=["paths", "decode", "globs", "profiles", "shards"],
        help="Action to execute",
    )
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config file")
    parser.add_argument("--workdir", default=None, help="Campaign root directory")
    parser.add_argument("--binary", default=None, help="Fuzz target binary (used to derive name and hash)")
    parser.add_argument("--binary-name", default=None, help="Binary name")
    parser.add_argument("--binary-hash", default=None, help="Binary content hash")
    parser.add_argument("--shard-index", type=int, default=None, help="Own shard index")
    parser.add_argument("--annotation", default="", help="Report annotation (paths only)")
    parser.add_argument(
        "--corpus-path",
        default=None,
        help="Corpus shard path (decode only); binary name and hash come from the options, config file or FUZZ_* variables",
    )
    parser.add_argument(
        "--kind",
        choices=sorted(_GROUPS),
        default="corpus",
        help="Sharded file kind (shards only)",
    )
    parser.add_argument("--log-level", default=None, help="Log level, defaults to $LOG_LEVEL or INFO")
    return parser


def _resolve_workdir(args) -> WorkDir:
    """Merge config file, environment and command-line options into an identity."""
    cfg = set_config(Path(args.config))
    overrides = {
        "workdir": args.workdir,
        "binary": args.binary,
        "binary_name": args.binary_name,
        "binary_hash": args.binary_hash,
        "my_shard_index": args.shard_index,
    }
    cfg.update({key: value for key, value in overrides.items() if value is not None})
    return WorkDir.from_environment(load_environment(cfg))


def _paths(workdir: WorkDir, annotation: str) -> dict:
    return {
        "workdir": workdir.root_dir,
        "binary_name": workdir.binary_name,
        "binary_hash": workdir.binary_hash,
        "shard_index": workdir.shard_index,
        "coverage_dir": workdir.coverage_dir_path(),
        "crash_reproducer_dir": workdir.crash_reproducer_dir_path(),
        "binary_info_dir": workdir.binary_info_dir_path(),
        "corpus": workdir.corpus_files().own_shard_path(),
        "distilled_corpus": workdir.distilled_corpus_files().own_shard_path(),
        "features": workdir.features_files().own_shard_path(),
        "distilled_features": workdir.distilled_features_files().own_shard_path(),
        "coverage_report": workdir.coverage_report_path(annotation),
        "corpus_stats": workdir.corpus_stats_path(annotation),
        "fuzzing_stats": workdir.fuzzing_stats_path(annotation),
        "rusage_report": workdir.rusage_report_path(annotation),
        "source_coverage_report": workdir.source_based_coverage_report_path(annotation),
        "raw_profile": workdir.source_based_coverage_raw_profile_path(),
        "indexed_profile": workdir.source_based_coverage_indexed_profile_path(),
    }


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for the work-directory tools.

    Args:
        argv: Optional list of arguments (defaults to ``sys.argv``).

    Returns:
        int: Process exit code (0 on success, non-zero on error).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    log.debug("Handling action: %s", args.action)

    try:
        if args.action == "decode":
            cfg = set_config(Path(args.config))
            binary_name = args.binary_name or cfg.get("binary_name")
            binary_hash = args.binary_hash or cfg.get("binary_hash")
            if not args.corpus_path or not binary_name or not binary_hash:
                log.error("decode needs --corpus-path plus a configured binary name and hash")
                return 1
            if not isinstance(binary_name, str) or not isinstance(binary_hash, str):
                raise ConfigError("binary name and hash must be strings; quote them in the config file")
            workdir = WorkDir.from_corpus_shard_path(args.corpus_path, binary_name, binary_hash)
            print(json.dumps(_paths(workdir, args.annotation), indent=2))
            return 0

        if args.action == "paths":
            workdir = _resolve_workdir(args)
            print(json.dumps(_paths(workdir, args.annotation), indent=2))
            return 0

        if args.action == "globs":
            workdir = _resolve_workdir(args)
            globs = {kind: group(workdir).all_shards_glob() for kind, group in _GROUPS.items()}
            print(json.dumps(globs, indent=2))
            return 0

        if args.action == "profiles":
            workdir = _resolve_workdir(args)
            print(json.dumps(sorted(enumerate_raw_coverage_profiles(workdir)), indent=2))
            return 0

        if args.action == "shards":
            workdir = _resolve_workdir(args)
            print(json.dumps(list_shard_files(_GROUPS[args.kind](workdir)), indent=2))
            return 0

        # No action selected, show help
        parser.print_help()
        return 1

    except (ConfigError, ValueError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
