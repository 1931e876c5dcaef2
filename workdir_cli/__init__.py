"""Command-line tools for sharded fuzzing work directories."""
