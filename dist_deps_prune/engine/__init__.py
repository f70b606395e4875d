"""Analysis engine: glob matching, import extraction, scanning and prune planning."""
