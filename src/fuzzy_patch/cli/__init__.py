"""Command-line interface for fuzzy-patch."""
