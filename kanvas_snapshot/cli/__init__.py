"""Command-line interface for kanvas-snapshot."""
