"""Command-line interface for Chunkroot."""
