"""Command-line interface for keyconf."""
