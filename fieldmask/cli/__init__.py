"""Command-line interface for fieldmask."""
