"""Command-line interface for the Shanko engine."""
