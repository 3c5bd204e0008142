"""Command-line client for the transaction stats service."""
