"""Command-line client for the mining pool service."""
