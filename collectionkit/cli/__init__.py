"""Command line interface for collectionkit."""

from .main import cli, main

__all__ = ["cli", "main"]
