"""Command-line interface (``chrono-tags``)."""

from chrono_tags.cli.app import app

__all__ = ["app"]
