"""Favorites monitor and document signing pipeline for the procurement portal."""

__version__ = "1.0.0"
