"""Clip analysis pipeline: model fallback, report extraction and roster tracking."""

__version__ = "0.3.0"
