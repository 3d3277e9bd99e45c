"""Parsers that turn raw model output into canonical reports."""

from .report import ExtractionError, extract_report

__all__ = ["ExtractionError", "extract_report"]
