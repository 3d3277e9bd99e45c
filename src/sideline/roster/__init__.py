"""Roster aggregation across analyzed clips."""

from .merge import MergeSummary, merge_roster, merge_roster_with_summary

__all__ = ["MergeSummary", "merge_roster", "merge_roster_with_summary"]
