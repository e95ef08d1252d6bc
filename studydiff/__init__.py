"""Changelog engine for imported electrical study data snapshots."""

__version__ = "0.1.0"
