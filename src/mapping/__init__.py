"""Metadata-driven field mapping.

This module resolves source field paths, serves configured mapping rules,
fetches source records, and applies rule sets onto tracking records.
"""
