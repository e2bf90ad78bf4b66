"""Tracking pipeline orchestration.

This module turns batches of enrollment events into tracking records
and hands them to the record store in a single bulk write.
"""
