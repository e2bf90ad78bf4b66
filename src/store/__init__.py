"""Record storage layer.

This module queries source entity records and persists tracking records.
It powers the fetcher and the orchestrator's single bulk write.
"""
