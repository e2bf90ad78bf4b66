"""Domain enrichment overlays.

This module applies consent, diagnosis, coverage, and charitable-program
business rules on top of the generic mapping pass, and finalizes records
before they join the batch accumulator.
"""
