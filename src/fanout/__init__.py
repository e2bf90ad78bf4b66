"""Medication-dosage fan-out.

This module expands one base tracking record into one record per current
dosage and correlates each with referral and order records in memory.
"""
