"""Enrollment event publishing.

This module enqueues enrollment ids for tracking refreshes on EventBridge.
"""
