"""Snapshot persistence."""
