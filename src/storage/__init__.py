"""Metadata persistence."""
