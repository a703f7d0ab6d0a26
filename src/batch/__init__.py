"""Batch processing: scanning, run loop, status."""
