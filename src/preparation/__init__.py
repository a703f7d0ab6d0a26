"""Image preparation."""
