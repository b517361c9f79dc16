"""Console user interface (rich)."""
