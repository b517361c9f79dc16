"""Domain models (value objects and task bookkeeping)."""
