"""Domain Layer: value objects, error types, events and ports (interfaces).

Holds no I/O. Infrastructure adapters implement the interfaces defined here.
"""
