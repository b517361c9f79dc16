"""Domain Event definitions.

Represents significant occurrences during a fetch run (permits deferred,
attempts failing, retries scheduled) that other parts of the system might
react to.
"""
