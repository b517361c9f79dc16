"""Domain Events related to fetch attempts and resilience.

Examples include events for when a call is deferred by the rate limiter,
when an attempt fails, when a retry is scheduled and when a task ends.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class PermitDeferred(DomainEvent):
    """Event triggered when an attempt has to wait for a rate-limiter token."""
    target: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class AttemptFailed(DomainEvent):
    """Event triggered when a single attempt raises."""
    target: str
    attempt_number: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    target: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetriesExhausted(DomainEvent):
    """Event triggered when the retry budget is spent."""
    target: str
    attempts: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class TaskFinished(DomainEvent):
    """Event triggered when a fetch task reaches a terminal state."""
    target: str
    state: str
    attempts: int
    records_written: int = 0
    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
