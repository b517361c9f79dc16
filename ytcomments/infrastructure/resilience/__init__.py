"""API Resilience Implementations.

Contains services for handling the shared outbound rate limit, retries with
exponential backoff, and cooperative cancellation of waiting tasks.
Bounded Context: API Resilience
"""
