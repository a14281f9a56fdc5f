"""API Resilience Implementations.

Contains the concurrency limiter, the backoff scheduler and the retry
driver used by the MARS client.
Bounded Context: API Resilience
"""
