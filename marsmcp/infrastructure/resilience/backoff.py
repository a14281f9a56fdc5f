"""Backoff delay computation for retries."""

import random
from typing import Callable, Optional


def delay_for(
    attempt: int,
    base_delay: float,
    max_delay: Optional[float] = None,
    *,
    jitter: bool = True,
    rng: Callable[[], float] = random.random,
) -> float:
    """Returns the delay in seconds before retrying after ``attempt``.

    The exponential part ``base_delay * 2**attempt`` is capped at
    ``max_delay`` when given. Jitter in ``[0, base_delay)`` is drawn on every
    call and added after capping, so the result stays below
    ``max_delay + base_delay``.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        base_delay: Delay unit in seconds.
        max_delay: Optional cap for the exponential part.
        jitter: Whether to add the random component.
        rng: Source of floats in [0.0, 1.0).
    """
    if attempt < 0:
        raise ValueError("attempt must be zero or greater.")
    delay = base_delay * (2 ** attempt)
    if max_delay is not None:
        delay = min(delay, max_delay)
    if jitter and base_delay > 0:
        delay += rng() * base_delay
    return delay
