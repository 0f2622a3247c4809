"""Delay helpers shared across navigation steps."""

from __future__ import annotations

import asyncio
import random


def get_random_delay(base: float, random_range: float) -> float:
    """Return a randomized delay in seconds."""
    return base + random.uniform(0, random_range)


async def settle(base: float, random_range: float = 0.0) -> float:
    """Sleep for a randomized delay and return how long it slept."""
    delay = get_random_delay(base, random_range)
    if delay > 0:
        await asyncio.sleep(delay)
    return delay
