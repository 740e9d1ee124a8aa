"""Bounded per-rig fan-out.

Rigs are independent resource domains, so per-rig work may overlap. Work
inside one rig stays sequential because the callable handles a whole rig.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from rigsweep.core.models import Rig

T = TypeVar("T")


async def gather_per_rig(
    rigs: Sequence[Rig],
    handler: Callable[[Rig], Awaitable[T]],
    max_parallel: int = 1,
) -> list[T]:
    """Run ``handler`` once per rig and return results in rig order."""
    if max_parallel <= 1 or len(rigs) <= 1:
        results: list[T] = []
        for rig in rigs:
            results.append(await handler(rig))
        return results

    semaphore = asyncio.Semaphore(max_parallel)

    async def _bounded(rig: Rig) -> T:
        async with semaphore:
            return await handler(rig)

    return list(await asyncio.gather(*(_bounded(rig) for rig in rigs)))
