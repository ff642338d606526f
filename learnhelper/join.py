"""
Fail-fast concurrent join.

try_join_all() runs a batch of awaitables concurrently on the running event
loop and either returns all their results in input order or raises the first
error. When an error ends the batch early, the operations still in flight are
not cancelled: their tasks keep running to completion in the background (a
request that was already sent still finishes) and whatever they produce is
discarded.

If several operations have failed by the time the batch looks at them, the
one earliest in input order wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, List, Set, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")

# Abandoned tasks are kept referenced until they finish.
_abandoned: Set["asyncio.Future[Any]"] = set()


def _discard_result(task: "asyncio.Future[Any]") -> None:
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("discarding error from abandoned operation: %r", exc)


def _abandon(tasks: Iterable["asyncio.Future[Any]"]) -> None:
    for task in tasks:
        if task.done():
            _discard_result(task)
            continue
        _abandoned.add(task)
        task.add_done_callback(_discard_result)


async def try_join_all(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """
    Await every operation concurrently; fail as soon as one fails.

    Returns the results in the order the awaitables were given, regardless
    of the order in which they completed. An empty input returns [].
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    pending = set(tasks)
    while pending:
        _, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)

        # Scan in input order so the earliest failure wins.
        for task in tasks:
            if not task.done() or task.cancelled():
                continue
            exc = task.exception()
            if exc is not None:
                _abandon(t for t in tasks if t is not task)
                raise exc

    return [task.result() for task in tasks]


async def try_join3(a: Awaitable[A], b: Awaitable[B], c: Awaitable[C]) -> Tuple[A, B, C]:
    """Fixed-arity try_join_all() for three operations of different types."""
    ra, rb, rc = await try_join_all([a, b, c])  # type: ignore[list-item]
    return ra, rb, rc  # type: ignore[return-value]
