"""Lookup-by-key, create-on-miss helper shared by the service adapters.

Jira versions, TestRail sections and Confluence report pages are all keyed
by a deterministic name derived from the release version. Each adapter
supplies a ``find`` coroutine (returning ``None`` on a miss) and a
``create`` coroutine; this helper runs them in order and logs which branch
was taken.

There is no locking: two concurrent callers can both miss and both create.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def find_or_create(
    find: Callable[[], Awaitable[T | None]],
    create: Callable[[], Awaitable[T]],
    *,
    kind: str,
    key: str,
) -> T:
    """Return the entity found by ``find``, or the one built by ``create``.

    Args:
        find: Coroutine factory performing the exact-key lookup
        create: Coroutine factory creating the entity; called at most once
        kind: Entity kind for logging (e.g. "section")
        key: The dedup key (e.g. "Release 1.2.3")

    Returns:
        The existing entity, unchanged, or the newly created one.
    """
    existing = await find()
    if existing is not None:
        log.info("find_or_create_found", kind=kind, key=key)
        return existing

    log.info("find_or_create_creating", kind=kind, key=key)
    return await create()
