"""Fan-out/fan-in of independently fallible store calls.

``settle`` turns one awaitable into an ``OperationOutcome`` that never raises
(cancellation aside). ``settle_all`` awaits a batch of such calls concurrently
and returns their results in submission order, only once every call has
finished. Nothing here short-circuits on failure.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from mapflow.domain.model import OperationOutcome

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

    from mapflow.domain.model import ResourceKind

log = getLogger(__name__)


async def settle(
    kind: ResourceKind,
    operation: Awaitable[object],
    *,
    resource_id: int | None = None,
    subject: str | None = None,
) -> OperationOutcome:
    try:
        payload = await operation
    except Exception as exc:  # noqa: BLE001
        log.warning("%s call failed (id=%s, subject=%s): %s", kind, resource_id, subject, exc)
        return OperationOutcome.failure(kind, exc, resource_id=resource_id, subject=subject)
    return OperationOutcome.success(kind, payload, resource_id=resource_id, subject=subject)


async def settle_all[T](calls: Iterable[Awaitable[T]]) -> list[T]:
    """Await ``calls`` concurrently and return all results in order.

    Callers pass awaitables that already capture their own failures (see
    ``settle``); an exception escaping one of them is a bug and propagates once
    the whole batch has finished.
    """

    pending = list(calls)
    if not pending:
        return []
    results = await asyncio.gather(*pending, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)  # pyright: ignore[reportReturnType]
