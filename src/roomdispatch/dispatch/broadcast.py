"""Fan one prompt out to many rooms concurrently."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from roomdispatch.dispatch.pipeline import DispatchReceipt, Dispatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BroadcastResult:
    targets: list[str]
    succeeded: int = 0
    failed: int = 0
    receipts: list[DispatchReceipt] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.succeeded > 0


async def broadcast(
    dispatcher: Dispatcher,
    text: str,
    rooms: Iterable[str] | None = None,
    priority: int = 3,
) -> BroadcastResult:
    targets = list(rooms) if rooms else dispatcher.registry.ids()
    outcomes = await asyncio.gather(
        *(dispatcher.dispatch(room, text, priority) for room in targets),
        return_exceptions=True,
    )

    result = BroadcastResult(targets=targets)
    for room, outcome in zip(targets, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning("Broadcast to %s raised: %s", room, outcome)
            result.failed += 1
            continue
        result.receipts.append(outcome)
        if outcome.success:
            result.succeeded += 1
        else:
            result.failed += 1
    return result
