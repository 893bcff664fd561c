"""
Transition recorder — turns a persisted update into transition log entries.

Invoked explicitly by StatusUpdateStore.update after the new values are
flushed and before the request transaction commits:

  before = snapshot(update)
  ...apply fields, flush...
  await recorder.record(update, before, reason)

One entry per tracked field whose value actually changed; nothing for no-op
writes. The ``from`` of each entry is the value the row held under the row
lock, which keeps each field's chain contiguous.
"""
import logging
from typing import Optional

from status_feed import vocabulary
from status_feed.models import StatusChange, StatusUpdate
from status_feed.store.transitions import TransitionLog
from status_feed.telemetry import TRANSITIONS_RECORDED_TOTAL

logger = logging.getLogger(__name__)


def snapshot(update: StatusUpdate) -> dict[str, Optional[str]]:
    return {field: getattr(update, field) for field in vocabulary.TRACKED_FIELDS}


class TransitionRecorder:
    def __init__(self, log: TransitionLog) -> None:
        self.log = log

    async def record(
        self,
        update: StatusUpdate,
        before: dict[str, Optional[str]],
        reason: Optional[str] = None,
    ) -> list[StatusChange]:
        changes: list[StatusChange] = []
        for field in vocabulary.TRACKED_FIELDS:
            old, new = before.get(field), getattr(update, field)
            if old == new:
                continue
            changes.append(
                await self.log.append(update.id, old, new, reason=reason, field=field)
            )
            TRANSITIONS_RECORDED_TOTAL.labels(field=field).inc()
        if not changes:
            logger.debug("No tracked field changed on status update %s", update.id)
        return changes
