"""Event sinks for fund events."""

import logging
from typing import List, Protocol, Tuple

from fund_core.models import FundEvent, event_to_dict

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def publish(self, fund_id: str, event: FundEvent) -> None:
        ...


class EventLog:
    """Keeps published events in memory, in publication order."""

    def __init__(self) -> None:
        self._events: List[Tuple[str, FundEvent]] = []

    def publish(self, fund_id: str, event: FundEvent) -> None:
        logger.info("[EVENT] %s %s", fund_id, event_to_dict(event), extra={"fund_id": fund_id})
        self._events.append((fund_id, event))

    @property
    def events(self) -> Tuple[FundEvent, ...]:
        return tuple(event for _, event in self._events)

    def for_fund(self, fund_id: str) -> Tuple[FundEvent, ...]:
        return tuple(event for owner, event in self._events if owner == fund_id)

    def clear(self) -> None:
        self._events.clear()
