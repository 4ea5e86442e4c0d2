############################################################
#
# inkwell - Versioned Content Management Backend
#
# events.py: Domain events and the in-process event dispatcher
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Domain events and dispatcher.

Handlers are invoked sequentially and awaited, so a dispatch has completed
for every subscriber by the time ``dispatch`` returns.
"""

import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, DefaultDict, List, Optional, Type, Union

from backend.app.logging_config import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for domain events."""

    occurred_at: datetime = field(default_factory=_utcnow, kw_only=True)


@dataclass(frozen=True)
class TitleChangedEvent(DomainEvent):
    """An article's title changed and the rename cascade completed."""

    article_number: int
    old_title: str
    new_title: str


@dataclass(frozen=True)
class RedirectCreatedEvent(DomainEvent):
    """A redirect from a moved path was written to the ledger."""

    old_path: str
    new_path: str


EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class DomainEventDispatcher:
    """Registry of event handlers with sequential, awaited fan-out."""

    def __init__(self):
        self._handlers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type`` and its subclasses."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Remove a previously registered handler (no-op if absent)."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        """Handlers registered for ``event_type`` or any of its base classes."""
        resolved: List[EventHandler] = []
        for klass in event_type.__mro__:
            resolved.extend(self._handlers.get(klass, []))
        return resolved

    async def dispatch(self, event: Optional[DomainEvent]) -> None:
        """Invoke every handler for ``event``.

        All handlers run even if some fail; a single failure is re-raised
        as-is, several are raised together as an ``ExceptionGroup``.
        """
        if event is None:
            return

        failures: List[Exception] = []
        for handler in self.handlers_for(type(event)):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "event_handler_failed",
                    event_type=type(event).__name__,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(exc),
                )
                failures.append(exc)

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise ExceptionGroup(f"{len(failures)} handlers failed for {type(event).__name__}", failures)


def log_domain_event(event: DomainEvent) -> None:
    """Subscriber that records every domain event in the application log."""
    payload = {k: v for k, v in vars(event).items() if k != "occurred_at"}
    logger.info("domain_event", event_type=type(event).__name__, **payload)


_dispatcher: Optional[DomainEventDispatcher] = None


def get_dispatcher() -> DomainEventDispatcher:
    """Get the application dispatcher, creating it with the logging subscriber."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = DomainEventDispatcher()
        _dispatcher.subscribe(DomainEvent, log_domain_event)
    return _dispatcher
