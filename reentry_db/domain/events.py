# SPDX-License-Identifier: Apache-2.0

"""
Domain events emitted by the directory stores.

Stores publish events after a write has been persisted; presentation code
subscribes instead of being called directly by the stores.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Type

from ..models.entities import CommentEntry, ProgramRecord, ThreadEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for directory events."""


@dataclass(frozen=True)
class CommentPosted(DomainEvent):
    """A team update was stored against a program."""
    record_id: str
    comment: CommentEntry


@dataclass(frozen=True)
class ProgramSaved(DomainEvent):
    """A program was added or replaced in the record store."""
    record: ProgramRecord
    created: bool


@dataclass(frozen=True)
class ThreadStarted(DomainEvent):
    """A Housing Talk thread was posted."""
    thread: ThreadEntry


Handler = Callable[[DomainEvent], None]


class EventBus:
    """Synchronous in-process publish/subscribe."""
    
    def __init__(self):
        self._handlers: DefaultDict[Type[DomainEvent], List[Handler]] = defaultdict(list)
    
    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """Register ``handler`` for events of ``event_type`` (and subclasses)."""
        self._handlers[event_type].append(handler)
    
    def unsubscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
    
    def publish(self, event: DomainEvent) -> None:
        """
        Deliver ``event`` to every matching subscriber.
        
        A failing subscriber is logged and does not stop delivery to the
        others; the write that produced the event has already happened.
        """
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in list(handlers):
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Event handler failed for {type(event).__name__}: {str(e)}",
                        extra={"event_type": type(event).__name__}
                    )
