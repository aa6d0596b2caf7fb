"""Domain events and the in-process bus that delivers them.

CRUD services emit an event after their own writes succeed; side effects such as
notification fan-out live in subscribers, so either side can be exercised alone.
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, ClassVar, Dict, Optional, Union

from codereview.core.logging import get_logger
from codereview.models import Assignment, Comment, Project, ProjectStatus, Reply

# ───────────────────────────────────────────────
# EVENTS
# ───────────────────────────────────────────────


@dataclass(frozen=True)
class DomainEvent:
    name: ClassVar[str] = "event"
    actor_id: str


@dataclass(frozen=True)
class ProjectSubmitted(DomainEvent):
    name: ClassVar[str] = "project.submitted"
    project: Project


@dataclass(frozen=True)
class ProjectStatusChanged(DomainEvent):
    name: ClassVar[str] = "project.status_changed"
    project: Project
    previous_status: ProjectStatus


@dataclass(frozen=True)
class ProjectFeedbackAdded(DomainEvent):
    name: ClassVar[str] = "project.feedback_added"
    project: Project


@dataclass(frozen=True)
class CommentCreated(DomainEvent):
    name: ClassVar[str] = "comment.created"
    comment: Comment
    project: Project


@dataclass(frozen=True)
class CommentReplied(DomainEvent):
    name: ClassVar[str] = "comment.replied"
    comment: Comment
    reply: Reply
    project: Project


@dataclass(frozen=True)
class AssignmentCreated(DomainEvent):
    name: ClassVar[str] = "assignment.created"
    assignment: Assignment


EventHandler = Callable[[DomainEvent], Awaitable[None]]

# ───────────────────────────────────────────────
# BUS
# ───────────────────────────────────────────────


class EventBus:
    """Async event bus keyed by event name.

    Handlers run sequentially in subscription order. A handler that raises is logged
    and skipped; the emitting operation and the remaining handlers carry on.

    Example::

        bus = EventBus()

        async def on_comment(event: CommentCreated):
            print(event.comment.text)

        bus.subscribe(CommentCreated.name, on_comment)
        await bus.emit(CommentCreated(actor_id="...", comment=comment, project=project))
    """

    def __init__(self, logger=None):
        self._subscribers: Dict[str, Dict[str, EventHandler]] = defaultdict(dict)
        self.logger = logger or get_logger("events")

    def subscribe(self, event_name: str, handler: EventHandler) -> str:
        """Subscribe to an event.

        Returns:
            The handler ID.
        """
        handler_id = str(uuid.uuid4())
        self._subscribers[event_name][handler_id] = handler
        return handler_id

    def unsubscribe(self, event_name: str, handler_or_id: Union[EventHandler, str]) -> None:
        subs = self._subscribers[event_name]
        if isinstance(handler_or_id, str):
            subs.pop(handler_or_id, None)
        else:
            for k, v in list(subs.items()):
                if v == handler_or_id:
                    subs.pop(k)

    def handlers(self, event_name: str) -> list[EventHandler]:
        return list(self._subscribers[event_name].values())

    async def emit(self, event: DomainEvent, event_name: Optional[str] = None) -> None:
        """Deliver ``event`` to every handler subscribed to its name."""
        event_name = event_name or event.name
        for handler in self.handlers(event_name):
            try:
                await handler(event)
            except Exception:
                self.logger.exception("event_handler_failed", event_name=event_name, actor_id=event.actor_id)
