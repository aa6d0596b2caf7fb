import dataclasses

import pytest

from codereview.events import EventBus, ProjectSubmitted
from codereview.models import Project


@pytest.fixture
def event() -> ProjectSubmitted:
    return ProjectSubmitted(actor_id="u1", project=Project(id="p1", title="t", description="d", student="u1"))


class TestEventBus:
    @pytest.mark.asyncio
    async def test_handlers_run_in_subscription_order(self, event):
        bus = EventBus()
        calls = []

        async def first(e):
            calls.append(("first", e.project.id))

        async def second(e):
            calls.append(("second", e.project.id))

        bus.subscribe(ProjectSubmitted.name, first)
        bus.subscribe(ProjectSubmitted.name, second)
        await bus.emit(event)

        assert calls == [("first", "p1"), ("second", "p1")]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, event):
        bus = EventBus()
        calls = []

        async def broken(e):
            raise RuntimeError("boom")

        async def healthy(e):
            calls.append(e.actor_id)

        bus.subscribe(ProjectSubmitted.name, broken)
        bus.subscribe(ProjectSubmitted.name, healthy)
        await bus.emit(event)

        assert calls == ["u1"]

    @pytest.mark.asyncio
    async def test_unsubscribe_by_id_and_handler(self, event):
        bus = EventBus()
        calls = []

        async def handler(e):
            calls.append(e)

        handler_id = bus.subscribe(ProjectSubmitted.name, handler)
        bus.unsubscribe(ProjectSubmitted.name, handler_id)
        await bus.emit(event)
        assert calls == []

        bus.subscribe(ProjectSubmitted.name, handler)
        bus.unsubscribe(ProjectSubmitted.name, handler)
        assert bus.handlers(ProjectSubmitted.name) == []

    @pytest.mark.asyncio
    async def test_emit_without_subscribers(self, event):
        await EventBus().emit(event)

    def test_events_are_immutable(self, event):
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.actor_id = "u2"
