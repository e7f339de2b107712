# pulsechat/infrastructure/event_dispatcher.py
import logging
from collections import defaultdict
from collections.abc import Callable

from pulsechat.domain.events import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fans domain events out to registered handlers.

    Live delivery is best-effort: the write has already happened by the
    time an event is dispatched, so a failing handler is logged and the
    remaining handlers still run.
    """

    def __init__(self) -> None:
        self.handlers: dict[str, list[Callable]] = defaultdict(list)

    def register(self, event_type: type[Event] | str, handler: Callable) -> None:
        name = event_type if isinstance(event_type, str) else event_type.__name__
        self.handlers[name].append(handler)

    async def dispatch(self, event: Event) -> None:
        event_type = event.__class__.__name__
        for handler in self.handlers[event_type]:
            try:
                await handler(event)
            except Exception:
                logger.warning(
                    "Handler %r failed for %s", handler, event_type, exc_info=True
                )


class PendingEvents:
    """Events raised while handling one request.

    They are held back until the request's transaction has committed, so
    subscribers that re-read the store see the write. A rolled back
    request discards them.
    """

    def __init__(self, dispatcher: EventDispatcher) -> None:
        self.dispatcher = dispatcher
        self.events: list[Event] = []

    async def dispatch(self, event: Event) -> None:
        self.events.append(event)

    def discard(self) -> None:
        self.events.clear()

    async def flush(self) -> None:
        events, self.events = self.events, []
        for event in events:
            await self.dispatcher.dispatch(event)
