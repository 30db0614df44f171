# space_storage/events.py
import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from space_storage.models import AddItemsResultSummary

logger = logging.getLogger("SpaceStorage").getChild("Events")

Listener = Callable[[Any], Any]


class EventEmitter:
    """Minimal synchronous event emitter (on / once / off / emit)."""

    def __init__(self):
        # (listener, once) pairs per event, in subscription order
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners[event].append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners[event].append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners[event] = [entry for entry in self._listeners[event] if entry[0] != listener]
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners[event])

    def emit(self, event: str, data: Any = None) -> bool:
        """Calls every listener of `event` in subscription order. Returns False if nobody listened."""
        entries = list(self._listeners[event])
        self._listeners[event] = [entry for entry in entries if not entry[1]]
        for listener, _ in entries:
            try:
                listener(data)
            except Exception as e:
                # A faulty listener must not stop the producer
                logger.error(f"Listener for '{event}' event raised: {e}", exc_info=True)
        return bool(entries)


class AddItemsResponse(EventEmitter):
    """Event handle returned by UserStorage.add_items.

    Events:
      - 'data':  AddItemsStatus of each successfully uploaded file
      - 'error': AddItemsStatus (with `.error` set) of each failed file
      - 'done':  AddItemsResultSummary, once, after every file was attempted
    """

    DATA = "data"
    ERROR = "error"
    DONE = "done"

    def __init__(self):
        super().__init__()
        self._done: "asyncio.Future[AddItemsResultSummary]" = asyncio.get_running_loop().create_future()
        self._task: Optional[asyncio.Task] = None

    @property
    def finished(self) -> bool:
        return self._done.done()

    def _finish(self, summary: AddItemsResultSummary) -> None:
        if not self._done.done():
            self._done.set_result(summary)
        self.emit(self.DONE, summary)

    def _abort(self, exc: BaseException) -> None:
        if not self._done.done():
            self._done.set_exception(exc)

    async def wait(self) -> AddItemsResultSummary:
        """Waits for the upload to finish and returns the summary carried by 'done'."""
        return await asyncio.shield(self._done)
