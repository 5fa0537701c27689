##############
## EventBus ##
##############

import logging
from typing import Any, Callable, Dict, Hashable, List, Optional

Listener = Callable[[Any], Any]


class EventBus:
    """
    Synchronous publish/subscribe channel.

    Listeners run in registration order inside `emit`. Nothing is buffered, so
    a listener registered after an emission never sees it.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._listeners: Dict[Hashable, List[Listener]] = {}

    def on(self, event: Hashable, listener: Listener):
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: Hashable, listener: Listener):
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, event: Hashable, payload: Any = None) -> bool:
        # Snapshot: listeners added during dispatch wait for the next emission
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            try:
                listener(payload)
            except Exception as e:
                self.logger.error(f"Listener {getattr(listener, '__name__', listener)} failed on event {event}: {e}", exc_info=True)
        return bool(listeners)

    def listener_count(self, event: Hashable) -> int:
        return len(self._listeners.get(event, ()))

    def remove_all_listeners(self, event: Optional[Hashable] = None):
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
