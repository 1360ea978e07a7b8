"""
Event Bus

Small publish/subscribe helper keyed by an Enum of event kinds. Each kind is
bound to one payload type and ``emit`` refuses payloads of the wrong type.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar

K = TypeVar('K', bound=Enum)

Listener = Callable[[object], None]


class EventBus(Generic[K]):
    """
    Typed publish/subscribe dispatcher.

    Listeners run synchronously, in registration order, on the emitting
    call stack. A listener that raises is logged and skipped; the remaining
    listeners still run.
    """

    def __init__(self, payload_types: Mapping[K, type], name: Optional[str] = None):
        """
        Initialize the bus.

        Args:
            payload_types: Payload class for every event kind
            name: Logger name suffix for diagnostics
        """
        self.logger = logging.getLogger(name or self.__class__.__name__)
        self._payload_types: Dict[K, type] = dict(payload_types)
        self._listeners: Dict[K, List[Listener]] = {kind: [] for kind in self._payload_types}

    def subscribe(self, kind: K, callback: Listener) -> None:
        """
        Register a callback for an event kind.

        Registering the same callback twice for one kind has no effect.
        """
        listeners = self._get_listeners(kind)
        if callback not in listeners:
            listeners.append(callback)

    def unsubscribe(self, kind: K, callback: Listener) -> bool:
        """
        Remove a callback.

        Returns:
            bool: True if the callback was registered
        """
        listeners = self._get_listeners(kind)
        try:
            listeners.remove(callback)
            return True
        except ValueError:
            return False

    def emit(self, kind: K, payload: object) -> None:
        """
        Deliver a payload to every listener of ``kind``.

        Raises:
            TypeError: If the payload does not match the kind's payload type
        """
        expected: Type = self._payload_types.get(kind)
        if expected is None:
            raise ValueError(f"Unknown event kind: {kind!r}")
        if not isinstance(payload, expected):
            raise TypeError(
                f"{kind.name} expects {expected.__name__}, got {type(payload).__name__}"
            )

        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._listeners[kind]):
            try:
                callback(payload)
            except Exception as e:
                self.logger.exception(f"Error in {kind.name} listener: {e}")

    def _get_listeners(self, kind: K) -> List[Listener]:
        try:
            return self._listeners[kind]
        except KeyError:
            raise ValueError(f"Unknown event kind: {kind!r}") from None
