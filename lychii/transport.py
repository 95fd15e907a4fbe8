"""
Abstract transport that connects the bot to a messaging backend.
"""

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable

from .models import Channel, InboundMessage, TransportEvent


class Transport(ABC):
    """
    Abstract base class for messaging backends.

    A transport emits TransportEvent notifications to its listeners and
    exposes the commands the bot and its plugins use to talk back.
    Events are delivered one at a time; a listener runs to completion
    before the next event is handed out.
    """

    def __init__(self):
        self._listeners: dict[TransportEvent, list[Callable]] = defaultdict(list)
        self._emit_lock = threading.RLock()

    def on(self, event: TransportEvent, listener: Callable) -> None:
        """Subscribe a listener to an event."""
        self._listeners[event].append(listener)

    def _emit(self, event: TransportEvent, *args) -> None:
        with self._emit_lock:
            for listener in list(self._listeners[event]):
                listener(*args)

    @abstractmethod
    def start(self) -> None:
        """Authenticate and open the connection."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection."""
        pass

    @abstractmethod
    def send(self, text: str, channel: Channel) -> None:
        """Post a message to a channel."""
        pass

    @abstractmethod
    def reply(self, text: str, message: InboundMessage) -> None:
        """Post a message to the conversation an inbound message came from."""
        pass
