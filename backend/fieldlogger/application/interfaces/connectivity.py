"""Abstract connectivity signal (port) — online/offline transitions."""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], Awaitable[None] | None]


class ConnectivityMonitor(ABC):
    """Reports whether the device is online and notifies on transitions.

    Listeners are only called when the state actually changes.
    """

    def __init__(self, initially_online: bool = False) -> None:
        self._online = initially_online
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def add_listener(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Register a transition listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    async def _set_online(self, online: bool) -> None:
        """Record the current state and fan out if it changed."""
        if online == self._online:
            return
        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            try:
                result = listener(online)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Connectivity listener failed")
