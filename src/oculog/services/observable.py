"""Publish-on-mutation base for the state holders."""

from typing import Callable, TypeVar

from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound="Observable")


class Observable:
    """
    Holds subscribers and notifies them after each committed mutation.
    
    Callbacks receive the state holder itself and read whatever fields
    they need from it.
    """
    
    def __init__(self) -> None:
        self._subscribers: list[Callable] = []
    
    def subscribe(self: T, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)
        
        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        
        return unsubscribe
    
    def _emit(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                # Subscriber failures are logged, never raised into the flow
                logger.exception("Subscriber %r failed", callback)
