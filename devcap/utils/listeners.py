from __future__ import annotations

import logging
import weakref
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class _Listener:
    """Wrapper that stores callbacks via weak references when possible."""

    __slots__ = ("_ref", "_strong")

    def __init__(self, callback: Callable[..., None]) -> None:
        self._ref: Any
        self._strong: Optional[Callable[..., None]] = None
        try:
            if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
                self._ref = weakref.WeakMethod(callback)  # type: ignore[arg-type]
            else:
                self._ref = weakref.ref(callback)
        except TypeError:
            # builtins and some C callables cannot be weakly referenced
            self._ref = None
            self._strong = callback

    def get(self) -> Optional[Callable[..., None]]:
        if self._ref is None:
            return self._strong
        return self._ref()

    def matches(self, callback: Callable[..., None]) -> bool:
        return self.get() == callback


class ListenerRegistry:
    """Ordered set of change callbacks that prunes dead references on notify.

    Bound methods are held weakly so that a window or tray icon going away does
    not keep receiving updates. Plain functions and lambdas are held weakly as
    well, so callers must keep their own reference to them.
    """

    def __init__(self, name: str = "change") -> None:
        self._name = name
        self._listeners: List[_Listener] = []

    def __len__(self) -> int:
        return sum(1 for listener in self._listeners if listener.get() is not None)

    def add(self, callback: Callable[..., None]) -> None:
        if not any(listener.matches(callback) for listener in self._listeners):
            self._listeners.append(_Listener(callback))

    def remove(self, callback: Callable[..., None]) -> bool:
        retained = [l for l in self._listeners if not l.matches(callback)]
        removed = len(retained) != len(self._listeners)
        self._listeners = retained
        return removed

    def clear(self) -> None:
        self._listeners.clear()

    def notify(self, *args: Any) -> None:
        stale: List[_Listener] = []
        for listener in list(self._listeners):
            callback = listener.get()
            if callback is None:
                stale.append(listener)
                continue
            try:
                callback(*args)
            except RuntimeError as exc:  # pragma: no cover
                if "wrapped C/C++ object" in str(exc):
                    logger.debug("Removing dead %s listener: %s", self._name, exc)
                    stale.append(listener)
                else:
                    logger.error("Error in %s listener: %s", self._name, exc)
            except Exception as exc:
                logger.error("Error in %s listener: %s", self._name, exc, exc_info=True)
        for listener in stale:
            if listener in self._listeners:
                self._listeners.remove(listener)


__all__ = ["ListenerRegistry"]
