"""Shared document store interface, subscription handles and the in-process store.

A document store is a tree of JSON values addressed by slash-separated paths
('weeks', 'participants/<id>'). Writing None (or an empty object) deletes a
node. Subscribers to a path receive the full current value of that path
whenever it, one of its ancestors or one of its descendants is written.
"""
from __future__ import annotations
import copy
import logging
from threading import Lock, RLock
from typing import Any, Callable, List, Optional

from poll.events.Event_Bus import EventBus

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """Cancellation handle returned by subscribe(); usable as a context manager."""

    def __init__(self, cancel: Optional[Callable[[], None]] = None):
        self._cancel = cancel
        self._lock = Lock()
        self.active = True

    def cancel(self):
        with self._lock:
            if not self.active:
                return
            self.active = False
            cancel, self._cancel = self._cancel, None
        if cancel is not None:
            cancel()

    @classmethod
    def combine(cls, *subscriptions: "Subscription") -> "Subscription":
        def cancel_all():
            for sub in subscriptions:
                sub.cancel()
        return cls(cancel_all)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False


# -------------------- Path / tree helpers --------------------
def split_path(path: str) -> List[str]:
    return [part for part in str(path or "").strip("/").split("/") if part]


def join_path(*parts: str) -> str:
    return "/".join(p for part in parts for p in split_path(part))


def paths_related(a: List[str], b: List[str]) -> bool:
    """True when one path is a prefix of (or equal to) the other."""
    n = min(len(a), len(b))
    return a[:n] == b[:n]


def prune(value: Any) -> Any:
    """Drop None children and empty containers (they do not exist in the tree)."""
    if isinstance(value, dict):
        pruned = {str(k): prune(v) for k, v in value.items()}
        pruned = {k: v for k, v in pruned.items() if v is not None}
        return pruned or None
    if isinstance(value, list):
        return [prune(v) for v in value] or None
    return value


def get_in(node: Any, parts: List[str]) -> Any:
    for part in parts:
        if isinstance(node, dict):
            node = node.get(part)
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return None
        if node is None:
            return None
    return node


def set_in(node: Any, parts: List[str], value: Any) -> Any:
    """Return the tree with value stored at parts (may modify node in place)."""
    if not parts:
        return prune(copy.deepcopy(value))
    head, rest = parts[0], parts[1:]
    if isinstance(node, list):
        if head.isdigit() and int(head) < len(node):
            child = set_in(node[int(head)], rest, value)
            if child is not None:
                node[int(head)] = child
                return node
        node = {str(i): v for i, v in enumerate(node) if v is not None}
    elif not isinstance(node, dict):
        node = {}
    child = set_in(node.get(head), rest, value)
    if child is None:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None


class DocumentStore:
    """Interface shared by the in-process and the remote document stores."""

    def get(self, path: str) -> Any:
        raise NotImplementedError

    def set(self, path: str, value: Any) -> None:
        raise NotImplementedError

    def remove(self, path: str) -> None:
        self.set(path, None)

    def subscribe(self, path: str, callback: ValueCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        raise NotImplementedError

    def close(self) -> None:
        pass


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store; pushes go out synchronously through an EventBus keyed by path."""

    def __init__(self, initial: Optional[dict] = None, bus: Optional[EventBus] = None):
        self._root = prune(copy.deepcopy(initial)) if initial else None
        self._lock = RLock()
        self._bus = bus or EventBus()

    def get(self, path: str) -> Any:
        with self._lock:
            return copy.deepcopy(get_in(self._root, split_path(path)))

    def set(self, path: str, value: Any) -> None:
        parts = split_path(path)
        with self._lock:
            self._root = set_in(self._root, parts, value)
            affected = [name for name in self._bus.event_names() if paths_related(split_path(name), parts)]
            updates = [(name, copy.deepcopy(get_in(self._root, split_path(name)))) for name in affected]
        for name, current in updates:
            self._bus.publish(name, current)

    def subscribe(self, path: str, callback: ValueCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        key = join_path(path)

        def deliver(_event_name, value):
            callback(value)

        self._bus.subscribe(key, deliver)
        logger.debug("Subscribed to '%s'", key)
        callback(self.get(key))
        return Subscription(lambda: self._bus.unsubscribe(key, deliver))
