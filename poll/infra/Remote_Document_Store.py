"""Remote shared document store speaking the Firebase Realtime Database REST protocol.

Reads and writes:
  GET/PUT/DELETE {base_url}/{path}.json[?auth=<token>]

Subscriptions open a server-sent event stream on the same URL
(Accept: text/event-stream). The server sends:
  event: put    data: {"path": "/", "data": <value>}      -> replace the value at path
  event: patch  data: {"path": "/x", "data": {k: v, ...}} -> update children at path
  event: keep-alive                                      -> ignored
  event: cancel / auth_revoked                           -> the stream is over (reported as an error)

The first 'put' carries the whole current value, so subscribing also loads.
"""
from __future__ import annotations
import copy
import json
import logging
import threading
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import httpx

from poll.infra.Document_Store import (
    DocumentStore, Subscription, ValueCallback, ErrorCallback, set_in, split_path
)
from poll.infra.errors import PersistenceError

logger = logging.getLogger(__name__)

STREAM_END_EVENTS = ("cancel", "auth_revoked")


def parse_event_stream(lines: Iterable[str]) -> Iterator[Tuple[str, Any]]:
    """Yield (event, decoded JSON data) pairs from raw server-sent event lines."""
    event: Optional[str] = None
    data: List[str] = []
    for line in lines:
        line = line.rstrip("\r")
        if not line:
            if event is not None or data:
                text = "\n".join(data)
                yield event or "message", (json.loads(text) if text else None)
            event, data = None, []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event = value
        elif field == "data":
            data.append(value)
    if event is not None or data:
        text = "\n".join(data)
        yield event or "message", (json.loads(text) if text else None)


def apply_stream_event(snapshot: Any, event: str, payload: Any) -> Any:
    """Apply one put/patch event to the cached value of the subscribed path."""
    if not isinstance(payload, dict):
        return snapshot
    parts = split_path(payload.get("path", "/"))
    data = payload.get("data")
    if event == "put":
        return set_in(snapshot, parts, data)
    if event == "patch" and isinstance(data, dict):
        for key, value in data.items():
            snapshot = set_in(snapshot, parts + split_path(key), value)
    return snapshot


class _EventStream:
    """One subscription: a daemon thread reading the event stream for a path."""

    def __init__(self, store: "RemoteDocumentStore", path: str,
                 callback: ValueCallback, on_error: Optional[ErrorCallback]):
        self._store = store
        self._path = path
        self._callback = callback
        self._on_error = on_error
        self._stop = threading.Event()
        self._response: Optional[httpx.Response] = None
        self._thread = threading.Thread(target=self._run, name=f"poll-stream:{path}", daemon=True)

    def start(self):
        self._thread.start()

    def stop(self):
        self._stop.set()
        response = self._response
        if response is not None:
            try:
                response.close()
            except httpx.HTTPError as e:
                logger.debug("Closing stream for '%s': %s", self._path, e)
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)

    def _run(self):
        snapshot: Any = None
        try:
            with self._store.open_stream(self._path) as response:
                self._response = response
                response.raise_for_status()
                for event, payload in parse_event_stream(response.iter_lines()):
                    if self._stop.is_set():
                        return
                    if event in ("put", "patch"):
                        snapshot = apply_stream_event(snapshot, event, payload)
                        self._callback(copy.deepcopy(snapshot))
                    elif event in STREAM_END_EVENTS:
                        raise PersistenceError(f"Stream for '{self._path}' ended by server: {event}")
        except (httpx.HTTPError, PersistenceError, ValueError) as e:
            if self._stop.is_set():
                return
            logger.error("Subscription to '%s' failed: %s", self._path, e)
            if self._on_error is not None:
                self._on_error(e if isinstance(e, PersistenceError) else PersistenceError(str(e)))


class RemoteDocumentStore(DocumentStore):
    def __init__(self, base_url: str, auth: Optional[str] = None, timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        if not base_url:
            raise ValueError("A database URL is required for the remote document store")
        self.base_url = base_url.rstrip("/")
        self._auth = auth or None
        self._timeout = timeout
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout,
                                    transport=transport, follow_redirects=True)
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def _url(self, path: str) -> str:
        return "/" + "/".join(split_path(path)) + ".json"

    def _params(self) -> dict:
        return {"auth": self._auth} if self._auth else {}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, self._url(path), params=self._params(), **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PersistenceError(f"{method} '{path}' failed: {e}") from e
        return response

    def get(self, path: str) -> Any:
        try:
            return self._request("GET", path).json()
        except ValueError as e:
            raise PersistenceError(f"Invalid JSON for '{path}': {e}") from e

    def set(self, path: str, value: Any) -> None:
        if value is None:
            self.remove(path)
            return
        self._request("PUT", path, json=value)
        logger.debug("PUT '%s'", path)

    def remove(self, path: str) -> None:
        self._request("DELETE", path)
        logger.debug("DELETE '%s'", path)

    def open_stream(self, path: str):
        return self._client.stream(
            "GET", self._url(path), params=self._params(),
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(self._timeout, read=None),
        )

    def subscribe(self, path: str, callback: ValueCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        stream = _EventStream(self, path, callback, on_error)

        def cancel():
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)
            stream.stop()

        subscription = Subscription(cancel)
        with self._lock:
            self._subscriptions.append(subscription)
        stream.start()
        return subscription

    def close(self) -> None:
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.cancel()
        self._client.close()
