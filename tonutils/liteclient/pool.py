"""A balanced pool of lite server connections and request dispatch."""

from __future__ import annotations

import os
import queue
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tonutils.liteclient.config import (
    GlobalConfig,
    NoConnectionsError,
    get_config_from_url,
    int_to_ip4,
)
from tonutils.liteclient.connection import Connection, connect

OnDisconnectCallback = Callable[[str, str], None]

_DEFAULT_REQUEST_TIMEOUT = 30.0
_CONFIG_CONNECT_TIMEOUT = 3.0
_RECONNECT_TIMEOUT = 7.0


class NoActiveConnectionsError(ConnectionError):
    """Raised when no connected server could take a request."""

    def __init__(self, message: str = "no active connections") -> None:
        super().__init__(message)


@dataclass
class LiteResponse:
    type_id: int
    data: bytes


@dataclass
class LiteRequest:
    type_id: int
    query_id: bytes
    data: bytes
    responses: queue.Queue = field(default_factory=queue.Queue, repr=False, compare=False)


class ConnectionPool:
    """Routes requests over a set of lite server connections."""

    def __init__(self) -> None:
        self._requests: dict[str, LiteRequest] = {}
        self._requests_lock = threading.Lock()
        self._nodes: list[Connection] = []
        self._nodes_lock = threading.Lock()
        self._on_disconnect: OnDisconnectCallback | None = None
        self._offset = 0
        self._offset_lock = threading.Lock()
        self.set_on_disconnect(self.default_reconnect(3.0, -1))

    def add_connection(self, addr: str, server_key: str, timeout: float | None = None) -> None:
        """Connect to one server; its key is the base64 Ed25519 public key."""
        connect(self, addr, server_key, timeout)

    def add_connections_from_config(
        self, config: GlobalConfig, timeout: float | None = None
    ) -> None:
        """Connect to every listed server; return on the first success."""
        servers = config.liteservers
        if not servers:
            raise NoConnectionsError()
        timeout = _CONFIG_CONNECT_TIMEOUT if timeout is None else timeout

        results: queue.Queue[BaseException | None] = queue.Queue()
        failures = 0
        failures_lock = threading.Lock()

        def attempt(addr: str, key: str) -> None:
            nonlocal failures
            try:
                self.add_connection(addr, key, timeout)
            except Exception as err:
                with failures_lock:
                    failures += 1
                    everything_failed = failures == len(servers)
                if everything_failed:
                    results.put(err)
                return
            results.put(None)

        for server in servers:
            addr = f"{int_to_ip4(server.ip)}:{server.port}"
            threading.Thread(target=attempt, args=(addr, server.id.key), daemon=True).start()

        error = results.get()
        if error is not None:
            raise error

    def add_connections_from_config_url(self, url: str, timeout: float | None = None) -> None:
        config = get_config_from_url(url, timeout)
        self.add_connections_from_config(config, timeout)

    def sticky_node(self) -> int:
        """Id of a random active node to bind related requests to, or 0."""
        with self._nodes_lock:
            if not self._nodes:
                return 0
            return random.choice(self._nodes).id

    def do(
        self,
        type_id: int,
        payload: bytes = b"",
        timeout: float | None = None,
        sticky: int = 0,
    ) -> LiteResponse:
        """Send a request and wait for its response."""
        query_id = os.urandom(32)
        request = LiteRequest(type_id, query_id, bytes(payload))
        hex_id = query_id.hex()

        with self._requests_lock:
            self._requests[hex_id] = request
        try:
            if sticky:
                self._query_sticky(sticky, request)
            else:
                self._query_with_balancer(request)

            wait = _DEFAULT_REQUEST_TIMEOUT if timeout is None else timeout
            try:
                return request.responses.get(timeout=wait)
            except queue.Empty:
                if timeout is None:
                    raise TimeoutError("liteserver request timeout") from None
                raise TimeoutError("request deadline exceeded") from None
        finally:
            with self._requests_lock:
                self._requests.pop(hex_id, None)

    def set_on_disconnect(self, callback: OnDisconnectCallback | None) -> None:
        with self._requests_lock:
            self._on_disconnect = callback

    def default_reconnect(
        self, wait_before_reconnect: float, max_tries: int
    ) -> OnDisconnectCallback:
        """Callback that reconnects, retrying up to ``max_tries`` (-1: forever)."""
        tries = 0

        def reconnect(addr: str, key: str) -> None:
            nonlocal tries
            while True:
                try:
                    self.add_connection(addr, key, _RECONNECT_TIMEOUT)
                except Exception:
                    if tries < max_tries or max_tries == -1:
                        tries += 1
                        time.sleep(wait_before_reconnect)
                        continue
                break
            tries = 0

        return reconnect

    def _query_sticky(self, node_id: int, request: LiteRequest) -> None:
        with self._nodes_lock:
            node = next((n for n in self._nodes if n.id == node_id), None)
        if node is not None:
            try:
                node.query_lite_server(request.query_id, request.type_id, request.data)
                return
            except OSError:
                pass
        self._query_with_balancer(request)

    def _query_with_balancer(self, request: LiteRequest) -> None:
        with self._offset_lock:
            self._offset += 1
            offset = self._offset

        first: Connection | None = None
        while True:
            with self._nodes_lock:
                if not self._nodes:
                    raise NoActiveConnectionsError()
                node = self._nodes[offset % len(self._nodes)]

            if first is None:
                first = node
            elif node is first:
                raise NoActiveConnectionsError()

            try:
                node.query_lite_server(request.query_id, request.type_id, request.data)
            except OSError:
                offset += 1
                continue
            return

    def _add_node(self, node: Connection) -> None:
        with self._nodes_lock:
            self._nodes.append(node)

    def _remove_node(self, node: Connection) -> None:
        with self._nodes_lock:
            if node in self._nodes:
                self._nodes.remove(node)

    def _disconnect_callback(self) -> OnDisconnectCallback | None:
        with self._requests_lock:
            return self._on_disconnect

    def _dispatch(self, query_id: str, type_id: int, payload: bytes) -> None:
        with self._requests_lock:
            request = self._requests.get(query_id)
        if request is not None:
            request.responses.put(LiteResponse(type_id, payload))