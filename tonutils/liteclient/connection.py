"""Encrypted TCP link to a single lite server."""

from __future__ import annotations

import base64
import hashlib
import os
import queue
import secrets
import socket
import struct
import threading
import time
import zlib
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers import CipherContext

from tonutils.liteclient.crypto import key_id, new_cipher_ctr, shared_key, validate_packet
from tonutils.liteclient.parse import (
    ADNL_QUERY,
    LITE_SERVER_QUERY,
    TCP_PING,
    parse_server_resp,
)
from tonutils.tl import to_bytes

if TYPE_CHECKING:
    from tonutils.liteclient.pool import ConnectionPool

_MAX_PACKET_SIZE = 10 << 20
_PING_INTERVAL = 5.0
_DEFAULT_CONNECT_TIMEOUT = 60.0


def _u32(value: int) -> bytes:
    return struct.pack("<I", value & 0xFFFFFFFF)


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    return host.strip("[]"), int(port)


class Connection:
    """An encrypted connection to one lite server, served by a listener thread."""

    def __init__(
        self,
        pool: ConnectionPool,
        addr: str,
        server_key: str,
        sock: socket.socket,
        read_cipher: CipherContext,
        write_cipher: CipherContext,
    ) -> None:
        self.id = zlib.crc32(server_key.encode())
        self.addr = addr
        self.server_key = server_key
        self._pool = pool
        self._sock = sock
        self._read_cipher = read_cipher
        self._write_cipher = write_cipher
        self._write_lock = threading.Lock()
        self._closed = threading.Event()
        self._abandoned = False
        self._ready: queue.Queue[BaseException | None] = queue.Queue()

    def close(self) -> None:
        """Close the socket; the listener then reports the disconnect."""
        self._closed.set()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def send(self, data: bytes) -> None:
        """Send one packet: nonce, data and SHA-256 checksum, encrypted."""
        body = os.urandom(32) + bytes(data)
        packet = _u32(64 + len(data)) + body + hashlib.sha256(body).digest()
        with self._write_lock:
            self._sock.sendall(self._write_cipher.update(packet))

    def ping(self, qid: int) -> None:
        self.send(_u32(TCP_PING) + struct.pack("<Q", qid))

    def query_adnl(self, qid: bytes, payload: bytes) -> None:
        self.send(_u32(ADNL_QUERY) + bytes(qid) + to_bytes(payload))

    def query_lite_server(self, qid: bytes, type_id: int, payload: bytes) -> None:
        inner = _u32(type_id) + bytes(payload)
        self.query_adnl(qid, _u32(LITE_SERVER_QUERY) + to_bytes(inner))

    def _handshake(self, rnd: bytes, seed: bytes, public: bytes, server_pub: bytes) -> None:
        checksum = hashlib.sha256(rnd).digest()
        kid = key_id(server_pub)
        secret = shared_key(seed, server_pub)
        cipher = new_cipher_ctr(secret[:16] + checksum[16:32], checksum[:4] + secret[20:32])
        self._sock.sendall(kid + public + checksum + cipher.update(rnd))

    def _recv_exact(self, n: int) -> bytes:
        buf = bytearray()
        while len(buf) < n:
            chunk = self._sock.recv(n - len(buf))
            if not chunk:
                raise ConnectionError("connection closed by server")
            buf += chunk
        return bytes(buf)

    def _read_size(self) -> int:
        raw = self._read_cipher.update(self._recv_exact(4))
        (size,) = struct.unpack("<I", raw)
        if size > _MAX_PACKET_SIZE:
            raise ValueError(f"too big size of packet: {raw.hex()}")
        return size

    def _listen(self) -> None:
        initialized = False
        error: BaseException | None = None
        try:
            while True:
                size = self._read_size()
                if size <= 32:
                    raise ValueError("too small size of packet")
                data = self._read_cipher.update(self._recv_exact(size))
                body, checksum = data[:-32], data[-32:]
                validate_packet(body, checksum)
                body = body[32:]
                if not body:
                    if not initialized:
                        initialized = True
                        self._ready.put(None)
                    continue
                resp = parse_server_resp(body)
                self._pool._dispatch(resp.query_id, resp.type_id, resp.payload)
        except Exception as exc:
            error = exc

        self.close()
        self._ready.put(error)

        if initialized and not self._abandoned:
            self._pool._remove_node(self)
            callback = self._pool._disconnect_callback()
            if callback is not None:
                threading.Thread(
                    target=callback, args=(self.addr, self.server_key), daemon=True
                ).start()

    def _ping_loop(self, every: float) -> None:
        while not self._closed.wait(every):
            try:
                self.ping(secrets.randbelow(0xFFFFFFFFFFFFFF))
            except OSError:
                self.close()
                return


def connect(
    pool: ConnectionPool,
    addr: str,
    server_key: str,
    timeout: float | None = None,
) -> Connection:
    """Open, handshake and register a connection to ``addr``."""
    server_pub = base64.b64decode(server_key, validate=True)
    private = Ed25519PrivateKey.generate()
    seed = private.private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption(),
    )
    public = private.public_key().public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw
    )

    timeout = _DEFAULT_CONNECT_TIMEOUT if timeout is None else timeout
    deadline = time.monotonic() + timeout
    host, port = _split_addr(addr)
    sock = socket.create_connection((host, port), timeout=timeout)
    sock.settimeout(None)

    rnd = os.urandom(160)
    conn = Connection(
        pool,
        addr,
        server_key,
        sock,
        new_cipher_ctr(rnd[:32], rnd[64:80]),
        new_cipher_ctr(rnd[32:64], rnd[80:96]),
    )
    try:
        conn._handshake(rnd, seed, public, server_pub)
    except BaseException:
        conn._abandoned = True
        conn.close()
        raise

    threading.Thread(target=conn._listen, daemon=True).start()

    try:
        error = conn._ready.get(timeout=max(deadline - time.monotonic(), 0.0))
    except queue.Empty:
        conn._abandoned = True
        conn.close()
        raise TimeoutError("lite server handshake timed out") from None
    if error is not None:
        raise error

    threading.Thread(target=conn._ping_loop, args=(_PING_INTERVAL,), daemon=True).start()
    pool._add_node(conn)
    return conn