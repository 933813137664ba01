"""Search for wallet v3 addresses that end with a chosen suffix."""

from __future__ import annotations

import argparse
import hashlib
import logging
import os
import sys
import threading
import time
from collections.abc import Callable, Iterator

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from tonutils.address import new_address

log = logging.getLogger(__name__)

_DATA_CELL_PREFIX = bytes([0, 80, 0, 0, 0, 0])

_STATE_INIT_PREFIX = bytes([
    2, 1, 52, 0, 0, 0, 0, 132,
    218, 250, 68, 159, 152, 166, 152, 119,
    137, 186, 35, 35, 88, 7, 43, 192,
    247, 109, 196, 82, 64, 2, 165, 208,
    145, 139, 154, 117, 210, 213, 153,
])

_SUBWALLETS_PER_KEY = 1_000_000_000


def v3_address_hash(public_key: bytes, subwallet_id: int) -> bytes:
    """Account id of a v3 wallet with the given public key and subwallet id."""
    if len(public_key) != 32:
        raise ValueError("public key must be 32 bytes")
    if not 0 <= subwallet_id <= 0xFFFFFFFF:
        raise ValueError("subwallet id must fit in 32 bits")
    data_hash = hashlib.sha256(
        _DATA_CELL_PREFIX + subwallet_id.to_bytes(4, "big") + bytes(public_key)
    ).digest()
    return hashlib.sha256(_STATE_INIT_PREFIX + data_hash).digest()


def matches_suffix(address: str, suffix: str, case_sensitive: bool = False) -> bool:
    """Tell whether ``address`` ends with ``suffix``."""
    if case_sensitive:
        return address.endswith(suffix)
    return address.casefold().endswith(suffix.casefold())


def generate_wallets(
    suffix: str,
    case_sensitive: bool = False,
    counter: Callable[[], object] | None = None,
    stop: threading.Event | None = None,
) -> Iterator[tuple[str, bytes, int]]:
    """Yield ``(address, private key seed, subwallet id)`` for every match.

    Runs until ``stop`` is set; ``counter`` is called once per checked address.
    """
    while stop is None or not stop.is_set():
        private = Ed25519PrivateKey.generate()
        seed = private.private_bytes(
            serialization.Encoding.Raw,
            serialization.PrivateFormat.Raw,
            serialization.NoEncryption(),
        )
        public = private.public_key().public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw
        )
        for subwallet_id in range(_SUBWALLETS_PER_KEY):
            if stop is not None and stop.is_set():
                return
            if counter is not None:
                counter()
            address = str(new_address(0, 0, v3_address_hash(public, subwallet_id)))
            if matches_suffix(address, suffix, case_sensitive):
                yield address, seed, subwallet_id


class _Counter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value = 0

    def increment(self) -> None:
        with self._lock:
            self.value += 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find a wallet address with a given suffix.")
    parser.add_argument("-threads", "--threads", type=int, default=os.cpu_count() or 1,
                        help="parallel threads")
    parser.add_argument("-suffix", "--suffix", default="",
                        help="desired contract suffix, required")
    parser.add_argument("-case", "--case", action="store_true", dest="case_sensitive",
                        help="is case sensitive")
    args = parser.parse_args(argv)

    if not args.suffix:
        parser.print_help(sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    counter = _Counter()
    stop = threading.Event()

    def worker() -> None:
        for address, seed, subwallet_id in generate_wallets(
            args.suffix, args.case_sensitive, counter.increment, stop
        ):
            log.info(
                "========== FOUND ==========\n Address: %s \n Private key: %s %d"
                "\n========== FOUND ==========",
                address, seed.hex(), subwallet_id,
            )

    for _ in range(max(args.threads, 1)):
        threading.Thread(target=worker, daemon=True).start()

    log.info("searching...")
    start = time.monotonic()
    try:
        while True:
            time.sleep(1)
            elapsed = max(int(time.monotonic() - start), 1)
            log.info("checked %d per second", counter.value // elapsed)
    except KeyboardInterrupt:
        stop.set()
    return 0