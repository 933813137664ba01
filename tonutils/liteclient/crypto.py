"""Key agreement, packet ciphers and checksums for the server link."""

from __future__ import annotations

import hashlib
import hmac

from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers import Cipher, CipherContext, algorithms, modes

_KEY_ID_MAGIC = bytes([0xC6, 0xB4, 0x13, 0x48])

_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def key_id(key: bytes) -> bytes:
    """Identifier of a 32-byte public key."""
    if len(key) != 32:
        raise ValueError("key not 32 bytes")
    return hashlib.sha256(_KEY_ID_MAGIC + bytes(key)).digest()


def _edwards_to_montgomery(public_key: bytes) -> bytes:
    if len(public_key) != 32:
        raise ValueError("invalid public key length")
    y = int.from_bytes(public_key, "little") & ((1 << 255) - 1)
    y %= _P
    y2 = y * y % _P
    x2 = (y2 - 1) * pow((_D * y2 + 1) % _P, _P - 2, _P) % _P
    if pow(x2, (_P - 1) // 2, _P) not in (0, 1):
        raise ValueError("invalid public key point")
    u = (1 + y) * pow((1 - y) % _P, _P - 2, _P) % _P
    return u.to_bytes(32, "little")


def shared_key(our_seed: bytes, server_key: bytes) -> bytes:
    """ECDH secret between our Ed25519 seed and the server's Ed25519 public key."""
    if len(our_seed) == 64:
        our_seed = our_seed[:32]
    if len(our_seed) != 32:
        raise ValueError("invalid private key length")
    peer = X25519PublicKey.from_public_bytes(_edwards_to_montgomery(bytes(server_key)))
    scalar = bytearray(hashlib.sha512(bytes(our_seed)).digest()[:32])
    scalar[0] &= 248
    scalar[31] &= 127
    scalar[31] |= 64
    private = X25519PrivateKey.from_private_bytes(bytes(scalar))
    return private.exchange(peer)


def new_cipher_ctr(key: bytes, iv: bytes) -> CipherContext:
    """AES-CTR keystream; call ``update`` to encrypt or decrypt."""
    return Cipher(algorithms.AES(bytes(key)), modes.CTR(bytes(iv))).encryptor()


def validate_packet(data: bytes, checksum: bytes) -> None:
    """Check the SHA-256 checksum of a received packet body."""
    if len(data) < 32:
        raise ValueError("too small packet")
    if not hmac.compare_digest(hashlib.sha256(data).digest(), bytes(checksum)):
        raise ValueError("checksum packet")