"""Account addresses in their user-friendly base64 form."""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from enum import IntEnum

from tonutils.bits import has_bit, set_bit

_URLSAFE_RAW = re.compile(r"[A-Za-z0-9_-]*")


class AddrType(IntEnum):
    NONE = 0
    EXT = 1
    STD = 2
    VAR = 3


class AddressError(ValueError):
    """Raised when an address string cannot be parsed."""


def _crc16_xmodem(data: bytes) -> int:
    return binascii.crc_hqx(data, 0)


def _signed_byte(value: int) -> int:
    return ((value & 0xFF) ^ 0x80) - 0x80


@dataclass
class Address:
    """An account address with its flags."""

    addr_type: AddrType = AddrType.NONE
    workchain: int = 0
    bits_len: int = 0
    data: bytes = b""
    bounceable: bool = False
    testnet: bool = False

    def is_addr_none(self) -> bool:
        return self.addr_type == AddrType.NONE

    def flags_to_byte(self) -> int:
        """Encode the flags as the leading byte of the friendly form."""
        flags = 0b00010001
        if not self.bounceable:
            flags = set_bit(flags, 6)
        if self.testnet:
            flags = set_bit(flags, 7)
        return flags

    def _checksum_data(self) -> bytes:
        body = bytes(self.data[:32]).ljust(32, b"\x00")
        return bytes([self.flags_to_byte(), self.workchain & 0xFF]) + body

    def checksum(self) -> int:
        """CRC16/XMODEM of the flags, workchain and account id."""
        return _crc16_xmodem(self._checksum_data())

    def __str__(self) -> str:
        if self.addr_type == AddrType.NONE:
            return "NONE"
        if self.addr_type == AddrType.STD:
            head = self._checksum_data()
            raw = head + _crc16_xmodem(head).to_bytes(2, "big")
            return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        if self.addr_type == AddrType.EXT:
            return "EXT_ADDRESS"
        if self.addr_type == AddrType.VAR:
            return "VAR_ADDRESS"
        return "NOT_SUPPORTED"

    def to_json(self) -> str:
        return json.dumps(str(self))

    def dump(self) -> str:
        return (
            f"human-readable address: {self} "
            f"isBounceable: {str(self.bounceable).lower()}, "
            f"isTestnetOnly: {str(self.testnet).lower()}, "
            f"data.len: {len(self.data)}"
        )


def parse_flags(data: int) -> tuple[bool, bool]:
    """Decode a flags byte into ``(bounceable, testnet)``."""
    return not has_bit(data, 6), has_bit(data, 7)


def new_address(flags: int, workchain: int, data: bytes) -> Address:
    """Standard 256-bit address; ``workchain`` is taken as a signed byte."""
    bounceable, testnet = parse_flags(flags)
    return Address(
        addr_type=AddrType.STD,
        workchain=_signed_byte(workchain),
        bits_len=256,
        data=bytes(data),
        bounceable=bounceable,
        testnet=testnet,
    )


def new_address_var(flags: int, workchain: int, bits_len: int, data: bytes) -> Address:
    bounceable, testnet = parse_flags(flags)
    return Address(
        addr_type=AddrType.VAR,
        workchain=workchain,
        bits_len=bits_len,
        data=bytes(data),
        bounceable=bounceable,
        testnet=testnet,
    )


def new_address_ext(flags: int, bits_len: int, data: bytes) -> Address:
    bounceable, testnet = parse_flags(flags)
    return Address(
        addr_type=AddrType.EXT,
        workchain=0,
        bits_len=bits_len,
        data=bytes(data),
        bounceable=bounceable,
        testnet=testnet,
    )


def new_address_none() -> Address:
    return Address(addr_type=AddrType.NONE)


def _raw_urlsafe_decode(text: str) -> bytes:
    if not _URLSAFE_RAW.fullmatch(text) or len(text) % 4 == 1:
        raise AddressError("illegal base64 data")
    try:
        return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        raise AddressError("illegal base64 data") from exc


def parse_addr(addr: str) -> Address:
    """Parse a user-friendly address, verifying its checksum."""
    data = _raw_urlsafe_decode(addr)
    if len(data) != 36:
        raise AddressError("incorrect address data")
    if _crc16_xmodem(data[:34]) != int.from_bytes(data[34:], "big"):
        raise AddressError("invalid address")
    return new_address(data[0], data[1], data[2:34])