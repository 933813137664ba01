"""Decoding of packets received from a lite server."""

from __future__ import annotations

import struct
from dataclasses import dataclass

TCP_PING = 1292381082
TCP_PONG = -597034237

ADNL_QUERY = -1265895046
ADNL_QUERY_RESPONSE = 262964246

LITE_SERVER_QUERY = 2039219935


@dataclass(frozen=True)
class ServerResponse:
    """Type of a server answer, the hex query id it replies to and its payload."""

    type_id: int
    query_id: str = ""
    payload: bytes = b""


def parse_server_resp(data: bytes) -> ServerResponse:
    """Split a decrypted packet body into its type, query id and payload."""
    if len(data) <= 4:
        raise ValueError(f"too short adnl packet: {len(data)}")

    (typ,) = struct.unpack_from("<i", data)
    data = data[4:]

    if typ == TCP_PONG:
        if len(data) < 8:
            raise ValueError(f"too short pong packet: {len(data)}")
        return ServerResponse(typ, data[:8].hex())

    if typ == ADNL_QUERY_RESPONSE:
        if len(data) <= 32:
            raise ValueError(f"too short adnl query response packet: {len(data)}")
        query_id = data[:32].hex()
        data = data[32:]

        if data[0] == 0xFE:
            if len(data) <= 4:
                raise ValueError(f"too short adnl query response packet: {len(data)}")
            (length,) = struct.unpack_from("<I", data)
            length >>= 8
            data = data[4:]
        else:
            length = data[0]
            data = data[1:]

        if len(data) < length or length < 4:
            raise ValueError(f"adnl payload size incorrect: {length}")

        (inner,) = struct.unpack_from("<i", data)
        return ServerResponse(inner, query_id, bytes(data[4:length]))

    return ServerResponse(typ)