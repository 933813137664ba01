# tonutils

Building blocks for talking to the TON blockchain from Python:

- `tonutils.address`: parse, build and format user-friendly addresses
  (URL-safe base64 of a flags byte, the workchain, the 32-byte account id
  and a CRC16/XMODEM checksum).
- `tonutils.tl`: TL serialization of byte strings and of dataclasses
  whose fields are TL integers and byte strings.
- `tonutils.liteclient`: global network configs, the handshake
  cryptography, packet parsing, encrypted TCP connections to lite servers
  and a balancing connection pool.
- `tonutils-vanity`: a command that searches for a wallet v3 key whose
  address ends with a chosen suffix.

## Installation

```
pip install .
```

Python 3.10 or newer is needed; the only dependency is `cryptography`.

## Addresses

```python
from tonutils.address import AddressError, parse_addr

addr = parse_addr("EQC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nC1I")
print(str(addr))         # the same user-friendly form
print(addr.workchain, addr.bounceable, addr.testnet)
print(addr.checksum())   # CRC16 over flags, workchain and account id
print(addr.dump())       # a one-line summary
print(addr.to_json())    # the friendly form as a JSON string

try:
    parse_addr("EQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULOUB")
except AddressError as exc:
    print("rejected:", exc)
```

`parse_addr` raises `AddressError` for bad base64, for data that is not
36 bytes long and for a wrong checksum.

`Address` is a dataclass with `addr_type` (an `AddrType`: `NONE`, `EXT`,
`STD` or `VAR`), `workchain`, `bits_len`, `data`, `bounceable` and
`testnet`. The constructors `new_address`, `new_address_var`,
`new_address_ext` and `new_address_none` build each kind; a flags byte is
decoded with `parse_flags` into `(bounceable, testnet)` and produced with
`Address.flags_to_byte`. Only standard addresses have a friendly form;
`str()` of the others gives `NONE`, `EXT_ADDRESS` or `VAR_ADDRESS`.

`tonutils.bits` holds the small `set_bit`, `clear_bit` and `has_bit`
helpers used for the flags byte.

## TL serialization

```python
from dataclasses import dataclass

from tonutils.tl import Int32, Int64, UInt32, UInt64, marshal, to_bytes, unmarshal


@dataclass
class Record:
    a: Int32
    b: Int64
    c: UInt32
    d: UInt64
    e: bytes


to_bytes(b"\xff\xaa")                  # b"\x02\xff\xaa\x00"
raw = marshal(Record(1, 2, 3, 4, b"\x01"))
assert unmarshal(raw, Record) == Record(1, 2, 3, 4, b"\x01")
```

Byte strings are length-prefixed (one byte, or `0xFE` and three bytes
from 254 on) and padded to a multiple of four. Integer fields are marked
with `Int32`, `UInt32`, `Int64` or `UInt64` and written little-endian;
`Bytes32` is a byte string that must be exactly 32 bytes long. An object
with a `marshal_tl()` method is serialized by that method.
`encode_length` and `read_byte_slice` expose the length prefix on its own.
Values that cannot be encoded or decoded raise `TLError`.

## Lite-server connections

```python
from tonutils.liteclient.pool import ConnectionPool

pool = ConnectionPool()
pool.add_connections_from_config_url("https://example.com/global.config.json", 10)

response = pool.do(-1984567762, b"", timeout=30)
print(response.type_id, response.data.hex())
```

- `add_connection(addr, server_key, timeout)` connects to one
  `host:port` whose key is the base64 Ed25519 public key.
- `add_connections_from_config(config, timeout)` connects to every
  server of a `GlobalConfig` at once and returns on the first success; it
  raises `NoConnectionsError` when the config lists no servers, and the
  last error when all of them fail. `add_connections_from_config_url`
  downloads the config first.
- `do(type_id, payload, timeout, sticky)` sends a request over the next
  connection in round-robin order and waits for the response (30 seconds
  when no timeout is given), raising `TimeoutError` on expiry and
  `NoActiveConnectionsError` when no connection can take it.
- `sticky_node()` returns the id of a random active connection (0 if
  none); pass it as `sticky` to send a series of dependent requests to
  the same server, falling back to round robin if it has gone.
- Dropped connections are reconnected by default (every 3 seconds,
  without limit). `set_on_disconnect` replaces the policy, for example
  with one built by `default_reconnect(wait_before_reconnect, max_tries)`
  where `-1` means retry forever, or with `None` to do nothing.

Each `Connection` pings its server every 5 seconds and can be closed with
`close()`.

Configs can be loaded on their own with
`tonutils.liteclient.config.get_config_from_url`, or built from an
already decoded JSON document with `config_from_dict`; `int_to_ip4`
turns the integer server addresses into dotted form.
`tonutils.liteclient.crypto` (`key_id`, `shared_key`, `new_cipher_ctr`,
`validate_packet`) and `tonutils.liteclient.parse` (`parse_server_resp`)
hold the handshake and packet primitives the connections use.

## Vanity addresses

```
tonutils-vanity --suffix ABC
```

Options:

- `--suffix` (or `-suffix`): the wanted end of the address; required.
- `--case` (or `-case`): compare case-sensitively; by default case is
  ignored.
- `--threads` (or `-threads`): number of worker threads; defaults to the
  CPU count.

The command logs its average rate every second and, for each match, the
address, the hex private key seed and the subwallet id. It runs until
interrupted. The same search is available in code through
`tonutils.vanity.generate_wallets`, with `v3_address_hash` and
`matches_suffix` as its parts.

## What is not included

The pool moves raw request and response bytes only. There is no decoding
of blocks, accounts or transactions, no get-method runner, no message
sending and no wallet handling; callers build request payloads and read
responses themselves.

## Running the tests

```
pip install .[test]
pytest
```