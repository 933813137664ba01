"""Binary TL serialization of integers, byte strings and dataclasses."""

import dataclasses
import io
import struct
import typing
from dataclasses import dataclass
from typing import Annotated, Any, BinaryIO, TypeVar

T = TypeVar("T")


class TLError(ValueError):
    """Raised when a value cannot be encoded or decoded."""


@dataclass(frozen=True)
class _Int:
    fmt: str


@dataclass(frozen=True)
class _FixedBytes:
    size: int


Int32 = Annotated[int, _Int("<i")]
UInt32 = Annotated[int, _Int("<I")]
Int64 = Annotated[int, _Int("<q")]
UInt64 = Annotated[int, _Int("<Q")]
Bytes32 = Annotated[bytes, _FixedBytes(32)]


def encode_length(i: int) -> bytes:
    """Length prefix of a TL byte string."""
    if i >= 0xFE:
        return bytes([0xFE]) + ((i << 8) & 0xFFFFFFFF).to_bytes(4, "little")[1:]
    return bytes([i])


def to_bytes(buf: bytes) -> bytes:
    """Encode ``buf`` as a TL byte string padded to a multiple of four."""
    data = encode_length(len(buf)) + bytes(buf)
    return data + b"\x00" * (-len(data) % 4)


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    data = stream.read(n)
    if len(data) < n:
        raise TLError("unexpected end of data")
    return data


def read_byte_slice(stream: BinaryIO) -> bytes:
    """Read one TL byte string, including its padding, from ``stream``."""
    first = _read_exact(stream, 1)[0]
    if first < 0xFE:
        data = _read_exact(stream, first)
        full = 1 + len(data)
    elif first == 0xFE:
        size = int.from_bytes(_read_exact(stream, 3), "little")
        data = _read_exact(stream, size)
        full = 4 + len(data)
    else:
        raise TLError("invalid bytes prefix")
    _read_exact(stream, -full % 4)
    return data


def _split_annotated(hint: Any) -> tuple[Any, Any]:
    if typing.get_origin(hint) is Annotated:
        base, *meta = typing.get_args(hint)
        for item in meta:
            if isinstance(item, (_Int, _FixedBytes)):
                return base, item
        return base, None
    return hint, None


def _field_hints(cls: type) -> dict[str, Any]:
    hints = {}
    for f in dataclasses.fields(cls):
        if isinstance(f.type, str):
            raise TLError(
                f"cannot resolve annotations of {cls.__name__}: "
                f"field {f.name} has a string annotation"
            )
        hints[f.name] = f.type
    return hints


def _encode(value: Any, hint: Any = None) -> bytes:
    marshal_tl = getattr(value, "marshal_tl", None)
    if callable(marshal_tl):
        return marshal_tl()

    _, meta = _split_annotated(hint)
    if isinstance(meta, _Int):
        try:
            return struct.pack(meta.fmt, value)
        except struct.error as exc:
            raise TLError(f"integer {value!r} does not fit: {exc}") from exc
    if isinstance(meta, _FixedBytes):
        if not isinstance(value, (bytes, bytearray)) or len(value) != meta.size:
            raise TLError(f"expected {meta.size} bytes")
        return to_bytes(bytes(value))

    if isinstance(value, (bytes, bytearray)):
        return to_bytes(bytes(value))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        hints = _field_hints(type(value))
        return b"".join(
            _encode(getattr(value, f.name), hints.get(f.name))
            for f in dataclasses.fields(value)
        )
    raise TLError(f"type {type(value).__name__} not implemented")


def marshal(obj: Any) -> bytes:
    """Serialize a byte string, a dataclass or an object with ``marshal_tl``."""
    return _encode(obj)


def _decode(stream: BinaryIO, hint: Any) -> Any:
    base, meta = _split_annotated(hint)
    if isinstance(meta, _Int):
        size = struct.calcsize(meta.fmt)
        return struct.unpack(meta.fmt, _read_exact(stream, size))[0]
    if isinstance(meta, _FixedBytes):
        data = read_byte_slice(stream)
        if len(data) != meta.size:
            raise TLError(
                f"mismatched length of decoded byte slice ({len(data)}) "
                f"and array ({meta.size})"
            )
        return data
    if base is bytes:
        return read_byte_slice(stream)
    if base is bytearray:
        return bytearray(read_byte_slice(stream))
    if isinstance(base, type) and dataclasses.is_dataclass(base):
        hints = _field_hints(base)
        values = {}
        for f in dataclasses.fields(base):
            if not f.init:
                raise TLError(f"can't set field {f.name}")
            values[f.name] = _decode(stream, hints.get(f.name))
        return base(**values)
    name = getattr(base, "__name__", repr(base))
    raise TLError(f"type {name} not implemented")


def unmarshal(data: bytes, cls: type[T]) -> T:
    """Deserialize ``data`` into an instance of ``cls``."""
    return _decode(io.BytesIO(data), cls)