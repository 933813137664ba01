import base64
import json

import pytest

from tonutils.address import (
    AddrType,
    Address,
    AddressError,
    new_address,
    new_address_ext,
    new_address_none,
    new_address_var,
    parse_addr,
    parse_flags,
)

A = bytes([186, 41, 94, 51, 179, 196, 201, 181, 38, 90, 164, 234, 209, 22, 106, 146,
           147, 28, 233, 171, 234, 18, 10, 140, 94, 145, 4, 74, 18, 87, 248, 156])
B = bytes([147, 13, 85, 51, 152, 10, 186, 17, 252, 216, 24, 69, 169, 84, 235, 245,
           235, 42, 62, 31, 149, 112, 220, 29, 43, 146, 215, 34, 119, 63, 212, 44])


def make(bounceable, testnet, workchain, data, addr_type=AddrType.NONE):
    return Address(
        addr_type=addr_type,
        workchain=workchain,
        bits_len=256 if addr_type == AddrType.STD else 0,
        data=data,
        bounceable=bounceable,
        testnet=testnet,
    )


@pytest.mark.parametrize(
    "bounceable, testnet, workchain, data, expected",
    [
        (True, False, 0, A, 11592),
        (True, False, 0, B, 58659),
        (False, False, 0, A, 28813),
        (True, True, 0, B, 24233),
        (True, True, 1, B, 54133),
    ],
)
def test_checksum(bounceable, testnet, workchain, data, expected):
    assert make(bounceable, testnet, workchain, data).checksum() == expected


@pytest.mark.parametrize("data", [A, B])
def test_data(data):
    assert make(False, False, 0, data).data == data


@pytest.mark.parametrize(
    "data, expected",
    [
        (A, "human-readable address: EQC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nC1I "
            "isBounceable: true, isTestnetOnly: false, data.len: 32"),
        (B, "human-readable address: EQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULOUj "
            "isBounceable: true, isTestnetOnly: false, data.len: 32"),
    ],
)
def test_dump(data, expected):
    assert make(True, False, 0, data, AddrType.STD).dump() == expected


@pytest.mark.parametrize(
    "bounceable, testnet, data, expected",
    [
        (True, False, A, 0b00010001),
        (True, False, B, 0b00010001),
        (False, False, A, 0b01010001),
        (False, False, B, 0b01010001),
        (True, True, A, 0b10010001),
        (True, True, B, 0b10010001),
        (False, True, A, 0b11010001),
        (False, True, B, 0b11010001),
    ],
)
def test_flags_to_byte(bounceable, testnet, data, expected):
    assert make(bounceable, testnet, 0, data).flags_to_byte() == expected


@pytest.mark.parametrize(
    "bounceable, testnet, workchain, data",
    [
        (False, False, 0, A),
        (False, False, 0, B),
        (True, False, 0, A),
        (True, False, 0, B),
        (True, False, 1, A),
        (True, False, 2, B),
        (True, True, 1, A),
        (True, True, 2, B),
    ],
)
def test_is_bounceable(bounceable, testnet, workchain, data):
    assert make(bounceable, testnet, workchain, data).bounceable is bounceable


@pytest.mark.parametrize(
    "bounceable, testnet, workchain, data",
    [
        (False, False, 0, A),
        (False, False, 0, B),
        (False, True, 0, A),
        (False, True, 0, B),
        (False, True, 1, A),
        (False, True, 2, B),
        (True, True, 1, A),
        (True, True, 2, B),
    ],
)
def test_is_testnet_only(bounceable, testnet, workchain, data):
    assert make(bounceable, testnet, workchain, data).testnet is testnet


@pytest.mark.parametrize("initial, new", [(False, True), (True, False)])
def test_set_bounce(initial, new):
    addr = make(initial, False, 0, A)
    addr.bounceable = new
    assert addr.bounceable is new
    assert addr.flags_to_byte() == (0b00010001 if new else 0b01010001)


@pytest.mark.parametrize(
    "bounceable, initial, new",
    [(False, False, True), (False, True, False), (True, False, True), (True, True, False)],
)
def test_set_testnet_only(bounceable, initial, new):
    addr = make(bounceable, initial, 0, A)
    addr.testnet = new
    assert addr.testnet is new


STRING_CASES = [
    (True, False, 0, A, "EQC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nC1I"),
    (True, False, 0, B, "EQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULOUj"),
    (False, False, 0, A, "UQC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nHCN"),
    (False, False, 0, B, "UQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULLjm"),
    (True, True, 0, A, "kQC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nJbC"),
    (True, True, 0, B, "kQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULF6p"),
    (False, True, 0, A, "0QC6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nMsH"),
    (False, True, 0, B, "0QCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULANs"),
    (False, True, 1, A, "0QG6KV4zs8TJtSZapOrRFmqSkxzpq-oSCoxekQRKElf4nEbb"),
    (False, True, 1, B, "0QGTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULI6w"),
]


@pytest.mark.parametrize("bounceable, testnet, workchain, data, expected", STRING_CASES)
def test_str(bounceable, testnet, workchain, data, expected):
    assert str(make(bounceable, testnet, workchain, data, AddrType.STD)) == expected


@pytest.mark.parametrize("bounceable, testnet, workchain, data, text", STRING_CASES)
def test_parse(bounceable, testnet, workchain, data, text):
    expected = make(bounceable, testnet, workchain, data, AddrType.STD)
    assert parse_addr(text) == expected


@pytest.mark.parametrize("workchain", [0, 0, 1, 1])
def test_workchain(workchain):
    assert make(True, False, workchain, A).workchain == workchain


@pytest.mark.parametrize(
    "bounceable, workchain, data, prefix",
    [
        (True, 0, A, bytes([17, 0])),
        (True, 0, B, bytes([17, 0])),
        (False, 1, A, bytes([81, 1])),
        (False, 1, B, bytes([81, 1])),
    ],
)
def test_checksum_data_prefix(bounceable, workchain, data, prefix):
    text = str(make(bounceable, False, workchain, data, AddrType.STD))
    raw = base64.urlsafe_b64decode(text)
    assert raw[:34] == prefix + data


@pytest.mark.parametrize(
    "text",
    [
        "AQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULOUj",
        "EQCTDVUzmAq6EfzYGEWpVOv16yo-H5Vw3B0rktcidz_ULOUB",
    ],
)
def test_parse_bad_checksum(text):
    with pytest.raises(AddressError, match="invalid address"):
        parse_addr(text)


def test_parse_wrong_length():
    with pytest.raises(AddressError, match="incorrect address data"):
        parse_addr("EQCTDVUz")


@pytest.mark.parametrize("text", ["EQC6KV4z+8TJ", "EQC6KV4z==", "E!"])
def test_parse_bad_base64(text):
    with pytest.raises(AddressError):
        parse_addr(text)


@pytest.mark.parametrize(
    "flags, expected",
    [
        (0b00010001, (True, False)),
        (0b01010001, (False, False)),
        (0b10010001, (True, True)),
        (0b11010001, (False, True)),
    ],
)
def test_parse_flags(flags, expected):
    assert parse_flags(flags) == expected


def test_new_address_signed_workchain():
    addr = new_address(0b00010001, 0xFF, A)
    assert addr.workchain == -1
    assert addr.addr_type == AddrType.STD
    assert addr.bits_len == 256
    assert parse_addr(str(addr)) == addr


def test_other_address_kinds():
    none = new_address_none()
    assert none.is_addr_none()
    assert str(none) == "NONE"
    assert none.to_json() == '"NONE"'
    ext = new_address_ext(0, 64, b"\x01" * 8)
    assert str(ext) == "EXT_ADDRESS"
    assert ext.bits_len == 64
    assert not ext.is_addr_none()
    var = new_address_var(0, 5, 100, b"\x02" * 13)
    assert str(var) == "VAR_ADDRESS"
    assert var.workchain == 5
    assert var.bits_len == 100


def test_to_json_round_trip():
    addr = parse_addr(STRING_CASES[0][4])
    assert json.loads(addr.to_json()) == STRING_CASES[0][4]