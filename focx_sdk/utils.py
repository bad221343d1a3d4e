"""Utility functions for the FOCX SDK."""

import struct

from Crypto.Hash import SHA256
from solders.pubkey import Pubkey

from .constants import (
    MAX_I64,
    MAX_U8,
    MAX_U16,
    MAX_U32,
    MAX_U64,
    MIN_I64,
    PUBKEY_SIZE,
)
from .errors import InvalidAccountDataError, InvalidArgumentError


def sha256(data: bytes) -> bytes:
    """Compute the SHA-256 digest of data."""
    return SHA256.new(data).digest()


def require_int(name: str, value) -> None:
    """Reject non-integers, including bools and floats.

    Raises:
        InvalidArgumentError: If value is not an int
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer, got {type(value).__name__}")


def encode_u8(value: int) -> bytes:
    """Encode an unsigned 8-bit integer.

    Raises:
        InvalidArgumentError: If value is out of range [0, 255]
    """
    require_int("u8 value", value)
    if not 0 <= value <= MAX_U8:
        raise InvalidArgumentError(f"u8 value out of range: {value} (must be 0-{MAX_U8})")
    return struct.pack("<B", value)


def encode_u16(value: int) -> bytes:
    """Encode an unsigned 16-bit integer (little-endian)."""
    require_int("u16 value", value)
    if not 0 <= value <= MAX_U16:
        raise InvalidArgumentError(f"u16 value out of range: {value} (must be 0-{MAX_U16})")
    return struct.pack("<H", value)


def encode_u32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer (little-endian)."""
    require_int("u32 value", value)
    if not 0 <= value <= MAX_U32:
        raise InvalidArgumentError(f"u32 value out of range: {value} (must be 0-{MAX_U32})")
    return struct.pack("<I", value)


def encode_u64(value: int) -> bytes:
    """Encode an unsigned 64-bit integer (little-endian)."""
    require_int("u64 value", value)
    if not 0 <= value <= MAX_U64:
        raise InvalidArgumentError(f"u64 value out of range: {value} (must be 0-{MAX_U64})")
    return struct.pack("<Q", value)


def encode_i64(value: int) -> bytes:
    """Encode a signed 64-bit integer (little-endian)."""
    require_int("i64 value", value)
    if not MIN_I64 <= value <= MAX_I64:
        raise InvalidArgumentError(f"i64 value out of range: {value}")
    return struct.pack("<q", value)


def encode_bool(value: bool) -> bytes:
    """Encode a boolean as a single byte."""
    return b"\x01" if value else b"\x00"


def _require(data: bytes, offset: int, size: int, what: str) -> None:
    if offset < 0 or offset + size > len(data):
        raise InvalidAccountDataError(
            f"Not enough bytes for {what} at offset {offset}: "
            f"need {size} bytes, have {max(len(data) - offset, 0)}"
        )


def decode_u8(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 8-bit integer."""
    _require(data, offset, 1, "u8")
    return struct.unpack_from("<B", data, offset)[0]


def decode_u16(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 16-bit integer (little-endian)."""
    _require(data, offset, 2, "u16")
    return struct.unpack_from("<H", data, offset)[0]


def decode_u32(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 32-bit integer (little-endian)."""
    _require(data, offset, 4, "u32")
    return struct.unpack_from("<I", data, offset)[0]


def decode_u64(data: bytes, offset: int = 0) -> int:
    """Decode an unsigned 64-bit integer (little-endian)."""
    _require(data, offset, 8, "u64")
    return struct.unpack_from("<Q", data, offset)[0]


def decode_i64(data: bytes, offset: int = 0) -> int:
    """Decode a signed 64-bit integer (little-endian)."""
    _require(data, offset, 8, "i64")
    return struct.unpack_from("<q", data, offset)[0]


def decode_bool(data: bytes, offset: int = 0) -> bool:
    """Decode a boolean from a single byte.

    Raises:
        InvalidAccountDataError: If the byte is neither 0 nor 1
    """
    value = decode_u8(data, offset)
    if value > 1:
        raise InvalidAccountDataError(f"Invalid bool byte {value} at offset {offset}")
    return value == 1


def decode_pubkey(data: bytes, offset: int = 0) -> Pubkey:
    """Decode a Pubkey from 32 bytes."""
    _require(data, offset, PUBKEY_SIZE, "Pubkey")
    return Pubkey.from_bytes(bytes(data[offset : offset + PUBKEY_SIZE]))


def decode_bytes(data: bytes, offset: int, length: int) -> bytes:
    """Slice exactly ``length`` bytes starting at ``offset``."""
    _require(data, offset, length, f"{length}-byte array")
    return bytes(data[offset : offset + length])


def pad_seed_string(s: str, length: int) -> bytes:
    """Encode a string as a fixed-length, zero-padded seed."""
    encoded = s.encode("utf-8")
    if len(encoded) > length:
        raise InvalidArgumentError(f"String too long: {len(encoded)} > {length}")
    return encoded + b"\x00" * (length - len(encoded))

