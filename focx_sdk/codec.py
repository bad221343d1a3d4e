"""Canonical binary encoding for instruction arguments and account data.

Values are laid out in Borsh form: little-endian fixed-width integers,
``u32`` length prefixes for strings and vectors, a one-byte tag for options,
raw bytes for fixed arrays and public keys, and struct fields in declaration
order with no padding.

Dataclasses opt in by declaring a ``LAYOUT`` class attribute listing
``(field_name, field_type)`` pairs in wire order.
"""

from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from solders.pubkey import Pubkey

from .constants import DISCRIMINATOR_SIZE, PUBKEY_SIZE
from .errors import InvalidAccountDataError, InvalidArgumentError, InvalidDiscriminatorError
from .utils import (
    decode_bool,
    decode_bytes,
    decode_i64,
    decode_pubkey,
    decode_u16,
    decode_u32,
    decode_u64,
    decode_u8,
    encode_bool,
    encode_i64,
    encode_u16,
    encode_u32,
    encode_u64,
    encode_u8,
    sha256,
)

T = TypeVar("T")


class FieldType:
    """A wire type that can encode a Python value and decode it back."""

    name = "field"

    def encode(self, value: Any) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes, offset: int) -> Tuple[Any, int]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.name


class _Scalar(FieldType):
    def __init__(
        self,
        name: str,
        size: int,
        encoder: Callable[[Any], bytes],
        decoder: Callable[[bytes, int], Any],
    ):
        self.name = name
        self.size = size
        self._encoder = encoder
        self._decoder = decoder

    def encode(self, value: Any) -> bytes:
        if self.name != "bool" and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidArgumentError(f"{self.name} expects an int, got {type(value).__name__}")
        return self._encoder(value)

    def decode(self, data: bytes, offset: int) -> Tuple[Any, int]:
        return self._decoder(data, offset), offset + self.size


class _String(FieldType):
    name = "string"

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, str):
            raise InvalidArgumentError(f"string expects str, got {type(value).__name__}")
        encoded = value.encode("utf-8")
        return encode_u32(len(encoded)) + encoded

    def decode(self, data: bytes, offset: int) -> Tuple[str, int]:
        length = decode_u32(data, offset)
        raw = decode_bytes(data, offset + 4, length)
        try:
            return raw.decode("utf-8"), offset + 4 + length
        except UnicodeDecodeError as e:
            raise InvalidAccountDataError(f"string at offset {offset} is not utf-8: {e}") from e


class _Pubkey(FieldType):
    name = "pubkey"

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, Pubkey):
            raise InvalidArgumentError(f"pubkey expects Pubkey, got {type(value).__name__}")
        return bytes(value)

    def decode(self, data: bytes, offset: int) -> Tuple[Pubkey, int]:
        return decode_pubkey(data, offset), offset + PUBKEY_SIZE


class Vec(FieldType):
    """Length-prefixed sequence; decodes to a list."""

    def __init__(self, inner: FieldType):
        self.inner = inner
        self.name = f"vec<{inner!r}>"

    def encode(self, value: Any) -> bytes:
        if isinstance(value, (str, bytes)):
            raise InvalidArgumentError(f"{self.name} expects a sequence, got {type(value).__name__}")
        items = list(value)
        return encode_u32(len(items)) + b"".join(self.inner.encode(item) for item in items)

    def decode(self, data: bytes, offset: int) -> Tuple[List[Any], int]:
        count = decode_u32(data, offset)
        offset += 4
        items = []
        for _ in range(count):
            item, offset = self.inner.decode(data, offset)
            items.append(item)
        return items, offset


class _ByteVec(FieldType):
    """``Vec<u8>`` carried as ``bytes``."""

    name = "bytes"

    def encode(self, value: Any) -> bytes:
        value = bytes(value)
        return encode_u32(len(value)) + value

    def decode(self, data: bytes, offset: int) -> Tuple[bytes, int]:
        length = decode_u32(data, offset)
        return decode_bytes(data, offset + 4, length), offset + 4 + length


class FixedBytes(FieldType):
    """Fixed-size byte array with no length prefix."""

    def __init__(self, length: int):
        self.length = length
        self.name = f"[u8; {length}]"

    def encode(self, value: Any) -> bytes:
        value = bytes(value)
        if len(value) != self.length:
            raise InvalidArgumentError(f"{self.name} expects {self.length} bytes, got {len(value)}")
        return value

    def decode(self, data: bytes, offset: int) -> Tuple[bytes, int]:
        return decode_bytes(data, offset, self.length), offset + self.length


class Option(FieldType):
    """Optional value: tag byte 0 (None) or 1 followed by the value."""

    def __init__(self, inner: FieldType):
        self.inner = inner
        self.name = f"option<{inner!r}>"

    def encode(self, value: Any) -> bytes:
        if value is None:
            return b"\x00"
        return b"\x01" + self.inner.encode(value)

    def decode(self, data: bytes, offset: int) -> Tuple[Optional[Any], int]:
        tag = decode_u8(data, offset)
        if tag == 0:
            return None, offset + 1
        if tag != 1:
            raise InvalidAccountDataError(f"Invalid option tag {tag} at offset {offset}")
        return self.inner.decode(data, offset + 1)


class Struct(FieldType):
    """Nested struct described by a dataclass with a ``LAYOUT``."""

    def __init__(self, cls: type):
        self.cls = cls
        self.name = cls.__name__

    def encode(self, value: Any) -> bytes:
        return encode_struct(value)

    def decode(self, data: bytes, offset: int) -> Tuple[Any, int]:
        return decode_struct(self.cls, data, offset)


U8: FieldType = _Scalar("u8", 1, encode_u8, decode_u8)
U16: FieldType = _Scalar("u16", 2, encode_u16, decode_u16)
U32: FieldType = _Scalar("u32", 4, encode_u32, decode_u32)
U64: FieldType = _Scalar("u64", 8, encode_u64, decode_u64)
I64: FieldType = _Scalar("i64", 8, encode_i64, decode_i64)
BOOL: FieldType = _Scalar("bool", 1, encode_bool, decode_bool)
STRING: FieldType = _String()
PUBKEY: FieldType = _Pubkey()
BYTES: FieldType = _ByteVec()


# ============================================================================
# Structs
# ============================================================================


def encode_struct(obj: Any) -> bytes:
    """Encode a ``LAYOUT`` dataclass field by field."""
    layout = getattr(type(obj), "LAYOUT", None)
    if layout is None:
        raise InvalidArgumentError(f"{type(obj).__name__} has no wire layout")

    parts = []
    for field_name, field_type in layout:
        try:
            parts.append(field_type.encode(getattr(obj, field_name)))
        except InvalidArgumentError as e:
            raise InvalidArgumentError(f"{type(obj).__name__}.{field_name}: {e}") from e
    return b"".join(parts)


def decode_struct(cls: Type[T], data: bytes, offset: int = 0) -> Tuple[T, int]:
    """Decode a ``LAYOUT`` dataclass, returning it and the next offset."""
    values = {}
    for field_name, field_type in cls.LAYOUT:  # type: ignore[attr-defined]
        values[field_name], offset = field_type.decode(data, offset)
    return cls(**values), offset


# ============================================================================
# Discriminators
# ============================================================================


def instruction_discriminator(name: str) -> bytes:
    """First 8 bytes of sha256("global:<name>")."""
    return sha256(f"global:{name}".encode("utf-8"))[:DISCRIMINATOR_SIZE]


def account_discriminator(name: str) -> bytes:
    """First 8 bytes of sha256("account:<Name>")."""
    return sha256(f"account:{name}".encode("utf-8"))[:DISCRIMINATOR_SIZE]


def encode_instruction(name: str, args: Any = None) -> bytes:
    """Encode an instruction payload: discriminator || canonical(args)."""
    body = b"" if args is None else encode_struct(args)
    return instruction_discriminator(name) + body


def decode_instruction(name: str, cls: Type[T], data: bytes) -> T:
    """Decode a payload produced by :func:`encode_instruction`.

    Raises:
        InvalidDiscriminatorError: If the payload is for a different instruction
        InvalidAccountDataError: If the payload is truncated or has trailing bytes
    """
    expected = instruction_discriminator(name)
    actual = bytes(data[:DISCRIMINATOR_SIZE])
    if actual != expected:
        raise InvalidDiscriminatorError(expected, actual)

    args, offset = decode_struct(cls, data, DISCRIMINATOR_SIZE)
    if offset != len(data):
        raise InvalidAccountDataError(
            f"{len(data) - offset} trailing bytes after {name} arguments"
        )
    return args


def decode_account(name: str, cls: Type[T], data: bytes) -> T:
    """Validate an account discriminator and decode the remaining fields.

    Trailing bytes are allowed: accounts are allocated at their maximum size.
    """
    if len(data) < DISCRIMINATOR_SIZE:
        raise InvalidAccountDataError(f"{name} data too short: {len(data)} bytes")
    expected = account_discriminator(name)
    actual = bytes(data[:DISCRIMINATOR_SIZE])
    if actual != expected:
        raise InvalidDiscriminatorError(expected, actual)

    account, _ = decode_struct(cls, data, DISCRIMINATOR_SIZE)
    return account
