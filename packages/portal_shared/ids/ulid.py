"""ULID generation and conversion helpers.

Rows keyed by ULID store the canonical 16-byte big-endian form; the 26-char
Crockford Base32 form is used at API boundaries.
"""

from __future__ import annotations

import secrets
import time

ULID_BYTES_LENGTH = 16
_ULID_STR_LENGTH = 26
_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODE = {char: index for index, char in enumerate(_ALPHABET)}


def generate_ulid_bytes(*, timestamp_ms: int | None = None) -> bytes:
    """Return a new ULID: 48-bit millisecond timestamp then 80 random bits."""
    ts_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    if not 0 <= ts_ms < (1 << 48):
        raise ValueError("timestamp_ms out of ULID 48-bit range")
    entropy = int.from_bytes(secrets.token_bytes(10), byteorder="big")
    return ((ts_ms << 80) | entropy).to_bytes(ULID_BYTES_LENGTH, byteorder="big")


def ulid_bytes_to_str(value: bytes) -> str:
    """Encode 16 ULID bytes as the canonical 26-char string."""
    if len(value) != ULID_BYTES_LENGTH:
        raise ValueError("ULID bytes must be exactly 16 bytes")
    number = int.from_bytes(value, byteorder="big")
    chars: list[str] = []
    for _ in range(_ULID_STR_LENGTH):
        number, remainder = divmod(number, 32)
        chars.append(_ALPHABET[remainder])
    return "".join(reversed(chars))


def ulid_str_to_bytes(value: str) -> bytes:
    """Decode a canonical 26-char ULID string into 16 bytes."""
    candidate = value.strip().upper()
    if len(candidate) != _ULID_STR_LENGTH:
        raise ValueError("ULID string must be exactly 26 characters")
    number = 0
    for char in candidate:
        if char not in _DECODE:
            raise ValueError(f"Invalid ULID character: {char!r}")
        number = (number << 5) | _DECODE[char]
    if number >= 1 << 128:
        raise ValueError("ULID value exceeds 128-bit range")
    return number.to_bytes(ULID_BYTES_LENGTH, byteorder="big")


def generate_ulid_str(*, timestamp_ms: int | None = None) -> str:
    return ulid_bytes_to_str(generate_ulid_bytes(timestamp_ms=timestamp_ms))
