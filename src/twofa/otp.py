"""HOTP / TOTP code derivation (RFC 4226, RFC 6238).

The hash function and the time source are passed in rather than read from
globals: ``hotp``/``totp`` take a ``digest`` constructor (SHA-1 by default)
and ``code`` takes a clock object plus an optional ``totp`` replacement.
"""
import base64
import binascii
import hashlib
import hmac
import struct
import time
from datetime import datetime, timezone
from typing import Callable, Mapping, Union

from .keychain import KeyRecord
from .utils import InvalidDigitCount, InvalidSecretEncoding, KeyNotFound

DEFAULT_PERIOD = 30
MAX_DIGITS = 9  # 10**9 is the largest power of ten below 2**31

Timestamp = Union[int, float, datetime]


class SystemClock:
    def now(self) -> float:
        return time.time()


class FixedClock:
    """Clock frozen at ``t`` (Unix seconds or a datetime)."""

    def __init__(self, t: Timestamp):
        self.t = t

    def now(self) -> Timestamp:
        return self.t


def unix_seconds(t: Timestamp) -> float:
    if isinstance(t, datetime):
        if t.tzinfo is None:
            # naive datetimes are taken as UTC
            t = t.replace(tzinfo=timezone.utc)
        return t.timestamp()
    return t


def decode_secret(secret: str) -> bytes:
    """Decode a stored base-32 secret; lowercase and missing padding are accepted."""
    try:
        return base64.b32decode(secret + "=" * (-len(secret) % 8), casefold=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidSecretEncoding(secret) from e


def hotp(key: bytes, counter: int, digits: int, digest: Callable = hashlib.sha1) -> int:
    if not 1 <= digits <= MAX_DIGITS:
        raise InvalidDigitCount(digits)
    if not 0 <= counter < 1 << 64:
        raise ValueError(f"counter out of range: {counter}")
    msg = struct.pack(">Q", counter)
    mac = hmac.new(key, msg, digest).digest()
    offset = mac[-1] & 0x0F
    code_int = struct.unpack(">I", mac[offset:offset + 4])[0] & 0x7FFFFFFF
    return code_int % (10 ** digits)


def totp(key: bytes, t: Timestamp, digits: int, digest: Callable = hashlib.sha1, period: int = DEFAULT_PERIOD) -> int:
    counter = int(unix_seconds(t) // period)
    return hotp(key, counter, digits, digest)


def format_code(value: int, digits: int) -> str:
    return str(value).zfill(digits)


def code(store: Mapping[str, KeyRecord], name: str, clock, *, totp: Callable = totp) -> str:
    """Return the current display code for ``name``.

    Raises KeyNotFound when the account is missing and InvalidSecretEncoding
    when its secret does not decode.
    """
    try:
        rec = store[name]
    except KeyError:
        raise KeyNotFound(name) from None
    key = decode_secret(rec.secret)
    return format_code(totp(key, clock.now(), rec.digits), rec.digits)
