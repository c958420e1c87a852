"""Cursor encoding and decoding.

A cursor is an opaque, URL-safe string that captures the sort-key values of
one row. Passing it back (``after=`` / ``before=``) lets the next query
seek directly to that row instead of scanning with OFFSET.

Encoding happens in two layers:

1. ``ConverterRegistry.to_portable`` turns each value into a portable form
   (datetimes become integer microseconds, UUIDs hex strings, ...).
2. A ``CursorCodec`` serializes the list of portable values to bytes and
   applies unpadded base64url.

Codecs:
    BinaryCursorCodec  versioned, length-prefixed typed values (default)
    JSONCursorCodec    compact JSON; easier to inspect while debugging
    SignedCursorCodec  wraps either of the above with an HMAC-SHA256 tag

Example:
    codec = BinaryCursorCodec()
    cursor = encode_cursor(["Smith", 42], codec)
    decode_cursor(cursor, codec)  # ["Smith", 42]

Callers must treat cursors as opaque. Decoding is written for untrusted
input: it never evaluates or instantiates anything beyond plain values and
registered tags, and it bounds nesting depth and payload sizes.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import math
import re
import struct
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from keyset_pagination.core.exceptions import (
    CursorEncodeError,
    InvalidEncodingError,
    InvalidPayloadError,
)
from keyset_pagination.core.pagination.converters import (
    DEFAULT_CONVERTERS,
    ConverterRegistry,
    TaggedValue,
)

if TYPE_CHECKING:
    from keyset_pagination.core.settings.pagination import PaginationSettings

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*={0,2}")

# Nested lists only appear inside converter payloads; real cursors stay shallow.
MAX_DEPTH = 8
MAX_INT_BYTES = 64


@runtime_checkable
class CursorCodec(Protocol):
    """Serializes an ordered list of portable values to an opaque string."""

    def encode(self, values: Sequence[Any]) -> str:
        """Encode portable values into a URL-safe string."""
        ...

    def decode(self, cursor: str) -> list[Any]:
        """Decode a string produced by ``encode``.

        Raises:
            InvalidEncodingError: The text encoding is malformed
            InvalidPayloadError: The decoded bytes are not a list of values
        """
        ...


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    if not _BASE64URL.fullmatch(text):
        raise InvalidEncodingError("Cursor is not base64url encoded")
    stripped = text.rstrip("=")
    try:
        return base64.urlsafe_b64decode(stripped + "=" * (-len(stripped) % 4))
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError("Cursor is not base64url encoded") from e


class BinaryCursorCodec:
    """Versioned binary cursor format.

    Layout: one version byte followed by a single list value. Every value is
    a one-byte type marker followed by its body:

    ====== ==============================================
    marker body
    ====== ==============================================
    ``N``  none
    ``T``  true
    ``F``  false
    ``I``  u16 length + signed big-endian integer
    ``D``  finite IEEE-754 double, big-endian
    ``S``  u32 length + UTF-8 bytes
    ``B``  u32 length + raw bytes
    ``L``  u32 count + values
    ``X``  u16 length + UTF-8 tag + one value (tagged)
    ====== ==============================================

    Integer width is derived from ``bit_length`` and nothing is padded, so
    equal value lists always produce the same cursor.
    """

    VERSION = 1

    def encode(self, values: Sequence[Any]) -> str:
        out = bytearray([self.VERSION])
        self._write(out, list(values), depth=0)
        return b64url_encode(bytes(out))

    def decode(self, cursor: str) -> list[Any]:
        data = b64url_decode(cursor)
        if not data:
            raise InvalidPayloadError("Cursor payload is empty")
        if data[0] != self.VERSION:
            raise InvalidPayloadError("Unsupported cursor version")

        value, offset = self._read(data, 1, depth=0)
        if offset != len(data):
            raise InvalidPayloadError("Trailing bytes after cursor payload")
        if not isinstance(value, list):
            raise InvalidPayloadError("Cursor payload is not a list")
        return value

    def _write(self, out: bytearray, value: Any, depth: int) -> None:
        if depth > MAX_DEPTH:
            raise CursorEncodeError("Cursor values are nested too deeply")

        if value is None:
            out += b"N"
        elif value is True:
            out += b"T"
        elif value is False:
            out += b"F"
        elif isinstance(value, int):
            length = value.bit_length() // 8 + 1
            if length > MAX_INT_BYTES:
                raise CursorEncodeError("Integer too large for a cursor")
            out += b"I" + struct.pack(">H", length)
            out += value.to_bytes(length, "big", signed=True)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise CursorEncodeError("Non-finite floats cannot be encoded in a cursor")
            out += b"D" + struct.pack(">d", value)
        elif isinstance(value, str):
            raw = value.encode("utf-8")
            out += b"S" + struct.pack(">I", len(raw)) + raw
        elif isinstance(value, bytes | bytearray):
            out += b"B" + struct.pack(">I", len(value)) + bytes(value)
        elif isinstance(value, list | tuple):
            out += b"L" + struct.pack(">I", len(value))
            for item in value:
                self._write(out, item, depth + 1)
        elif isinstance(value, TaggedValue):
            tag = value.tag.encode("utf-8")
            out += b"X" + struct.pack(">H", len(tag)) + tag
            self._write(out, value.payload, depth + 1)
        else:
            raise CursorEncodeError(
                f"Cannot encode value of type {type(value).__name__} in a cursor; "
                "register a ValueConverter for it"
            )

    def _read(self, data: bytes, offset: int, depth: int) -> tuple[Any, int]:
        if depth > MAX_DEPTH:
            raise InvalidPayloadError("Cursor payload is nested too deeply")
        marker = data[offset : offset + 1]
        offset += 1

        match marker:
            case b"N":
                return None, offset
            case b"T":
                return True, offset
            case b"F":
                return False, offset
            case b"I":
                (length,), offset = self._unpack(">H", data, offset)
                if not 0 < length <= MAX_INT_BYTES:
                    raise InvalidPayloadError("Invalid integer length in cursor")
                raw, offset = self._take(data, offset, length)
                return int.from_bytes(raw, "big", signed=True), offset
            case b"D":
                (number,), offset = self._unpack(">d", data, offset)
                if not math.isfinite(number):
                    raise InvalidPayloadError("Non-finite float in cursor")
                return number, offset
            case b"S":
                (length,), offset = self._unpack(">I", data, offset)
                raw, offset = self._take(data, offset, length)
                try:
                    return raw.decode("utf-8"), offset
                except UnicodeDecodeError as e:
                    raise InvalidPayloadError("Invalid UTF-8 in cursor") from e
            case b"B":
                (length,), offset = self._unpack(">I", data, offset)
                return self._take(data, offset, length)
            case b"L":
                (count,), offset = self._unpack(">I", data, offset)
                # Every element needs at least one byte
                if count > len(data) - offset:
                    raise InvalidPayloadError("Truncated cursor payload")
                items = []
                for _ in range(count):
                    item, offset = self._read(data, offset, depth + 1)
                    items.append(item)
                return items, offset
            case b"X":
                (length,), offset = self._unpack(">H", data, offset)
                raw, offset = self._take(data, offset, length)
                try:
                    tag = raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise InvalidPayloadError("Invalid UTF-8 in cursor") from e
                payload, offset = self._read(data, offset, depth + 1)
                return TaggedValue(tag, payload), offset
        raise InvalidPayloadError("Unknown value marker in cursor")

    @staticmethod
    def _unpack(fmt: str, data: bytes, offset: int) -> tuple[tuple[Any, ...], int]:
        size = struct.calcsize(fmt)
        if offset + size > len(data):
            raise InvalidPayloadError("Truncated cursor payload")
        return struct.unpack_from(fmt, data, offset), offset + size

    @staticmethod
    def _take(data: bytes, offset: int, length: int) -> tuple[bytes, int]:
        end = offset + length
        if end > len(data):
            raise InvalidPayloadError("Truncated cursor payload")
        return data[offset:end], end


def _reject_constant(name: str) -> Any:
    raise InvalidPayloadError(f"{name} is not allowed in a cursor")


class JSONCursorCodec:
    """Cursor codec backed by compact JSON.

    Tagged values are written as ``{"$t": tag, "v": payload}``; no other JSON
    objects are accepted. Bytes and non-finite floats cannot be represented.
    """

    def encode(self, values: Sequence[Any]) -> str:
        try:
            text = json.dumps(
                [self._to_json(v, 0) for v in values],
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except ValueError as e:
            raise CursorEncodeError("Cursor values are not JSON compatible") from e
        return b64url_encode(text.encode("utf-8"))

    def decode(self, cursor: str) -> list[Any]:
        data = b64url_decode(cursor)
        try:
            payload = json.loads(data.decode("utf-8"), parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise InvalidPayloadError("Cursor payload is not valid JSON") from e
        if not isinstance(payload, list):
            raise InvalidPayloadError("Cursor payload is not a list")
        return [self._from_json(v, 0) for v in payload]

    def _to_json(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise CursorEncodeError("Cursor values are nested too deeply")
        if value is None or isinstance(value, bool | int | float | str):
            return value
        if isinstance(value, list | tuple):
            return [self._to_json(v, depth + 1) for v in value]
        if isinstance(value, TaggedValue):
            return {"$t": value.tag, "v": self._to_json(value.payload, depth + 1)}
        raise CursorEncodeError(
            f"Cannot encode value of type {type(value).__name__} in a JSON cursor"
        )

    def _from_json(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise InvalidPayloadError("Cursor payload is nested too deeply")
        if isinstance(value, list):
            return [self._from_json(v, depth + 1) for v in value]
        if isinstance(value, dict):
            if set(value) != {"$t", "v"} or not isinstance(value["$t"], str):
                raise InvalidPayloadError("Unexpected object in cursor payload")
            return TaggedValue(value["$t"], self._from_json(value["v"], depth + 1))
        return value


class SignedCursorCodec:
    """Appends an HMAC-SHA256 tag to another codec's cursors.

    Signed cursors stop clients from forging positions (for example to probe
    rows outside their filter). The format is ``<inner cursor>.<signature>``.
    """

    def __init__(self, inner: CursorCodec, key: str | bytes) -> None:
        if not key:
            raise ValueError("Signing key must not be empty")
        self.inner = inner
        self._key = key.encode("utf-8") if isinstance(key, str) else key

    def _sign(self, token: str) -> str:
        digest = hmac.new(self._key, token.encode("ascii"), hashlib.sha256).digest()
        return b64url_encode(digest)

    def encode(self, values: Sequence[Any]) -> str:
        token = self.inner.encode(values)
        return f"{token}.{self._sign(token)}"

    def decode(self, cursor: str) -> list[Any]:
        token, sep, signature = cursor.rpartition(".")
        if not sep or not _BASE64URL.fullmatch(token) or not _BASE64URL.fullmatch(signature):
            raise InvalidEncodingError("Cursor is not a signed token")
        if not hmac.compare_digest(signature, self._sign(token)):
            raise InvalidPayloadError("Cursor signature does not match")
        return self.inner.decode(token)


_CODECS: dict[str, type[BinaryCursorCodec] | type[JSONCursorCodec]] = {
    "binary": BinaryCursorCodec,
    "json": JSONCursorCodec,
}


def get_codec(name: str, *, signing_key: str | bytes | None = None) -> CursorCodec:
    """Build a codec by name, optionally signed.

    Args:
        name: ``"binary"`` or ``"json"``
        signing_key: When given, wrap the codec in ``SignedCursorCodec``

    Raises:
        ValueError: Unknown codec name
    """
    try:
        codec: CursorCodec = _CODECS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown cursor codec {name!r}; expected one of {', '.join(_CODECS)}"
        ) from None
    if signing_key:
        codec = SignedCursorCodec(codec, signing_key)
    return codec


def codec_from_settings(settings: PaginationSettings) -> CursorCodec:
    """Codec selected by ``PaginationSettings.default_codec`` and ``signing_key``."""
    key = settings.signing_key.get_secret_value() if settings.signing_key else None
    return get_codec(settings.default_codec, signing_key=key)


def encode_cursor(
    values: Sequence[Any],
    codec: CursorCodec,
    converters: ConverterRegistry = DEFAULT_CONVERTERS,
) -> str:
    """Convert ``values`` to portable form and encode them with ``codec``."""
    return codec.encode([converters.to_portable(v) for v in values])


def decode_cursor(
    cursor: Any,
    codec: CursorCodec,
    converters: ConverterRegistry = DEFAULT_CONVERTERS,
    *,
    max_length: int | None = None,
) -> list[Any]:
    """Decode ``cursor`` with ``codec`` and convert values back.

    Raises:
        InvalidEncodingError: Not a string, too long, or not base64url
        InvalidPayloadError: Malformed payload or unknown value tag
    """
    if not isinstance(cursor, str):
        raise InvalidEncodingError("Cursor must be a string")
    if max_length is not None and len(cursor) > max_length:
        raise InvalidEncodingError("Cursor exceeds maximum length")
    return [converters.from_portable(v) for v in codec.decode(cursor)]


__all__ = [
    "BinaryCursorCodec",
    "CursorCodec",
    "JSONCursorCodec",
    "SignedCursorCodec",
    "codec_from_settings",
    "decode_cursor",
    "encode_cursor",
    "get_codec",
]
