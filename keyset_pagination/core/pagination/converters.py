"""Per-type conversion of cursor values.

Sort-key values are converted to a *portable* form before they reach a
cursor codec and converted back after decoding. Most values (str, int,
float, bool, None) pass through unchanged. Types with a registered
converter are wrapped in a ``TaggedValue`` whose tag names the converter,
so decoding can find the exact inverse.

Registered by default:

========== ======= ==========================================
type       tag     portable payload
========== ======= ==========================================
datetime   ``dt``  ``[epoch_microseconds, utc_offset_us|None]``
date       ``date``  proleptic Gregorian ordinal
UUID       ``uuid``  32 character hex string
Decimal    ``dec``   canonical string
========== ======= ==========================================

Extending:
    registry = DEFAULT_CONVERTERS.with_converter(
        ValueConverter(
            tag="money",
            type_=Money,
            to_portable=lambda m: [m.amount_minor, m.currency],
            from_portable=lambda p: Money(p[0], p[1]),
        )
    )
    paginator = Paginator(planner, converters=registry)

Decoding only ever *looks up* tags in the registry; a tag that is not
registered is rejected with ``InvalidPayloadError``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from keyset_pagination.core.exceptions import InvalidPayloadError

_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=UTC)
_EPOCH_NAIVE = datetime(1970, 1, 1)
_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """A converted value together with the tag of its converter."""

    tag: str
    payload: Any


@dataclass(frozen=True, slots=True)
class ValueConverter:
    """Conversion pair for one runtime type.

    ``from_portable(to_portable(v)) == v`` must hold for every value of
    ``type_``.
    """

    tag: str
    type_: type
    to_portable: Callable[[Any], Any]
    from_portable: Callable[[Any], Any]


class ConverterRegistry:
    """Immutable mapping from runtime type to ``ValueConverter``.

    Lookup walks the value's MRO, so a converter registered for a base class
    applies to subclasses unless a more specific one exists. Types without a
    converter fall back to identity.
    """

    __slots__ = ("_by_type", "_by_tag")

    def __init__(self, converters: Iterable[ValueConverter] = ()) -> None:
        self._by_type: dict[type, ValueConverter] = {}
        self._by_tag: dict[str, ValueConverter] = {}
        for converter in converters:
            if converter.tag in self._by_tag:
                raise ValueError(f"Duplicate cursor value tag {converter.tag!r}")
            self._by_type[converter.type_] = converter
            self._by_tag[converter.tag] = converter

    def with_converter(self, converter: ValueConverter) -> ConverterRegistry:
        """Return a new registry that also contains ``converter``.

        A converter for an already-registered type replaces the old one.
        """
        kept = [c for c in self._by_type.values() if c.type_ is not converter.type_]
        return ConverterRegistry([*kept, converter])

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._by_tag)

    def lookup(self, value_type: type) -> ValueConverter | None:
        for cls in value_type.__mro__:
            converter = self._by_type.get(cls)
            if converter is not None:
                return converter
        return None

    def to_portable(self, value: Any) -> Any:
        converter = self.lookup(type(value))
        if converter is None:
            return value
        return TaggedValue(converter.tag, converter.to_portable(value))

    def from_portable(self, value: Any) -> Any:
        if not isinstance(value, TaggedValue):
            return value
        converter = self._by_tag.get(value.tag)
        if converter is None:
            raise InvalidPayloadError("Cursor contains an unknown value tag")
        try:
            return converter.from_portable(value.payload)
        except (TypeError, ValueError, OverflowError, IndexError, InvalidOperation) as e:
            raise InvalidPayloadError("Cursor value could not be converted") from e


def _datetime_to_portable(value: datetime) -> list[int | None]:
    offset = value.utcoffset()
    if offset is None:
        return [(value - _EPOCH_NAIVE) // _MICROSECOND, None]
    return [(value - _EPOCH_UTC) // _MICROSECOND, offset // _MICROSECOND]


def _datetime_from_portable(payload: Any) -> datetime:
    micros, offset = payload
    if not isinstance(micros, int) or isinstance(micros, bool):
        raise TypeError("datetime payload must be an integer")
    if offset is None:
        return _EPOCH_NAIVE + timedelta(microseconds=micros)
    if not isinstance(offset, int) or isinstance(offset, bool):
        raise TypeError("datetime offset must be an integer")
    tz = timezone(timedelta(microseconds=offset))
    return (_EPOCH_UTC + timedelta(microseconds=micros)).astimezone(tz)


def _date_from_portable(payload: Any) -> date:
    if not isinstance(payload, int) or isinstance(payload, bool):
        raise TypeError("date payload must be an integer")
    return date.fromordinal(payload)


def _uuid_from_portable(payload: Any) -> UUID:
    if not isinstance(payload, str):
        raise TypeError("uuid payload must be a string")
    return UUID(hex=payload)


def _decimal_from_portable(payload: Any) -> Decimal:
    if not isinstance(payload, str):
        raise TypeError("decimal payload must be a string")
    return Decimal(payload)


DATETIME_CONVERTER = ValueConverter(
    tag="dt",
    type_=datetime,
    to_portable=_datetime_to_portable,
    from_portable=_datetime_from_portable,
)
DATE_CONVERTER = ValueConverter(
    tag="date",
    type_=date,
    to_portable=date.toordinal,
    from_portable=_date_from_portable,
)
UUID_CONVERTER = ValueConverter(
    tag="uuid",
    type_=UUID,
    to_portable=lambda value: value.hex,
    from_portable=_uuid_from_portable,
)
DECIMAL_CONVERTER = ValueConverter(
    tag="dec",
    type_=Decimal,
    to_portable=str,
    from_portable=_decimal_from_portable,
)

DEFAULT_CONVERTERS = ConverterRegistry(
    [DATETIME_CONVERTER, DATE_CONVERTER, UUID_CONVERTER, DECIMAL_CONVERTER]
)
IDENTITY_CONVERTERS = ConverterRegistry()


__all__ = [
    "DATETIME_CONVERTER",
    "DATE_CONVERTER",
    "DECIMAL_CONVERTER",
    "DEFAULT_CONVERTERS",
    "IDENTITY_CONVERTERS",
    "UUID_CONVERTER",
    "ConverterRegistry",
    "TaggedValue",
    "ValueConverter",
]
