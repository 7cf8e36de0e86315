"""String-to-type converters used by attribute and value injection.

Every converter is a plain ``str -> value`` callable that raises on bad
input. :class:`TypeConverterRegistry` wraps the call so callers receive a
:class:`ConversionResult` and can tell an absent value (apply a default)
from a present but invalid one (record a conversion failure).
"""

from __future__ import annotations

import base64
import binascii
import codecs
import builtins
import importlib
import logging
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Any, get_origin

from pydantic import TypeAdapter, ValidationError

_LOGGER = logging.getLogger(__name__)

TypeConverter = Callable[[str], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_DURATION_RE = re.compile(
    r"(?P<sign>[+-])?P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?",
    re.IGNORECASE,
)
_BASE64_PREFIX = "Base64:"
_HEX_PREFIX = "0x"


class Charset(str):
    """Normalised codec name; construction fails for unknown encodings."""

    def __new__(cls, name: str) -> "Charset":
        return super().__new__(cls, codecs.lookup(name).name)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    value: Any = None
    ok: bool = False
    error: str | None = None

    @classmethod
    def success(cls, value: Any) -> "ConversionResult":
        return cls(value=value, ok=True)

    @classmethod
    def failure(cls, error: str) -> "ConversionResult":
        return cls(value=None, ok=False, error=error)


def convert_bool(raw: str | None) -> bool:
    """Only a case-insensitive ``"true"`` is true; surrounding whitespace is
    not trimmed."""
    return raw is not None and raw.lower() == "true"


def convert_int(raw: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"not a decimal integer: {raw!r}")
    return int(raw)


def convert_float(raw: str) -> float:
    text = raw.strip()
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError(f"not a decimal number: {raw!r}")
    return float(text)


def convert_decimal(raw: str) -> Decimal:
    try:
        return Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ValueError(f"not a decimal: {raw!r}") from exc


def convert_bytes(raw: str) -> bytes:
    if not raw:
        return b""
    if raw.startswith(_BASE64_PREFIX):
        try:
            return base64.b64decode(raw[len(_BASE64_PREFIX):], validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64 payload: {raw!r}") from exc
    if raw.startswith(_HEX_PREFIX):
        return bytes.fromhex(raw[len(_HEX_PREFIX):])
    return raw.encode("utf-8")


def convert_duration(raw: str) -> timedelta:
    """Parse an ISO-8601 duration limited to days and time fields."""
    text = raw.strip()
    match = _DURATION_RE.fullmatch(text)
    if match is None or text.upper().rstrip("T") in {"P", "+P", "-P"}:
        raise ValueError(f"not an ISO-8601 duration: {raw!r}")
    parts = match.groupdict()
    duration = timedelta(
        days=int(parts["days"] or 0),
        hours=int(parts["hours"] or 0),
        minutes=int(parts["minutes"] or 0),
        seconds=float(parts["seconds"] or 0),
    )
    return -duration if parts["sign"] == "-" else duration


def convert_class(raw: str) -> type:
    text = raw.strip()
    builtin = getattr(builtins, text, None)
    if isinstance(builtin, type):
        return builtin
    module_name, sep, qualname = text.replace(":", ".").rpartition(".")
    if not sep:
        raise ValueError(f"not a class reference: {raw!r}")
    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise ValueError(f"{raw!r} does not name a class")
    return obj


def convert_pattern(raw: str) -> re.Pattern[str]:
    try:
        return re.compile(raw)
    except re.error as exc:
        raise ValueError(f"invalid regular expression {raw!r}: {exc}") from exc


def convert_enum(enum_type: type[Enum], raw: str | None) -> Enum:
    if raw is None:
        raise ValueError("no value")
    try:
        return enum_type[raw]
    except KeyError:
        raise ValueError(
            f"{raw!r} is not a member of {enum_type.__name__}"
        ) from None


_DEFAULTS: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
}


class TypeConverterRegistry:
    """Maps target types to converters.

    Lookup walks the target's MRO, so a converter registered for a base class
    serves its subclasses; ``Enum`` subclasses resolve by exact member name.
    Types without a registered converter fall back to pydantic validation.
    """

    def __init__(self, *, builtin: bool = True) -> None:
        self._converters: dict[type, TypeConverter] = {}
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self._lock = RLock()
        if builtin:
            self._register_builtins()

    def _register_builtins(self) -> None:
        self.register(str, str)
        self.register(bool, convert_bool)
        self.register(int, convert_int)
        self.register(float, convert_float)
        self.register(Decimal, convert_decimal)
        self.register(bytes, convert_bytes)
        self.register(Path, Path)
        self.register(re.Pattern, convert_pattern)
        self.register(uuid.UUID, uuid.UUID)
        self.register(timedelta, convert_duration)
        self.register(type, convert_class)
        self.register(Charset, Charset)

    def register(self, target: type, converter: TypeConverter) -> None:
        with self._lock:
            self._converters[target] = converter

    def find(self, target: Any) -> TypeConverter | None:
        if target is Any or target is object:
            return str
        origin = get_origin(target)
        if isinstance(origin, type):
            target = origin
        if isinstance(target, type):
            if issubclass(target, bool):
                return convert_bool
            if issubclass(target, Enum):
                return lambda raw: convert_enum(target, raw)
            for base in target.__mro__:
                converter = self._converters.get(base)
                if converter is not None:
                    return converter
        else:
            converter = self._converters.get(target)
            if converter is not None:
                return converter
        return None

    def convert(self, raw: str | None, target: Any) -> ConversionResult:
        """Convert ``raw`` to ``target``.

        Booleans never fail: anything but a case-insensitive ``"true"``,
        including ``None``, is ``False``. For every other type ``None`` is
        reported as a failure with no value.
        """
        if target is bool:
            return ConversionResult.success(convert_bool(raw))
        if raw is None:
            return ConversionResult.failure("no value")
        converter = self.find(target)
        if converter is not None:
            try:
                return ConversionResult.success(converter(raw))
            except (ValueError, TypeError, LookupError, ImportError,
                    AttributeError) as exc:
                return ConversionResult.failure(str(exc))
        return self._convert_with_adapter(raw, target)

    def default_for(self, target: Any) -> Any:
        return _DEFAULTS.get(target) if isinstance(target, type) else None

    def _convert_with_adapter(self, raw: str, target: Any) -> ConversionResult:
        try:
            adapter = self._adapter_for(target)
        except Exception as exc:
            _LOGGER.debug("No converter for %r: %s", target, exc)
            return ConversionResult.failure(f"no converter for {target!r}")
        try:
            return ConversionResult.success(adapter.validate_python(raw))
        except ValidationError as exc:
            return ConversionResult.failure(
                f"{raw!r} is not a valid {getattr(target, '__name__', target)}: "
                f"{exc.errors()[0]['msg']}"
            )

    def _adapter_for(self, target: Any) -> TypeAdapter[Any]:
        with self._lock:
            adapter = self._adapters.get(target)
            if adapter is None:
                adapter = TypeAdapter(target)
                self._adapters[target] = adapter
            return adapter


_default_converters = TypeConverterRegistry()


def get_converters() -> TypeConverterRegistry:
    return _default_converters
