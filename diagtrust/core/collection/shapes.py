"""
Variant-Shape Normalization Tables

The legacy inventory script has emitted the same logical field as an array,
an object or a scalar depending on its version. Each field is decoded through
an explicit kind -> normalizer table; supporting a new shape means adding a
table row, not another branch.

A normalizer never raises. An unsupported kind maps to no normalizer and the
caller degrades to an empty list.
"""
import json
import math
import numbers
from typing import Any, Callable, Dict, List, Mapping, Optional

from .base import PenaltyEntry, ScanError

# ── JSON kinds ──────────────────────────────────────────────────────────────

OBJECT = "object"
ARRAY = "array"
STRING = "string"
NUMBER = "number"
TRUE = "true"
FALSE = "false"
NULL = "null"
OTHER = "other"


def json_kind(value: Any) -> str:
    """Classify a decoded JSON value (bool is checked before number)."""
    if isinstance(value, Mapping):
        return OBJECT
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, bool):
        return TRUE if value else FALSE
    if isinstance(value, str):
        return STRING
    if isinstance(value, numbers.Real):
        return NUMBER
    if value is None:
        return NULL
    return OTHER


def format_number(value: Any) -> str:
    number = float(value)
    if math.isfinite(number) and number.is_integer():
        return str(int(number))
    return str(number)


def raw_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


_SCALAR_TEXT: Dict[str, Callable[[Any], str]] = {
    STRING: lambda v: v,
    NUMBER: format_number,
    TRUE:   lambda v: "true",
    FALSE:  lambda v: "false",
    NULL:   lambda v: "null",
}


def value_text(value: Any) -> str:
    """Plain text rendering of any JSON value."""
    render = _SCALAR_TEXT.get(json_kind(value), raw_text)
    return render(value)


def field_text(value: Any) -> str:
    """Like value_text, but an absent/null field reads as empty."""
    return "" if value is None else value_text(value)


# ── errors[] ────────────────────────────────────────────────────────────────

# ScanError attribute -> document key
ERROR_FIELDS = {
    "code": "code",
    "message": "message",
    "section": "section",
    "exception_type": "exceptionType",
}


def scan_error_from_object(item: Mapping) -> ScanError:
    return ScanError(**{attr: field_text(item.get(key)) for attr, key in ERROR_FIELDS.items()})


def errors_from_array(items: List[Any]) -> List[ScanError]:
    return [scan_error_from_object(item) for item in items if json_kind(item) == OBJECT]


ERRORS_SHAPES: Dict[str, Callable[[Any], List[ScanError]]] = {
    ARRAY: errors_from_array,
}


# ── missingData ─────────────────────────────────────────────────────────────

# Object form: property value kind -> reason text
MISSING_REASON_BY_KIND: Dict[str, Callable[[Any], str]] = {
    STRING: lambda v: v,
    TRUE:   lambda v: "missing",
    FALSE:  lambda v: "disabled",
    NUMBER: format_number,
}


def missing_reason(value: Any) -> str:
    render = MISSING_REASON_BY_KIND.get(json_kind(value), raw_text)
    return render(value)


def missing_from_array(items: List[Any]) -> List[str]:
    entries: List[str] = []
    for item in items:
        kind = json_kind(item)
        if kind == STRING:
            if item.strip():
                entries.append(item)
        elif kind == OBJECT:
            entries.extend(f"{key}: {value_text(value)}" for key, value in item.items())
    return entries


def missing_from_object(obj: Mapping) -> List[str]:
    return [f"{key}: {missing_reason(value)}" for key, value in obj.items()]


MISSING_DATA_SHAPES: Dict[str, Callable[[Any], List[str]]] = {
    ARRAY: missing_from_array,
    OBJECT: missing_from_object,
}


# ── scoreV2.topPenalties ────────────────────────────────────────────────────

# PenaltyEntry attribute -> accepted keys, highest priority first
PENALTY_ALIASES = {
    "source": ("source",),
    "penalty": ("penalty",),
    "message": ("message", "msg"),
    "type": ("type",),
}


def _alias(obj: Mapping, attr: str) -> Any:
    for key in PENALTY_ALIASES[attr]:
        if key in obj:
            return obj[key]
    return None


def coerce_penalty(value: Any) -> int:
    """Integer penalty from a number or numeric string; anything else is 0."""
    kind = json_kind(value)
    if kind == STRING:
        try:
            value = float(value)
        except ValueError:
            return 0
    elif kind != NUMBER:
        return 0
    number = float(value)
    if not math.isfinite(number):
        return 0
    return int(number)


def penalty_from_object(item: Mapping) -> PenaltyEntry:
    return PenaltyEntry(
        source=field_text(_alias(item, "source")),
        penalty=coerce_penalty(_alias(item, "penalty")),
        message=field_text(_alias(item, "message")),
        type=field_text(_alias(item, "type")),
    )


# Object form: property value kind -> entry builder (source = property name)
PENALTY_PROPERTY_BY_KIND: Dict[str, Callable[[str, Any], PenaltyEntry]] = {
    NUMBER: lambda name, v: PenaltyEntry(source=name, penalty=coerce_penalty(v)),
    OBJECT: lambda name, v: PenaltyEntry(
        source=name,
        penalty=coerce_penalty(_alias(v, "penalty")),
        message=field_text(_alias(v, "message")),
        type=field_text(_alias(v, "type")),
    ),
    STRING: lambda name, v: PenaltyEntry(source=name, message=v),
}


def penalties_from_array(items: List[Any]) -> List[PenaltyEntry]:
    return [penalty_from_object(item) for item in items if json_kind(item) == OBJECT]


def penalties_from_object(obj: Mapping) -> List[PenaltyEntry]:
    entries = []
    for name, value in obj.items():
        build = PENALTY_PROPERTY_BY_KIND.get(json_kind(value))
        entries.append(build(name, value) if build else PenaltyEntry(source=name))
    return entries


TOP_PENALTIES_SHAPES: Dict[str, Callable[[Any], List[PenaltyEntry]]] = {
    ARRAY: penalties_from_array,
    OBJECT: penalties_from_object,
}


def normalize(raw: Any, table: Dict[str, Callable[[Any], list]]) -> Optional[list]:
    """Run the table's normalizer for raw's kind; None when the kind is unsupported."""
    normalizer = table.get(json_kind(raw))
    if normalizer is None:
        return None
    return normalizer(raw)
