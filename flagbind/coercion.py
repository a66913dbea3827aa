"""
Value coercion: raw flag text -> typed field value.

Rules per kind
- Integer: base-10 ASCII digits, single '_' separators allowed between
  digits. Signed kinds accept one leading '+' or '-', unsigned kinds accept
  no sign at all. Bit-width bounds are enforced.
- Float: decimal or exponential notation (and the inf/nan spellings float()
  understands); leading or trailing whitespace is rejected.
- Boolean: always True; the flag being present is the value.
- Text: the raw value, untouched.
- Unsupported: UnsupportedFieldType.

The caller decides whether a value is present at all; coerce() only sees
real strings.
"""
import re

from .faults import NumericConversionFailed, UnsupportedFieldType
from .schema import Boolean, Float, Integer, Text, Unsupported

_DIGITS = re.compile(r"[0-9]+(?:_[0-9]+)*")


def _integer(field, value, kind, /):
    digits = value[1:] if kind.signed and value.startswith(("+", "-")) else value
    if not _DIGITS.fullmatch(digits):
        raise NumericConversionFailed(
            "invalid %s value %r for field %r" % (kind, value, field.name),
            hint="pass base-10 digits%s (for example: --%s=42)" % (
                " with an optional sign" if kind.signed else " without a sign", field.name
            ),
            field=field.name,
            value=value,
        )

    number = int(value)
    lower, upper = kind.bounds
    if (lower is not None and number < lower) or (upper is not None and number > upper):
        raise NumericConversionFailed(
            "value %r for field %r does not fit in %s" % (value, field.name, kind),
            hint="pass a number between %s and %s" % (lower, upper),
            field=field.name,
            value=value,
        )
    return number


def _float(field, value, /):
    try:
        if value != value.strip():
            raise ValueError(value)
        return float(value)
    except ValueError:
        raise NumericConversionFailed(
            "invalid float value %r for field %r" % (value, field.name),
            hint="pass a decimal or exponential number (for example: --%s=1.5e3)" % field.name,
            field=field.name,
            value=value,
        ) from None


def coerce(field, value, /):
    """
    Convert ``value`` for ``field``.

    Parameters
    - field: FieldDescriptor (its kind is already unwrapped from Optional).
    - value: str, the raw text after '=' or the following token.

    Raises
    - NumericConversionFailed: integer/float text does not parse or overflows.
    - UnsupportedFieldType: the field's kind is not one the binder can fill.
    """
    match field.kind:
        case Integer() as kind:
            return _integer(field, value, kind)
        case Float():
            return _float(field, value)
        case Boolean():
            return True
        case Text():
            return value
        case Unsupported(reason=reason):
            raise UnsupportedFieldType(
                "field %r cannot be set from the command line: %s" % (field.name, reason),
                hint="declare it as int, float, bool or str (optionally wrapped in Optional)",
                field=field.name,
                value=value,
            )
        case kind:
            raise UnsupportedFieldType(
                "field %r has an unknown kind %r" % (field.name, kind),
                field=field.name,
                value=value,
            )


__all__ = (
    "coerce",
)
