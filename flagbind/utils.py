"""
Flagbind utilities (small helpers shared by the binder layers)

Scope
- UnsetType / Unset
  • Sentinel for “no raw value was supplied”, kept apart from None and "".
  • Falsey, printable as "Unset", single instance, non-subclassable.

- coalesce(value, default=None)
  • Materialize Unset into a concrete default; every other value (None, 0, "")
    passes through untouched.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
"""
import functools
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was never provided.

    The scanner uses it for a flag whose value is absent (``--name`` as the
    last token), so that an empty inline value (``--name=``) stays a real,
    empty string.

    Characteristics
    - bool(Unset) is False.
    - repr(Unset) -> "Unset".
    - UnsetType() always returns the same instance.
    - Subclassing is rejected.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return ``default`` when ``object`` is Unset, otherwise ``object`` unchanged.

    Falsey values like None, 0 and "" are preserved; only the sentinel is
    replaced.
    """
    return object if object is not Unset else default


Unset = UnsetType()


__all__ = (
    "coalesce",
    "UnsetType",
    "Unset",
)
