"""
Flagbind faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every issue the binder can report.
  Schema problems, value problems and ignored-token notices live in separate
  ranges so codes stay searchable.
- BindException / BindWarning: base types carrying a message plus options
  (hint, field, value, rendering switches). They render themselves with rich
  and know whether to raise, warn, or print.
- trigger(): single entry point to surface any fault with runtime options.
- getdoc(): optional description lookup for a code from the host application.

Behavior
- Outside shell mode exceptions are raised and warnings go through
  warnings.warn, so library callers handle them like any other Python error.
- In shell mode faults are printed to stderr; exceptions then exit with
  status 1 unless the fault is deferred.

Host customization (read from __main__)
- __prog__: program name shown in fault headers.
- __styles__: style overrides merged over the defaults below.
- __codes__: mapping FaultCode -> label used instead of the numeric id.
- __docs__: mapping FaultCode -> short documentation string.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the binder (stable identifiers).

    grouping
    - schema errors (2110x): the configuration type breaks the factory contract.
    - value errors (2111x): a flag named a field but its value is unusable.
    - notices (2211x): tokens that were skipped, only reported on request.
    """
    # --- schema errors (2110x) ---
    SCHEMA_MISSING_FACTORY            = 21101
    SCHEMA_FACTORY_HAS_ARGUMENTS      = 21102
    SCHEMA_FACTORY_WRONG_RETURN_TYPE  = 21103

    # --- value errors (2111x) ---
    REQUIRED_VALUE_MISSING            = 21111
    UNSUPPORTED_FIELD_TYPE            = 21112
    NUMERIC_CONVERSION_FAILED         = 21113
    FIELD_NOT_ASSIGNABLE              = 21114

    # --- notices (2211x) ---
    IGNORED_FLAG                      = 22111
    STOPPED_SCAN                      = 22112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_ERROR_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "title": "bold #FF4DA6",
    "message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}

_WARNING_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #FFB400",
    "title": "bold #FFC2E0",
    "message": "#D6D6DE",
    "hint-arrow": "#B8EFAF dim",
    "hint": "italic #B8EFAF",
}


def _render(fault, defaults, /):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ prog — code | Title ]"
    - body: the message, then "→ hint" when a hint is present.
    - fancy: header becomes a panel title around the body.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", options.get("prog", "flagbind"))
    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(fault.code.normalize() if fault.code is not None else "-----", "code"),
        " | ",
        text(fault.title.title(), "title"),
        " ]"
    )
    body = [text(fault.message, "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class _Fault:
    """
    shared plumbing for exceptions and warnings.

    options are stored read-only; any option can be read back as an attribute
    (for example ``error.field`` or ``error.value``).
    """
    code = None
    title = "fault"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | UnsetType):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(coalesce(message, self.title))
        self.message = coalesce(message, self.title)
        self.options = MappingProxyType(options)

    def __getattr__(self, name, /):
        if name.startswith("__") or name == "options":
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} fault has no {name!r} option") from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class BindException(_Fault, Exception):
    """
    base class of every error raised while describing a type or binding flags.

    every subclass is terminal: the parse that raised it produces no result.
    """
    title = "bind error"

    def __rich__(self):
        return _render(self, _ERROR_STYLES)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)


class SchemaMissingFactory(BindException):
    code = FaultCode.SCHEMA_MISSING_FACTORY
    title = "missing factory"


class SchemaFactoryHasArguments(BindException):
    code = FaultCode.SCHEMA_FACTORY_HAS_ARGUMENTS
    title = "factory takes arguments"


class SchemaFactoryWrongReturnType(BindException):
    code = FaultCode.SCHEMA_FACTORY_WRONG_RETURN_TYPE
    title = "factory returns another type"


class RequiredValueMissing(BindException):
    code = FaultCode.REQUIRED_VALUE_MISSING
    title = "missing value"


class UnsupportedFieldType(BindException):
    code = FaultCode.UNSUPPORTED_FIELD_TYPE
    title = "unsupported field type"


class NumericConversionFailed(BindException):
    code = FaultCode.NUMERIC_CONVERSION_FAILED
    title = "not a number"


class FieldNotAssignable(BindException):
    code = FaultCode.FIELD_NOT_ASSIGNABLE
    title = "read-only field"


class BindWarning(_Fault, Warning):
    """
    base class of the notices the binder emits when asked to be verbose.
    """
    title = "bind notice"

    def __rich__(self):
        return _render(self, _WARNING_STYLES)

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)


class IgnoredFlagWarning(BindWarning):
    code = FaultCode.IGNORED_FLAG
    title = "ignored flag"


class StoppedScanWarning(BindWarning):
    code = FaultCode.STOPPED_SCAN
    title = "scan stopped"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens on the rich console; otherwise
      exceptions are raised and warnings are emitted.

    typical options
    - shell, fancy, colorful, deferred, prog, hint, and context such as
      type/field/value.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances; returns None when nothing is registered.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "BindException",
    "SchemaMissingFactory",
    "SchemaFactoryHasArguments",
    "SchemaFactoryWrongReturnType",
    "RequiredValueMissing",
    "UnsupportedFieldType",
    "NumericConversionFailed",
    "FieldNotAssignable",
    "BindWarning",
    "IgnoredFlagWarning",
    "StoppedScanWarning",
    "trigger",
    "getdoc",
)
