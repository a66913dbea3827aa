"""
Binder: drive the scanner over argv and fill a configuration instance.

Overview
- Binder(cls, **options)
  • Describes cls once (factory contract + field table); a broken type fails
    here, before any argument is read.
  • parse(argv) creates a fresh instance through the factory, binds every
    matching flag, and returns it. Nothing is shared between calls.

- parse(cls, argv, **options): one-shot Binder(cls, **options).parse(argv).
- run(cls, argv, **options): same, in shell mode by default, so faults are
  rendered on stderr and the process exits with status 1.

Phases
    START -> SCANNING -> MATCHING -> SCANNING ... -> EXHAUSTED -> DONE
                              \\-> FAILED (first error, nothing returned)

Binding rules (per matched token)
- bool field (optional or not): set True; a value read from the next token
  is handed back to the scanner, an inline value is ignored.
- optional field, no value: keep the default.
- required field, no value: RequiredValueMissing.
- otherwise: coerce() the value and setattr() it; a type that refuses the
  assignment (frozen dataclass, read-only property) is FieldNotAssignable.

Unknown flags and the token that stops the scan are dropped silently; with
verbose=True they are reported as IgnoredFlagWarning / StoppedScanWarning.

Options
- factory: name of the zero-argument factory (default "init").
- verbose: report ignored tokens (default False).
- shell: render faults instead of raising them (default False).
- fancy: render faults inside a panel (default False).
- colorful: styled output (default True).
- deferred: in shell mode, print errors without exiting; parse() and run()
  then return None, also when the type itself is broken (default False).
"""
import os
import sys
from enum import Enum

from .coercion import coerce
from .faults import BindException, FieldNotAssignable, IgnoredFlagWarning, RequiredValueMissing, StoppedScanWarning, trigger
from .scanner import PREFIX, Scanner
from .schema import Boolean, describe
from .utils import Unset, coalesce


class Phase(Enum):
    START = "start"
    SCANNING = "scanning"
    MATCHING = "matching"
    EXHAUSTED = "exhausted"
    DONE = "done"
    FAILED = "failed"


def _flag(name, /):
    return PREFIX + name


def _prog(argv, /):
    try:
        return os.path.basename(argv[0]) or "flagbind"
    except (IndexError, KeyError, TypeError):
        return "flagbind"


class Binder:
    """
    Type-directed flag binder for one configuration type.

    Attributes
    - schema: the validated Schema of the configuration type.
    - phase: Phase reached by the last parse() call.
    """

    def __init__(
            self,
            type,
            /,
            *,
            factory="init",
            verbose=False,
            shell=False,
            fancy=False,
            colorful=True,
            deferred=False
    ):
        for name, value in (
                ("verbose", verbose),
                ("shell", shell),
                ("fancy", fancy),
                ("colorful", colorful),
                ("deferred", deferred),
        ):
            if not isinstance(value, bool):
                raise TypeError(f"Binder() {name!r} must be a boolean")
        if not isinstance(factory, str):
            raise TypeError("Binder() 'factory' must be a string")
        elif not (factory := factory.strip()):
            raise ValueError("Binder() 'factory' cannot be empty")

        self.verbose = verbose
        self.shell = shell
        self.fancy = fancy
        self.colorful = colorful
        self.deferred = deferred
        self.phase = Phase.START
        self._prog = _prog(sys.argv)

        try:
            self.schema = describe(type, factory)
        except BindException as error:
            self.phase = Phase.FAILED
            self._surface(error)
            raise

    def _surface(self, fault, /):
        """
        render a fault in shell mode; emit warnings; leave errors to the caller otherwise.
        """
        options = {
            "shell": self.shell,
            "fancy": self.fancy,
            "colorful": self.colorful,
            "deferred": self.deferred,
            "prog": self._prog,
        }
        if isinstance(fault, BindException) and not self.shell:
            return
        trigger(fault, **options)

    def _bind(self, config, token, scanner, /):
        field = self.schema.find(token.name)
        if field is None:
            if self.verbose:
                self._surface(IgnoredFlagWarning(
                    "ignored unknown flag %r" % _flag(token.name),
                    hint="%s has no field named %r" % (self.schema.type.__qualname__, token.name),
                    field=token.name,
                    value=token.value,
                ))
            return

        if isinstance(field.kind, Boolean):
            if not token.inline and token.value is not Unset:
                scanner.unread(token.value)
            self._assign(config, field, True)
            return

        if field.optional and token.value is Unset:
            return

        if token.value is Unset:
            raise RequiredValueMissing(
                "flag %r needs a value" % _flag(field.name),
                hint="pass it as %s=<value> or %s <value>" % (_flag(field.name), _flag(field.name)),
                field=field.name,
            )

        self._assign(config, field, coerce(field, token.value))

    def _assign(self, config, field, value, /):
        try:
            setattr(config, field.name, value)
        except (AttributeError, TypeError) as error:
            raise FieldNotAssignable(
                "field %r of %s cannot be assigned: %s" % (field.name, self.schema.type.__qualname__, error),
                hint="make %s mutable (drop frozen=True or the read-only property)" % self.schema.type.__qualname__,
                field=field.name,
                value=value,
            ) from None

    def parse(self, argv=Unset, /):
        """
        Bind ``argv`` (default: sys.argv) and return a new configuration instance.

        Raises
        - RequiredValueMissing, NumericConversionFailed, UnsupportedFieldType,
          FieldNotAssignable, SchemaFactoryWrongReturnType: the first fault
          aborts the parse.
        """
        argv = coalesce(argv, sys.argv)
        self._prog = _prog(argv)
        self.phase = Phase.START
        try:
            config = self.schema.create()
            with Scanner(argv) as scanner:
                while True:
                    self.phase = Phase.SCANNING
                    if (token := scanner.next()) is None:
                        break
                    self.phase = Phase.MATCHING
                    self._bind(config, token, scanner)
                self.phase = Phase.EXHAUSTED
                if self.verbose and scanner.stopped_at is not Unset:
                    self._surface(StoppedScanWarning(
                        "stopped at %r; %d token(s) left unread" % (scanner.stopped_at, len(scanner.remaining)),
                        hint="every argument must be a flag (--name=value or --name value)",
                        value=scanner.stopped_at,
                    ))
        except BindException as error:
            self.phase = Phase.FAILED
            self._surface(error)
            if self.shell:
                return None
            raise

        self.phase = Phase.DONE
        return config

    def __repr__(self):
        return "binder(type=%s, phase=%s)" % (self.schema.type.__qualname__, self.phase.value)


def parse(type, argv=Unset, /, **options):
    """
    Bind ``argv`` onto a new instance of ``type`` and return it.

    In deferred shell mode a broken ``type`` is reported and None returned.
    """
    try:
        binder = Binder(type, **options)
    except BindException:
        if options.get("shell", False) and options.get("deferred", False):
            return None
        raise
    return binder.parse(argv)


def run(type, argv=Unset, /, **options):
    """
    Program entry point: like parse(), but faults are rendered and exit(1).
    """
    options.setdefault("shell", True)
    return parse(type, argv, **options)


__all__ = (
    "Phase",
    "Binder",
    "parse",
    "run",
)
