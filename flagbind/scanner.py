"""
Token scanner: raw argv -> Token(name, value, inline).

Grammar
- the first element (the invocation name) is always skipped.
- '--name=value' -> Token('name', 'value', inline=True); the value is all text
  after the first '=', so it may contain '=' or be empty.
- '--name'       -> Token('name', <next raw token>, inline=False); the next
  token is taken unconditionally, even when it looks like a flag. With no
  token left the value is Unset.
- anything not starting with '--' ends the scan; it and every later token
  stay unread.

The scanner is a context manager: the argument snapshot only lives inside
the ``with`` block.

    >>> with Scanner(["prog", "--port=80", "--host", "localhost"]) as scanner:
    ...     list(scanner)
    [Token(name='port', value='80', inline=True), Token(name='host', value='localhost', inline=False)]
"""
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple

from .utils import Unset, UnsetType

PREFIX = "--"


class Token(NamedTuple):
    name: str
    value: str | UnsetType
    inline: bool


class Scanner:
    """
    one-pass reader over an argument sequence.

    attributes
    - stopped_at: the non-flag token that ended the scan, or Unset.
    - remaining: tokens not yet read (empty outside the ``with`` block).
    """

    def __init__(self, argv, /):
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("Scanner() argument must be an iterable of strings")
        self._argv = argv
        self._tokens = None
        self.stopped_at = Unset

    def __enter__(self):
        tokens = deque()
        for item in self._argv:
            if not isinstance(item, str):
                raise TypeError("Scanner() argument must be an iterable of strings")
            tokens.append(item)
        if tokens:
            tokens.popleft()
        self._tokens = tokens
        self.stopped_at = Unset
        return self

    def __exit__(self, *exception):
        self._tokens = None
        return False

    def __iter__(self):
        while (token := self.next()) is not None:
            yield token

    @property
    def remaining(self):
        return tuple(self._tokens or ())

    def next(self):
        """
        read one Token, or None at end of input (or once the scan stopped).
        """
        if self._tokens is None:
            raise RuntimeError("scanner is not open; use it inside a 'with' block")
        if self.stopped_at is not Unset or not self._tokens:
            return None

        raw = self._tokens.popleft()
        if not raw.startswith(PREFIX):
            # not a flag: give the token back so it shows up in `remaining`
            self._tokens.appendleft(raw)
            self.stopped_at = raw
            return None

        name, separator, value = raw[len(PREFIX):].partition("=")
        if separator:
            return Token(name, value, True)
        return Token(name, self._tokens.popleft() if self._tokens else Unset, False)

    def unread(self, raw, /):
        """
        push a raw token back to the front of the stream.
        """
        if self._tokens is None:
            raise RuntimeError("scanner is not open; use it inside a 'with' block")
        if not isinstance(raw, str):
            raise TypeError("unread() argument must be a string")
        self._tokens.appendleft(raw)


__all__ = (
    "Token",
    "Scanner",
)
