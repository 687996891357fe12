"""The options mini-language used in annotation attribute values.

An annotation value that is neither empty, ``yes`` nor ``no`` is a list of
``name: value`` pairs separated by ``;``, for example::

    <p translate="hint: greeting; context: Shown on the start page">Hello</p>

Values may be quoted with ``"``, ``'`` or a backtick, and a backslash escapes
the following character, so ``;`` can appear in both quoted and unquoted
values.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional

from .errors import OptionsSyntaxError, OptionValueError
from .whitespace import WHITESPACE_OPTIONS

QUOTE_CHARS = "\"'`"


class _OptionsReader:
    """Recursive-descent reader over one attribute value."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, expected: str, pos: Optional[int] = None) -> OptionsSyntaxError:
        at = self.pos if pos is None else pos
        return OptionsSyntaxError(
            f"Expected {expected} at position {at} in attribute value '{self.text}'."
        )

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def read(self) -> Dict[str, str]:
        options: Dict[str, str] = {}
        while True:
            self.skip_whitespace()
            if self.pos == len(self.text):
                return options
            name = self.read_name()
            self.skip_whitespace()
            options[name] = self.read_value()

    def read_name(self) -> str:
        start = self.pos
        while self.peek() and self.peek() in "abcdefghijklmnopqrstuvwxyz-":
            self.pos += 1
        name = self.text[start:self.pos]
        if not name or name.startswith("-") or name.endswith("-"):
            raise self.error("property name", start)
        self.skip_whitespace()
        if self.peek() != ":":
            raise self.error("':'")
        self.pos += 1
        return name

    def read_value(self) -> str:
        start = self.pos
        quote = self.peek() if self.peek() and self.peek() in QUOTE_CHARS else None
        if quote:
            self.pos += 1

        chars = []
        # Length of ``chars`` that trailing whitespace trimming must not cut into.
        keep = 0
        closed = False
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                if closed:
                    raise self.error("';'")
                self.pos += 1
                if self.pos == len(self.text):
                    raise self.error("character")
                chars.append(self.text[self.pos])
                keep = len(chars)
            elif char == ";" and (closed or not quote):
                break
            elif closed:
                if not char.isspace():
                    raise self.error("';'")
            elif char == quote:
                closed = True
            else:
                chars.append(char)
                if quote or not char.isspace():
                    keep = len(chars)
            self.pos += 1

        if quote and not closed:
            raise self.error(f"'{quote}'")
        if self.pos == start:
            raise self.error("property value", start)
        if self.peek() == ";":
            self.pos += 1
        return "".join(chars[:keep])


def parse_options(text: str) -> Dict[str, str]:
    """Parse an options string into a name to value mapping.

    :param text: The attribute value to parse.
    :returns: Mapping of option names to their unescaped values.
    :raises OptionsSyntaxError: If ``text`` violates the options grammar.
    """
    return _OptionsReader(text).read()


def _escape_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace(";", "\\;")
    if escaped and escaped[0] in QUOTE_CHARS:
        escaped = "\\" + escaped
    return escaped


def stringify_options(options: Mapping[str, object]) -> str:
    """Serialize a mapping as an options string.

    Entries whose value is ``None`` are skipped.

    :param options: Mapping of option names to values.
    :returns: The options string, which :func:`parse_options` reads back.
    """
    return "; ".join(
        f"{name}: {_escape_value(str(value))}"
        for name, value in options.items()
        if value is not None
    )


@dataclass
class AnnotationOptions:
    """Options specified in an annotation attribute.

    ``hint`` changes the content id without being shown to translators,
    ``context`` is shown to translators without affecting the id,
    ``whitespace`` overrides the default whitespace handling, ``id`` replaces
    the computed id and ``export`` overrides whether the content is exported.
    """

    hint: Optional[str] = None
    context: Optional[str] = None
    whitespace: Optional[str] = None
    id: Optional[str] = None
    export: Optional[bool] = None

    @classmethod
    def parse(cls, text: Optional[str]) -> "AnnotationOptions":
        """Create options from an annotation attribute value.

        Unknown option names are ignored so templates can carry options for
        other tools.

        :param text: The attribute value, or ``None``.
        :returns: The parsed options.
        :raises OptionsSyntaxError: If the value is malformed.
        :raises OptionValueError: If ``whitespace`` or ``export`` is invalid.
        """
        if not text:
            return cls()
        raw = parse_options(text)
        options = cls(
            hint=raw.get("hint") or None,
            context=raw.get("context") or None,
            id=raw.get("id") or None,
        )
        whitespace = raw.get("whitespace")
        if whitespace:
            if whitespace not in WHITESPACE_OPTIONS:
                allowed = ", ".join(f"'{o}'" for o in WHITESPACE_OPTIONS)
                raise OptionValueError(
                    f"The 'whitespace' option must be {allowed} or undefined, but was '{whitespace}'."
                )
            options.whitespace = whitespace
        export = raw.get("export")
        if export:
            if export not in ("true", "false"):
                raise OptionValueError(
                    f"The 'export' option must be 'true', 'false' or undefined, but was '{export}'."
                )
            options.export = export == "true"
        return options

    def to_string(self) -> str:
        values = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool):
                value = "true" if value else "false"
            values[field.name] = value
        return stringify_options(values)
