"""Binding expression handling for template languages.

Binding expressions may contain ``<``, ``>`` and quote characters that would
confuse an HTML parser, so before a template is parsed every expression is
moved into a list and replaced with a numbered placeholder.  The placeholder
number is the index of the expression in that list, which makes restoring
the template a simple substitution.
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern

from .errors import ConfigurationError, ExpressionSyntaxError

QUOTE_CHARS = "\"'`"


class TemplateLanguage:
    """Base class for template language implementations.

    Subclasses convert between the template syntax and standard, parser-safe
    HTML.  ``placeholder_pattern`` matches the placeholders the language
    produces, or is ``None`` when it never produces any.
    """

    name = "none"
    placeholder_pattern: Optional[Pattern[str]] = None

    def to_standard_html(self, template: str, expressions: List[str]) -> str:
        """Replace binding expressions with placeholders.

        :param template: Template text that may contain binding expressions.
        :param expressions: List to which the extracted expressions are appended.
        :returns: Standard HTML in which each expression is a placeholder.
        """
        return template

    def to_template_html(self, standard_html: str, expressions: List[str]) -> str:
        """Replace placeholders with the expressions they stand for.

        :param standard_html: HTML produced by :meth:`to_standard_html`.
        :param expressions: Expressions referenced by the placeholders.
        :returns: The template text.
        """
        if self.placeholder_pattern is None:
            return standard_html

        def restore(match: "re.Match[str]") -> str:
            index = int(match.group(1))
            if index >= len(expressions):
                raise ExpressionSyntaxError(
                    f"The placeholder '{match.group(0)}' does not refer to a known expression."
                )
            return expressions[index]

        return self.placeholder_pattern.sub(restore, standard_html)


class NullTemplateLanguage(TemplateLanguage):
    """Template language without any binding expressions."""


class _ExpressionScanner:
    """Quote-aware brace tracking shared by the brace based languages."""

    def __init__(self) -> None:
        self.depth = 0
        self.quote: Optional[str] = None
        self.escape = False

    def feed(self, char: str) -> None:
        if self.quote is not None:
            if char == "\\" and not self.escape:
                self.escape = True
                return
            if char == self.quote and not self.escape:
                self.quote = None
            self.escape = False
        elif char in QUOTE_CHARS:
            self.quote = char
        elif char == "{":
            self.depth += 1
        elif char == "}":
            self.depth -= 1

    def check_complete(self) -> None:
        if self.quote is not None:
            raise ExpressionSyntaxError("Unbalanced quotes in expression.")
        if self.depth != 0:
            raise ExpressionSyntaxError("Unbalanced braces in expression.")
        if self.escape:
            raise ExpressionSyntaxError("Expected character after escape.")


class AngularTemplateLanguage(TemplateLanguage):
    """Template language using ``{{expression}}`` interpolation.

    Placeholders have the form ``{{index}}``.
    """

    name = "angular"
    placeholder_pattern = re.compile(r"\{\{(\d+)\}\}")

    def to_standard_html(self, template: str, expressions: List[str]) -> str:
        parts: List[str] = []
        start = 0
        expect_open = False
        expect_close = False
        scanner = _ExpressionScanner()

        for i, char in enumerate(template):
            if scanner.depth == 0 and not expect_close:
                if char != "{":
                    expect_open = False
                elif expect_open:
                    expect_open = False
                    scanner.depth = 1
                    parts.append(template[start:i - 1])
                    start = i - 1
                else:
                    expect_open = True
                continue

            if expect_close:
                if char != "}":
                    raise ExpressionSyntaxError(
                        f"Unbalanced braces in expression at position {i}."
                    )
                expect_close = False
                expressions.append(template[start:i + 1])
                parts.append("{{%d}}" % (len(expressions) - 1))
                start = i + 1
                continue

            scanner.feed(char)
            if scanner.depth == 0:
                # The first of the two closing braces.
                expect_close = True

        if expect_close:
            raise ExpressionSyntaxError("Unbalanced braces in expression.")
        scanner.check_complete()
        parts.append(template[start:])
        return "".join(parts)


class AureliaTemplateLanguage(TemplateLanguage):
    """Template language using ``${expression}`` interpolation.

    Placeholders have the form ``${index}``.
    """

    name = "aurelia"
    placeholder_pattern = re.compile(r"\$\{(\d+)\}")

    def to_standard_html(self, template: str, expressions: List[str]) -> str:
        parts: List[str] = []
        start = 0
        expect_open = False
        scanner = _ExpressionScanner()

        for i, char in enumerate(template):
            if scanner.depth == 0:
                if char == "$":
                    expect_open = True
                elif expect_open:
                    expect_open = False
                    if char == "{":
                        scanner.depth = 1
                        parts.append(template[start:i - 1])
                        start = i - 1
                continue

            scanner.feed(char)
            if scanner.depth == 0:
                expressions.append(template[start:i + 1])
                parts.append("${%d}" % (len(expressions) - 1))
                start = i + 1

        scanner.check_complete()
        parts.append(template[start:])
        return "".join(parts)


TEMPLATE_LANGUAGES = {
    "none": NullTemplateLanguage,
    "angular": AngularTemplateLanguage,
    "aurelia": AureliaTemplateLanguage,
}


def get_template_language(name: Optional[str]) -> TemplateLanguage:
    """Create the template language registered under ``name``.

    :param name: ``"angular"``, ``"aurelia"``, ``"none"`` or ``None``.
    :returns: A new :class:`TemplateLanguage` instance.
    """
    if name is None:
        return NullTemplateLanguage()
    try:
        return TEMPLATE_LANGUAGES[name]()
    except KeyError:
        raise ConfigurationError(f"The template language '{name}' is not supported.") from None
