"""Exceptions raised while processing templates.

Every problem detected by the engine is fatal for the template being
processed.  The exceptions derive from :class:`ValueError` so callers that do
not care about the exact kind can catch one familiar type, while tests and
tools can still tell the kinds apart.
"""

from __future__ import annotations


class TemplateError(ValueError):
    """Base class for all template processing errors."""


class ExpressionSyntaxError(TemplateError):
    """A binding expression is unterminated or unbalanced."""


class OptionsSyntaxError(TemplateError):
    """An annotation options string does not follow the ``name: value`` grammar."""


class OptionValueError(TemplateError):
    """An annotation option has a value outside its allowed set."""


class AnnotationNestingError(TemplateError):
    """An annotation contradicts the state inherited from its ancestors."""


class OrphanedAnnotationError(TemplateError):
    """An attribute annotation was found without its target attribute."""


class HashCollisionError(TemplateError):
    """Two different content instances were mapped to the same id."""


class ConfigurationError(TemplateError):
    """A configuration value is not supported."""
