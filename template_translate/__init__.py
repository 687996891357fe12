"""Public entry points for :mod:`template_translate`.

This module re-exports the primary classes so that applications can import
the parser, the translators and the workflow without touching any of the
implementation modules.
"""

from .content_hash import ContentHash, HashRegistry
from .errors import (
    AnnotationNestingError,
    ConfigurationError,
    ExpressionSyntaxError,
    HashCollisionError,
    OptionsSyntaxError,
    OptionValueError,
    OrphanedAnnotationError,
    TemplateError,
)
from .parser import AttributePattern, ParserConfig, TemplateParser
from .template import Template
from .translator import NullContentTranslator, PseudoContentTranslator, get_content_translator
from .workflow import TemplateWorkflow

__all__ = [
    "AnnotationNestingError",
    "AttributePattern",
    "ConfigurationError",
    "ContentHash",
    "ExpressionSyntaxError",
    "HashCollisionError",
    "HashRegistry",
    "NullContentTranslator",
    "OptionValueError",
    "OptionsSyntaxError",
    "OrphanedAnnotationError",
    "ParserConfig",
    "PseudoContentTranslator",
    "Template",
    "TemplateError",
    "TemplateParser",
    "TemplateWorkflow",
    "get_content_translator",
]
