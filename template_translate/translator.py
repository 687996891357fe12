"""Content translators used to produce import files without a translator.

:class:`PseudoContentTranslator` rewrites text so that truncated,
concatenated or untranslated strings are easy to spot in the UI, while
:class:`NullContentTranslator` returns content unchanged, which is how an
import file for the base language is produced.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .dom import RAW_TEXT_ELEMENTS, HtmlDocument
from .errors import ConfigurationError
from .language import TemplateLanguage, get_template_language
from .parser import ParserConfig

_WORD_CHAR = re.compile(r"\w", re.ASCII)
_WHITESPACE_ONLY = re.compile(r"\s*\Z")


class ContentTranslator:
    """Translate localizable content."""

    def translate(self, template_html: str) -> str:
        raise NotImplementedError


class NullContentTranslator(ContentTranslator):
    """Translator returning content unchanged."""

    def translate(self, template_html: str) -> str:
        return template_html


class TextContentTranslator(ContentTranslator):
    """Base class for translators rewriting the text of an HTML fragment.

    Binding expressions are extracted first, then the tree is walked honoring
    the annotation attribute: text inside an element annotated with ``no`` is
    left alone, and attributes annotated through the attribute pattern are
    translated unless annotated with ``no``.  Subclasses implement
    :meth:`translate_text`.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        template_language: Optional[TemplateLanguage] = None,
        document_class=HtmlDocument,
    ) -> None:
        self.config = config or ParserConfig()
        self.template_language = template_language or get_template_language(self.config.template_language)
        self.document_class = document_class

    def translate(self, template_html: str) -> str:
        expressions: List[str] = []
        standard_html = self.template_language.to_standard_html(template_html, expressions)
        document = self.document_class.parse(standard_html)
        self._translate_node(document, document.root, True)
        return self.template_language.to_template_html(document.serialize(), expressions)

    def translate_text(self, text: str) -> str:
        """Translate one run of text, which may contain expression placeholders."""
        raise NotImplementedError

    def _translate_node(self, document, element, translate: bool) -> None:
        translate_children = translate
        annotation = document.get_attribute(element, self.config.attribute_name)
        if annotation is not None:
            translate_children = annotation != "no"

        for attr_name in document.attribute_names(element):
            self._translate_attribute(document, element, attr_name)

        if translate_children and document.tag_name(element) not in RAW_TEXT_ELEMENTS:
            document.rewrite_text(element, self.translate_text)

        for child in document.child_elements(element):
            self._translate_node(document, child, translate_children)

    def _translate_attribute(self, document, element, attr_name: str) -> None:
        target_attr_name = self.config.attribute_pattern.get_target_name(attr_name)
        if target_attr_name is None:
            return

        target_value = document.get_attribute(element, target_attr_name)
        if target_value is None:
            # Direct annotation, the matched attribute holds the content.
            value = document.get_attribute(element, attr_name)
            document.set_attribute(element, attr_name, self.translate_text(value))
        elif document.get_attribute(element, attr_name) != "no":
            document.set_attribute(element, target_attr_name, self.translate_text(target_value))


class PseudoContentTranslator(TextContentTranslator):
    """Translator producing pseudo-localized text.

    ``Hello world`` becomes ``[H:e:l:l:o w:o:r:l:d]``: the brackets reveal
    strings that are cut off or concatenated, and the colons make untranslated
    strings stand out.  Character references like ``&amp;`` and expression
    placeholders are copied unchanged.  Only meant for latin based text.
    """

    def translate_text(self, text: str) -> str:
        if _WHITESPACE_ONLY.match(text):
            return text

        placeholder = self.template_language.placeholder_pattern
        result = ["["]
        in_reference = False
        i = 0
        while i < len(text):
            if placeholder is not None:
                match = placeholder.match(text, i)
                if match:
                    result.append(match.group(0))
                    i = match.end()
                    continue

            char = text[i]
            if char == "&":
                in_reference = True
            elif char in " ;":
                in_reference = False
            result.append(char)

            if not in_reference and i + 1 < len(text):
                following = text[i + 1]
                if _WORD_CHAR.match(char) and _WORD_CHAR.match(following) and following != "_":
                    result.append(":")
            i += 1

        result.append("]")
        return "".join(result)


def get_content_translator(
    name: Optional[str],
    config: Optional[ParserConfig] = None,
    template_language: Optional[TemplateLanguage] = None,
) -> ContentTranslator:
    """Create the content translator registered under ``name``.

    :param name: ``"pseudo"``, ``"none"`` or ``None``.
    :param config: Parser settings used to recognize annotations.
    :param template_language: Binding expression syntax of the content.
    :returns: A new translator.
    """
    if name is None or name == "none":
        return NullContentTranslator()
    if name == "pseudo":
        return PseudoContentTranslator(config, template_language)
    raise ConfigurationError(f"The content translator '{name}' is not supported.")
