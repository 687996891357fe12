"""Discovery of localizable content in HTML templates.

The parser walks the element tree once, depth first, looking for the
annotation attribute on elements and for attributes matching the attribute
pattern.  Two values are inherited down the tree: whether we are already
inside extracted content, and the translate state set by the nearest
annotated ancestor.  They decide whether an annotation starts new content,
only toggles translation inside content that is already extracted, or
contradicts its ancestors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

import config
from .content_hash import ContentHash
from .dom import HtmlDocument
from .errors import AnnotationNestingError, ConfigurationError, OrphanedAnnotationError
from .language import TemplateLanguage, get_template_language
from .template import (
    Annotation,
    AttributeAnnotation,
    AttributeContent,
    Content,
    ElementAnnotation,
    ElementContent,
    Template,
)


class AttributePattern:
    """Pattern naming the annotation attribute for a target attribute.

    The pattern contains exactly one ``*`` standing for the target attribute
    name, plus a prefix and/or a postfix, e.g. ``*.translate`` matches
    ``title.translate`` with target ``title``.
    """

    def __init__(self, pattern: str) -> None:
        parts = pattern.split("*")
        if len(parts) != 2 or len(pattern) < 2:
            raise ConfigurationError(
                f"The attribute pattern must contain a prefix and/or postfix and exactly one '*',"
                f" but was '{pattern}'."
            )
        self.pattern = pattern
        self.prefix, self.postfix = parts

    def get_target_name(self, attr_name: str) -> Optional[str]:
        """Get the target attribute name, or ``None`` if ``attr_name`` does not match."""
        if len(attr_name) <= len(self.prefix) + len(self.postfix):
            return None
        if not (attr_name.startswith(self.prefix) and attr_name.endswith(self.postfix)):
            return None
        return attr_name[len(self.prefix):len(attr_name) - len(self.postfix)]

    def get_matched_name(self, target_attr_name: str) -> str:
        return f"{self.prefix}{target_attr_name}{self.postfix}"

    def __repr__(self) -> str:
        return f"AttributePattern({self.pattern!r})"


@dataclass
class ParserConfig:
    """Settings shared by the parser and the content translators.

    ``allow_direct_annotation`` lets an attribute matching the pattern hold
    the content itself when its target attribute does not exist.  Orphaned
    annotations then go undetected, which is why such annotations are flagged
    as suspected orphans when their value looks like an annotation.
    """

    attribute_name: str = "translate"
    attribute_pattern: AttributePattern = field(default_factory=lambda: AttributePattern("*.translate"))
    allow_direct_annotation: bool = False
    template_language: Optional[str] = None
    hash_length: int = 9

    def __post_init__(self) -> None:
        if isinstance(self.attribute_pattern, str):
            self.attribute_pattern = AttributePattern(self.attribute_pattern)
        if not 1 <= self.hash_length <= 32:
            raise ConfigurationError(
                f"The hash length must be a number in the range [1, 32], but was {self.hash_length}."
            )
        # Fail early on unknown names.
        get_template_language(self.template_language)

    @classmethod
    def from_config(cls) -> "ParserConfig":
        """Build a configuration from the :mod:`config` module."""
        return cls(
            attribute_name=config.ATTRIBUTE_NAME,
            attribute_pattern=AttributePattern(config.ATTRIBUTE_PATTERN),
            allow_direct_annotation=config.ALLOW_DIRECT_ANNOTATION,
            template_language=config.TEMPLATE_LANGUAGE,
            hash_length=config.HASH_LENGTH,
        )


class _WalkState(NamedTuple):
    # True inside content that is already extracted.
    extract: bool
    # Translate state of the nearest annotated ancestor, None if there is none.
    translate: Optional[bool]


_ROOT_STATE = _WalkState(extract=False, translate=None)


class TemplateParser:
    """Parse localizable content from templates.

    :param config: Parser settings.
    :param template_language: Binding expression syntax.  Defaults to the
        language named in ``config``.
    :param content_hash: Id computation shared by all templates of one run.
        A new one with a fresh registry is created when omitted.
    :param document_class: Class implementing the tree operations of
        :class:`~template_translate.dom.HtmlDocument`.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        template_language: Optional[TemplateLanguage] = None,
        content_hash: Optional[ContentHash] = None,
        document_class=HtmlDocument,
    ) -> None:
        self.config = config or ParserConfig()
        self.template_language = template_language or get_template_language(self.config.template_language)
        self.content_hash = content_hash or ContentHash(self.config.hash_length)
        self.document_class = document_class

    def parse(self, template: str) -> Template:
        """Find the localizable content in a template.

        :param template: Template text, possibly containing binding expressions.
        :returns: The template with its content instances and annotations.
        :raises TemplateError: If the template or its annotations are invalid.
        """
        expressions: List[str] = []
        standard_html = self.template_language.to_standard_html(template, expressions)
        document = self.document_class.parse(standard_html)
        contents: List[Content] = []
        annotations: List[Annotation] = []
        self._parse_node(document, document.root, _ROOT_STATE, expressions, contents, annotations)
        return Template(document, expressions, contents, annotations, self.template_language)

    def _parse_node(self, document, element, state: _WalkState, expressions: List[str],
                    contents: List[Content], annotations: List[Annotation]) -> None:
        child_state = state

        if document.get_attribute(element, self.config.attribute_name) is not None:
            annotation = ElementAnnotation(
                document, element, self.config.attribute_name, state.translate is not None
            )
            child_state = self._check_annotation(annotation, state)
            if not state.extract and annotation.translate:
                contents.append(ElementContent(annotation, expressions, self.template_language, self.content_hash))
            annotations.append(annotation)

        for attr_name in document.attribute_names(element):
            self._parse_attribute(document, element, attr_name, state, expressions, contents, annotations)

        for child in document.child_elements(element):
            self._parse_node(document, child, child_state, expressions, contents, annotations)

    def _parse_attribute(self, document, element, attr_name: str, state: _WalkState, expressions: List[str],
                         contents: List[Content], annotations: List[Annotation]) -> None:
        target_attr_name = self.config.attribute_pattern.get_target_name(attr_name)
        if target_attr_name is None:
            return

        if document.get_attribute(element, target_attr_name) is not None:
            content_attr_name = target_attr_name
        elif self.config.allow_direct_annotation:
            content_attr_name = attr_name
        else:
            raise OrphanedAnnotationError(
                f"An orphaned annotation '{attr_name}' was found on element"
                f" <{document.tag_name(element)}>: the attribute '{target_attr_name}' does not exist."
            )

        annotation = AttributeAnnotation(
            document, element, attr_name, target_attr_name, content_attr_name, state.translate is not None
        )
        self._check_annotation(annotation, state)
        # Attribute content re-enabled inside a "no" element is extracted as well,
        # element content is not.
        if annotation.translate:
            contents.append(AttributeContent(annotation, expressions, self.template_language, self.content_hash))
        annotations.append(annotation)

    def _check_annotation(self, annotation: Annotation, state: _WalkState) -> _WalkState:
        """Validate an annotation against the inherited state.

        :returns: The state inherited by the children of an annotated element.
        :raises AnnotationNestingError: If the annotation contradicts its ancestors.
        """
        if not state.extract:
            if annotation.translate:
                return _WalkState(extract=True, translate=True)
            if state.translate is False:
                raise self._nesting_error(
                    annotation, "within a non-translatable element can only contain the value '' or 'yes'"
                )
            return _WalkState(extract=False, translate=False)

        if not annotation.translate:
            if not state.translate:
                raise self._nesting_error(
                    annotation, "within a non-translatable element can only contain the value '' or 'yes'"
                )
            return _WalkState(extract=True, translate=False)
        if annotation.has_options:
            raise self._nesting_error(
                annotation, "within translatable content can only contain the value '', 'yes' or 'no'"
            )
        if state.translate:
            raise self._nesting_error(
                annotation, "within a translatable element can only contain the value 'no'"
            )
        return _WalkState(extract=True, translate=True)

    @staticmethod
    def _nesting_error(annotation: Annotation, message: str) -> AnnotationNestingError:
        value = annotation.document.get_attribute(annotation.element, annotation.annotation_attr_name)
        return AnnotationNestingError(
            f"The annotation '{annotation.annotation_attr_name}=\"{value}\"' on element"
            f" <{annotation.element_name}> {message}."
        )
