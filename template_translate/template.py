"""Annotations and content instances found in a parsed template.

A :class:`Template` is produced by :class:`~template_translate.parser.TemplateParser`
and lives for one parse, rewrite and serialize cycle.  Each content instance
reads and writes the live document tree, so rewriting ``content`` and then
calling :meth:`Template.to_string` yields the localized template.
"""

from __future__ import annotations

from typing import List

from . import whitespace
from .content_hash import ContentHash
from .dom import HtmlDocument
from .errors import ConfigurationError, TemplateError
from .language import TemplateLanguage
from .options import AnnotationOptions

ANNOTATION_MODES = ("none", "standard", "normalize", "all")

# Standard HTML attribute written by the "standard" cleaning mode.
STANDARD_ATTRIBUTE = "translate"


def check_annotation_mode(mode: str) -> None:
    if mode not in ANNOTATION_MODES:
        allowed = ", ".join(f"'{m}'" for m in ANNOTATION_MODES)
        raise ConfigurationError(f"The annotation mode must be {allowed}, but was '{mode}'.")


def _looks_like_annotation(value: str) -> bool:
    """Guess whether a direct annotation value is really a left-over annotation."""
    if value in ("", "yes", "no"):
        return True
    try:
        AnnotationOptions.parse(value)
    except TemplateError:
        return False
    return True


class Annotation:
    """Base class for annotations.

    :param document: Document holding the annotated element.
    :param element: The annotated element.
    :param annotation_attr_name: Name of the attribute carrying the annotation.
    :param is_nested: ``True`` if an ancestor carries an explicit annotation.
    :param is_direct: ``True`` if the annotation attribute holds the content.
    """

    def __init__(self, document, element, annotation_attr_name: str, is_nested: bool, is_direct: bool = False):
        self.document = document
        self.element = element
        self.annotation_attr_name = annotation_attr_name
        self.is_nested = is_nested

        value = document.get_attribute(element, annotation_attr_name)
        if is_direct:
            # The value is content, so the attribute itself is the opt-in.
            self.translate = True
            self.options = AnnotationOptions()
            self.has_options = False
            self.is_suspected_orphan = _looks_like_annotation(value)
        else:
            self.translate = value != "no"
            if value in ("yes", "no"):
                self.options = AnnotationOptions()
                self.has_options = False
            else:
                self.options = AnnotationOptions.parse(value)
                self.has_options = bool(value.strip())
            self.is_suspected_orphan = False

    @property
    def element_name(self) -> str:
        return self.document.tag_name(self.element)

    @property
    def canonical_value(self) -> str:
        return "yes" if self.translate else "no"

    def clean(self, mode: str) -> None:
        raise NotImplementedError


class ElementAnnotation(Annotation):
    """Annotation of an element's content."""

    def clean(self, mode: str) -> None:
        check_annotation_mode(mode)
        if mode == "all":
            return
        if mode == "normalize":
            self.document.set_attribute(self.element, self.annotation_attr_name, self.canonical_value)
            return
        self.document.remove_attribute(self.element, self.annotation_attr_name)
        if mode == "standard" and (self.is_nested or not self.translate):
            self.document.set_attribute(self.element, STANDARD_ATTRIBUTE, self.canonical_value)

    def __repr__(self) -> str:
        return f"ElementAnnotation(<{self.element_name}>, translate={self.translate})"


class AttributeAnnotation(Annotation):
    """Annotation of one attribute's value.

    ``target_attr_name`` is the attribute the annotation refers to and
    ``content_attr_name`` the attribute currently holding the content.  For a
    direct annotation the content is held by the annotation attribute itself
    until the annotation is cleaned.
    """

    def __init__(self, document, element, annotation_attr_name: str, target_attr_name: str,
                 content_attr_name: str, is_nested: bool):
        super().__init__(document, element, annotation_attr_name, is_nested,
                         is_direct=content_attr_name == annotation_attr_name)
        self.target_attr_name = target_attr_name
        self.content_attr_name = content_attr_name

    @property
    def is_direct(self) -> bool:
        return self.content_attr_name == self.annotation_attr_name

    def _move_content_to_target(self) -> None:
        content = self.document.get_attribute(self.element, self.content_attr_name)
        self.document.remove_attribute(self.element, self.annotation_attr_name)
        self.content_attr_name = self.target_attr_name
        self.document.set_attribute(self.element, self.content_attr_name, content)

    def clean(self, mode: str) -> None:
        check_annotation_mode(mode)
        if mode == "all":
            return
        if self.is_direct:
            self._move_content_to_target()
        if mode == "normalize":
            self.document.set_attribute(self.element, self.annotation_attr_name, self.canonical_value)
        else:
            self.document.remove_attribute(self.element, self.annotation_attr_name)

    def __repr__(self) -> str:
        return (
            f"AttributeAnnotation(<{self.element_name}>, {self.annotation_attr_name!r}"
            f" -> {self.target_attr_name!r}, translate={self.translate})"
        )


class Content:
    """Base class for content instances.

    ``content`` exposes the text with binding expressions restored and
    whitespace normalized; assigning to it writes the new text into the tree.
    """

    def __init__(self, annotation: Annotation, expressions: List[str],
                 template_language: TemplateLanguage, content_hash: ContentHash):
        self.annotation = annotation
        self.expressions = expressions
        self.template_language = template_language
        self.content_hash = content_hash

    @property
    def document(self) -> HtmlDocument:
        return self.annotation.document

    @property
    def whitespace_option(self) -> str:
        raise NotImplementedError

    @property
    def content(self) -> str:
        standard_html = whitespace.normalize(self._read(), self.whitespace_option)
        return self.template_language.to_template_html(standard_html, self.expressions)

    @content.setter
    def content(self, template_html: str) -> None:
        self._write(self.template_language.to_standard_html(template_html, self.expressions))

    @property
    def id(self) -> str:
        """The explicit ``id`` option, or the hash of content and hint.

        Read it before assigning ``content``: the hash is taken from the
        current content, so after a rewrite an explicit ``id`` no longer
        matches the content it was claimed for and :class:`HashCollisionError`
        is raised.
        """
        options = self.annotation.options
        content_hash = self.content_hash.compute(self.content, options.hint)
        content_id = options.id or content_hash
        self.content_hash.claim_id(content_id, content_hash)
        return content_id

    def _read(self) -> str:
        raise NotImplementedError

    def _write(self, standard_html: str) -> None:
        raise NotImplementedError


class ElementContent(Content):
    """Content held in the inner HTML of an element."""

    annotation: ElementAnnotation

    @property
    def whitespace_option(self) -> str:
        return self.annotation.options.whitespace or whitespace.get_default(self.annotation.element_name)

    def _read(self) -> str:
        return self.document.inner_html(self.annotation.element)

    def _write(self, standard_html: str) -> None:
        self.document.set_inner_html(self.annotation.element, standard_html)

    def __repr__(self) -> str:
        return f"ElementContent(<{self.annotation.element_name}>)"


class AttributeContent(Content):
    """Content held in an attribute value.

    The value is exposed as written in the template, character references
    included, the same way element content is.
    """

    annotation: AttributeAnnotation

    @property
    def whitespace_option(self) -> str:
        return self.annotation.options.whitespace or whitespace.get_default(
            self.annotation.element_name, self.annotation.target_attr_name
        )

    def _read(self) -> str:
        return self.document.get_attribute(self.annotation.element, self.annotation.content_attr_name) or ""

    def _write(self, standard_html: str) -> None:
        self.document.set_attribute(self.annotation.element, self.annotation.content_attr_name, standard_html)

    def __repr__(self) -> str:
        return f"AttributeContent(<{self.annotation.element_name}>, {self.annotation.target_attr_name!r})"


class Template:
    """Result of parsing one template.

    ``contents`` holds the localizable content instances, ``annotations``
    every annotation found, including those that disable translation.
    """

    def __init__(self, document: HtmlDocument, expressions: List[str], contents: List[Content],
                 annotations: List[Annotation], template_language: TemplateLanguage):
        self.document = document
        self.expressions = expressions
        self.contents = contents
        self.annotations = annotations
        self.template_language = template_language

    def clean(self, mode: str) -> None:
        """Rewrite or remove the annotations according to ``mode``.

        :param mode: ``"none"`` removes annotations, ``"standard"`` replaces
            them with the standard ``translate`` attribute where needed,
            ``"normalize"`` reduces them to ``yes``/``no`` and ``"all"``
            leaves them untouched.
        """
        check_annotation_mode(mode)
        for annotation in self.annotations:
            annotation.clean(mode)

    def to_string(self) -> str:
        return self.template_language.to_template_html(self.document.serialize(), self.expressions)

    def __str__(self) -> str:
        return self.to_string()
