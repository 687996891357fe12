"""HTML tree access used by the parser and the translators.

All tree manipulation goes through :class:`HtmlDocument`, so the rest of the
engine only relies on a handful of operations: parse, serialize, attribute
access, child iteration and inner HTML.  Another DOM library can back the
engine by providing a class with the same methods.

Parsing is done by :mod:`lxml.html`, which decodes character references.
Templates must come back exactly as authored, so ``&`` is swapped for a
private-use character before parsing and swapped back in every text, tail,
comment and attribute value afterwards.  Text and attribute values in the
tree therefore hold their source form, e.g. ``a&nbsp;b``, and are written
out unescaped by the serializer in this module.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional

from lxml import etree
from lxml import html as lxml_html

# Same test lxml applies to decide whether markup is a complete document.
_FULL_DOCUMENT = re.compile(r"^\s*<(?:html|!doctype)", re.I)

# Stands in for "&" while lxml parses the markup.
_AMPERSAND_MARK = "\ue000"

VOID_ELEMENTS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}

# Elements whose text is not entity encoded.
RAW_TEXT_ELEMENTS = {"script", "style"}

# Attributes libxml2 may fill in with their own name, e.g. disabled="disabled".
BOOLEAN_ATTRIBUTES = {
    "allowfullscreen",
    "async",
    "autofocus",
    "autoplay",
    "checked",
    "compact",
    "controls",
    "declare",
    "default",
    "defer",
    "disabled",
    "formnovalidate",
    "hidden",
    "inert",
    "ismap",
    "itemscope",
    "loop",
    "multiple",
    "muted",
    "nohref",
    "nomodule",
    "noresize",
    "noshade",
    "novalidate",
    "nowrap",
    "open",
    "playsinline",
    "readonly",
    "required",
    "reversed",
    "selected",
}


def _is_marked(text: Optional[str]) -> bool:
    return text is not None and _AMPERSAND_MARK in text


def _restore_ampersands(root: etree._Element) -> None:
    for node in root.iter():
        if _is_marked(node.text):
            node.text = node.text.replace(_AMPERSAND_MARK, "&")
        if _is_marked(node.tail):
            node.tail = node.tail.replace(_AMPERSAND_MARK, "&")
        if isinstance(node.tag, str):
            for name, value in node.attrib.items():
                if _is_marked(value):
                    node.set(name, value.replace(_AMPERSAND_MARK, "&"))


def _parse_markup(markup: str) -> etree._Element:
    """Parse ``markup`` as a complete document with character references kept."""
    root = lxml_html.document_fromstring(markup.replace("&", _AMPERSAND_MARK))
    _restore_ampersands(root)
    return root


def _parse_fragment(markup: str) -> etree._Element:
    """Parse ``markup`` as the content of a ``<body>`` element.

    ``lxml.html.fragments_fromstring`` drops leading whitespace, so the body
    is taken from a wrapper document instead.

    :param markup: HTML fragment.
    :returns: The ``body`` element holding the parsed nodes.
    """
    document = _parse_markup(f"<html><body>{markup}</body></html>")
    return document.find("body")


def _format_attribute(name: str, value: str) -> str:
    if value == "" or (name in BOOLEAN_ATTRIBUTES and value.lower() == name):
        return f" {name}"
    value = value.replace('"', "&quot;")
    return f' {name}="{value}"'


class HtmlDocument:
    """A parsed HTML template.

    Fragments are parsed into a synthetic ``body`` element that carries no
    attributes and is not part of the serialized output.  Markup starting
    with ``<html`` or a doctype is parsed as a complete document.
    """

    def __init__(
        self,
        root: etree._Element,
        doctype: Optional[str] = None,
        is_fragment: bool = True,
    ) -> None:
        self.root = root
        self.doctype = doctype
        self.is_fragment = is_fragment

    @classmethod
    def parse(cls, markup: str) -> "HtmlDocument":
        """Parse a template into a mutable tree.

        :param markup: Standard HTML, i.e. without binding expressions.
        :returns: The parsed document.
        """
        if _FULL_DOCUMENT.match(markup):
            root = _parse_markup(markup)
            return cls(root, root.getroottree().docinfo.doctype or None, is_fragment=False)
        return cls(_parse_fragment(markup))

    def serialize(self) -> str:
        """Serialize the whole document back to HTML."""
        if self.is_fragment:
            return self.inner_html(self.root)
        prefix = f"{self.doctype}\n" if self.doctype else ""
        return prefix + self.outer_html(self.root)

    def tag_name(self, element: etree._Element) -> str:
        return element.tag

    def attribute_names(self, element: etree._Element) -> List[str]:
        return list(element.attrib.keys())

    def get_attribute(self, element: etree._Element, name: str) -> Optional[str]:
        return element.get(name)

    def set_attribute(self, element: etree._Element, name: str, value: str) -> None:
        element.set(name, value)

    def remove_attribute(self, element: etree._Element, name: str) -> None:
        if name in element.attrib:
            del element.attrib[name]

    def child_elements(self, element: etree._Element) -> List[etree._Element]:
        """Get the element children, skipping comments and processing instructions."""
        return [child for child in element if isinstance(child.tag, str)]

    def outer_html(self, node: etree._Element) -> str:
        """Serialize one node, excluding its tail text."""
        if isinstance(node.tag, str):
            attrs = "".join(_format_attribute(k, v) for k, v in node.attrib.items())
            start = f"<{node.tag}{attrs}>"
            if node.tag in VOID_ELEMENTS:
                return start
            return f"{start}{self.inner_html(node)}</{node.tag}>"
        if isinstance(node, etree._Comment):
            return f"<!--{node.text or ''}-->"
        if isinstance(node, etree._ProcessingInstruction):
            text = f" {node.text}" if node.text else ""
            return f"<?{node.target}{text}>"
        return etree.tostring(node, method="html", encoding="unicode", with_tail=False)

    def inner_html(self, element: etree._Element) -> str:
        """Serialize the content of an element.

        Text and child markup are kept as authored, the element itself and its
        attributes are dropped.

        :param element: Element whose content should be serialized.
        :returns: Inner HTML without the outer element.
        """
        parts: List[str] = []
        if element.text:
            parts.append(element.text)
        for child in element:
            parts.append(self.outer_html(child))
            if child.tail:
                parts.append(child.tail)
        return "".join(parts)

    def set_inner_html(self, element: etree._Element, markup: str) -> None:
        """Replace the content of an element with new markup.

        :param element: Element to modify in place.
        :param markup: HTML fragment to insert.
        """
        for child in list(element):
            element.remove(child)
        fragment = _parse_fragment(markup)
        element.text = fragment.text
        for child in list(fragment):
            element.append(child)

    def rewrite_text(self, element: etree._Element, rewrite: Callable[[str], str]) -> None:
        """Apply ``rewrite`` to every text run directly inside ``element``.

        With :mod:`lxml` these are the element text and the tails of its
        children.
        """
        if element.text:
            element.text = rewrite(element.text)
        for child in element:
            if child.tail:
                child.tail = rewrite(child.tail)
