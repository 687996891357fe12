"""Whitespace normalization for exported content.

Templates are usually indented for readability, which adds whitespace that is
irrelevant to translators and would change content ids whenever the markup is
reformatted.  Content is therefore normalized according to a whitespace
option, chosen per annotation or defaulted per element and attribute.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import ConfigurationError

WHITESPACE_OPTIONS = ("trim", "normal", "pre", "pre-line")

# Elements whose content is whitespace-significant.
PRESERVED_ELEMENTS = {
    "textarea",
    "input",
    "select",
    "option",
    "pre",
    "xmp",
    "plaintext",
    "listing",
}

_WHITESPACE_RUN = re.compile(r"\s+")
_OUTER_WHITESPACE = re.compile(r"^\s|\s\Z")


def get_default(element_name: str, attr_name: Optional[str] = None) -> str:
    """Get the default whitespace option for element or attribute content.

    :param element_name: Name of the element holding the content.
    :param attr_name: Name of the attribute holding the content, or ``None``
        for the element content.
    :returns: One of :data:`WHITESPACE_OPTIONS`.
    """
    if attr_name is not None:
        return "pre"
    if element_name in PRESERVED_ELEMENTS:
        return "pre"
    return "trim"


def normalize(content: str, option: str) -> str:
    """Normalize whitespace in ``content`` according to ``option``.

    ``normal`` collapses every whitespace run to a single space, ``trim``
    additionally removes the leading and trailing space, ``pre-line`` trims
    each line separately and ``pre`` leaves the content untouched.

    :param content: Text to normalize.
    :param option: One of :data:`WHITESPACE_OPTIONS`.
    :returns: The normalized text.
    """
    if option == "pre":
        return content
    if option == "normal":
        return _WHITESPACE_RUN.sub(" ", content)
    if option == "trim":
        return _OUTER_WHITESPACE.sub("", normalize(content, "normal"))
    if option == "pre-line":
        return "\n".join(normalize(line, "trim") for line in content.split("\n"))
    raise ConfigurationError(f"Unknown whitespace handling option '{option}'.")
