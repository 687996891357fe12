"""Library configuration.

The engine is configurable via an external ``TOML`` file so build scripts and
interactive sessions can alter defaults without patching the code.  By reading
``TEMPLATE_TRANSLATE_CONFIG`` first, deployments may point to a central config
location while still falling back to a project ``config.toml`` when the
environment variable is unset.
"""

from __future__ import annotations

import os
import pytoml

_CONFIG_PATH = os.environ.get(
    "TEMPLATE_TRANSLATE_CONFIG",
    os.path.join(os.path.dirname(__file__), "config.toml"),
)

if os.path.exists(_CONFIG_PATH):
    with open(_CONFIG_PATH, "r", encoding="utf-8") as _cfg:
        _CONF = pytoml.load(_cfg)
else:
    _CONF = {}

# Name of the attribute marking elements whose content should be localized.
ATTRIBUTE_NAME: str = "translate"

# Pattern matching annotation attributes for attribute content, where ``*``
# stands for the name of the target attribute.
ATTRIBUTE_PATTERN: str = "*.translate"

# When enabled, an attribute matching the pattern whose target attribute is
# missing holds the content itself instead of being an orphaned annotation.
ALLOW_DIRECT_ANNOTATION: bool = False

# Binding expression syntax of the templates: "angular", "aurelia" or "none".
TEMPLATE_LANGUAGE: str = "none"

# Number of hex digits in a content id.  Nine digits keep ids short while the
# collision check guards against the rare clash.
HASH_LENGTH: int = 9

# How annotations are rewritten after export and import.
PRESERVE_ANNOTATIONS: str = "none"

# What to do when imported content is missing: "ignore", "warn" or "error".
MISSING_CONTENT: str = "error"

# Default log level used by :class:`~template_translate.workflow.TemplateWorkflow`.
LOG_LEVEL: str = "INFO"

# Override with TOML values if provided
ATTRIBUTE_NAME = _CONF.get("ATTRIBUTE_NAME", ATTRIBUTE_NAME)
ATTRIBUTE_PATTERN = _CONF.get("ATTRIBUTE_PATTERN", ATTRIBUTE_PATTERN)
ALLOW_DIRECT_ANNOTATION = bool(_CONF.get("ALLOW_DIRECT_ANNOTATION", ALLOW_DIRECT_ANNOTATION))
TEMPLATE_LANGUAGE = _CONF.get("TEMPLATE_LANGUAGE", TEMPLATE_LANGUAGE)
HASH_LENGTH = int(_CONF.get("HASH_LENGTH", HASH_LENGTH))
PRESERVE_ANNOTATIONS = _CONF.get("PRESERVE_ANNOTATIONS", PRESERVE_ANNOTATIONS)
MISSING_CONTENT = _CONF.get("MISSING_CONTENT", MISSING_CONTENT)
LOG_LEVEL = _CONF.get("LOG_LEVEL", LOG_LEVEL)
