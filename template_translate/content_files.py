"""JSON files exchanged with translators.

An export file maps each content id to the source content, its hint, the
contexts it appears in and the templates it was found in::

    {"3f9a1c2b0": {"content": "Hello", "context": ["Greeting"], "sources": ["./app.html"]}}

An import file maps content ids to translated content, either at the top
level or grouped under scope paths starting with ``./``, so different
templates can receive different translations for the same id::

    {"./": {"3f9a1c2b0": "Hallo"}, "./admin/": {"3f9a1c2b0": "Guten Tag"}}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ExportedContent:
    """One entry of an export file."""

    content: str
    hint: Optional[str] = None
    context: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"content": self.content}
        if self.hint is not None:
            data["hint"] = self.hint
        if self.context:
            data["context"] = list(self.context)
        if self.sources:
            data["sources"] = list(self.sources)
        return data


def _check_string_list(content_id: str, key: str, value) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Invalid {key} for id '{content_id}'. Expected a list of strings.")
    return value


class ExportFile:
    """Content collected from templates during an export."""

    def __init__(self) -> None:
        self.contents: Dict[str, ExportedContent] = {}

    def add(self, source: str, content_id: str, content: str,
            hint: Optional[str] = None, context: Optional[str] = None) -> None:
        """Record content found in ``source``.

        Repeated ids keep the first content and collect every source and
        context they were found with.
        """
        item = self.contents.setdefault(content_id, ExportedContent(content, hint))
        if source not in item.sources:
            item.sources.append(source)
        if context and context not in item.context:
            item.context.append(context)

    def to_json(self) -> str:
        data = {content_id: item.to_dict() for content_id, item in self.contents.items()}
        return json.dumps(data, indent=2, ensure_ascii=False)

    @classmethod
    def parse(cls, text: str) -> "ExportFile":
        """Read an export file from its JSON text.

        :raises ValueError: If an entry has the wrong shape.
        """
        export_file = cls()
        for content_id, entry in json.loads(text).items():
            if not isinstance(entry, dict) or not isinstance(entry.get("content"), str):
                raise ValueError(f"Invalid content for id '{content_id}'. Expected a string.")
            hint = entry.get("hint")
            if hint is not None and not isinstance(hint, str):
                raise ValueError(f"Invalid hint for id '{content_id}'. Expected a string.")
            context = _check_string_list(content_id, "context", entry.get("context", []))
            sources = _check_string_list(content_id, "sources", entry.get("sources", []))
            for source in sources:
                if not source.startswith("./"):
                    raise ValueError(f"Invalid source '{source}'. Expected a string that begins with './'.")
            export_file.contents[content_id] = ExportedContent(entry["content"], hint, list(context), list(sources))
        return export_file

    def save(self, path: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, path: str) -> "ExportFile":
        with open(path, "r", encoding="utf-8") as f:
            return cls.parse(f.read())


class ImportFile:
    """Translated content, grouped by scope path."""

    def __init__(self) -> None:
        self.contents: Dict[str, Dict[str, str]] = {}

    def set(self, scope: str, content_id: str, content: str) -> None:
        self.contents.setdefault(scope, {})[content_id] = content

    def get(self, path: str, content_id: str) -> Optional[str]:
        """Get the content for ``content_id`` as seen from the template at ``path``.

        Scopes containing ``path`` are searched from the most specific one.

        :param path: Template path relative to the source directory, starting with ``./``.
        :param content_id: Id of the content to look up.
        :returns: The translated content, or ``None`` if not found.
        """
        scopes = sorted((s for s in self.contents if path.startswith(s)), key=len, reverse=True)
        for scope in scopes:
            content = self.contents[scope].get(content_id)
            if content is not None:
                return content
        return None

    def to_json(self) -> str:
        return json.dumps(self.contents, indent=2, ensure_ascii=False)

    @classmethod
    def parse(cls, text: str) -> "ImportFile":
        """Read an import file from its JSON text.

        Top-level string values belong to the ``./`` scope.

        :raises ValueError: If a scope or an entry has the wrong shape.
        """
        import_file = cls()
        for key, value in json.loads(text).items():
            if isinstance(value, str):
                import_file.set("./", key, value)
                continue
            if not key.startswith("./"):
                raise ValueError(f"Invalid scope path '{key}'. Expected a string that begins with './'.")
            if not isinstance(value, dict):
                raise ValueError(f"Invalid scope '{key}'. Expected an object.")
            for content_id, content in value.items():
                if not isinstance(content, str):
                    raise ValueError(f"Invalid content for id '{content_id}'. Expected a string.")
                import_file.set(key, content_id, content)
        return import_file

    def save(self, path: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, path: str) -> "ImportFile":
        with open(path, "r", encoding="utf-8") as f:
            return cls.parse(f.read())
