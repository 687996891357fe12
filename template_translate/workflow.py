"""End-to-end helpers for localizing HTML templates.

This module contains the :class:`TemplateWorkflow` which performs the three
steps of a localization build: exporting content from templates, producing
an import file with a content translator, and integrating imported content
back into the templates.  Export and import files are plain JSON so the
translation step can happen offline or in an external tool.  Each step logs
its actions to a dedicated file to make troubleshooting easier.
"""

from __future__ import annotations

import datetime
import logging
import os
from typing import Iterable, List, Optional, Sequence, Union

import config
from .content_files import ExportFile, ImportFile
from .content_hash import ContentHash, HashRegistry
from .errors import ConfigurationError, TemplateError
from .parser import ParserConfig, TemplateParser
from .template import Template, check_annotation_mode
from .translator import get_content_translator

DEFAULT_LOG_DIR = "logs"

MISSING_CONTENT_OPTIONS = ("ignore", "warn", "error")


class TemplateWorkflow:
    """High level workflow for template localization.

    Paths can be given relative to the configured directories, which keeps
    tests and build scripts short.  Templates are identified in export and
    import files by their path relative to ``source_dir``, starting with
    ``./``.
    """

    def __init__(
        self,
        source_dir: str | None = None,
        intermediate_dir: str | None = None,
        target_dir: str | None = None,
        parser_config: ParserConfig | None = None,
        log_dir: str = DEFAULT_LOG_DIR,
    ) -> None:
        self.source_dir = source_dir
        self.intermediate_dir = intermediate_dir
        self.target_dir = target_dir
        self.parser_config = parser_config or ParserConfig.from_config()
        self.log_dir = log_dir
        if self.intermediate_dir:
            os.makedirs(self.intermediate_dir, exist_ok=True)
        if self.target_dir:
            os.makedirs(self.target_dir, exist_ok=True)
        os.makedirs(self.log_dir, exist_ok=True)
        self.logger = logging.getLogger("TemplateWorkflow")
        self.logger.setLevel(getattr(logging, config.LOG_LEVEL))

    # Utility functions
    def _init_log(self, path: str) -> str:
        """Create a dedicated log file for a processing run.

        Each run gets its own timestamped log named after the first file it
        processes, so messages from separate runs are never interleaved.

        :param path: Path of the file that starts the run.
        :returns: The full path to the created log file.
        """

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        ts = datetime.datetime.now().strftime("%Y%m%d%H%M%S")
        base = os.path.splitext(os.path.basename(path))[0]
        log_path = os.path.join(self.log_dir, f"{base}_{ts}.log")
        fh = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s %(levelname)s:%(message)s")
        fh.setFormatter(formatter)
        self.logger.addHandler(fh)
        return log_path

    def _ensure_log(self, path: str) -> None:
        """Initialize logging when no file handler is active."""

        if not self.logger.handlers:
            self._init_log(path)

    def _resolve(self, path: str, base: str | None) -> str:
        """Join bare file names with ``base``.

        :param path: User supplied path, possibly just a filename.
        :param base: Directory to prepend when ``path`` has no directory part.
        :returns: A path ready for I/O operations.
        """

        if os.path.isabs(path) or os.path.dirname(path):
            return path
        if base:
            return os.path.join(base, path)
        return path

    def _relative_path(self, template_path: str) -> str:
        if self.source_dir:
            return os.path.relpath(template_path, self.source_dir)
        return os.path.basename(template_path)

    def _scope_path(self, template_path: str) -> str:
        """Get the ``./`` prefixed path identifying a template in content files."""
        return "./" + self._relative_path(template_path).replace(os.sep, "/")

    def _new_parser(self) -> TemplateParser:
        # One registry per run, so collisions are detected across its files only.
        content_hash = ContentHash(self.parser_config.hash_length, HashRegistry())
        return TemplateParser(self.parser_config, content_hash=content_hash)

    def _write_template(self, base_dir: str, template_path: str, template: Template) -> str:
        out_path = os.path.join(base_dir, self._relative_path(template_path))
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(template.to_string())
        return out_path

    @staticmethod
    def _read_template(path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def export(
        self,
        template_paths: Sequence[str],
        export_path: str | None = None,
        replace_with_ids: Union[bool, str] = False,
        normalize_content: bool = False,
        preserve_annotations: str | None = None,
        export_for_id: bool = False,
        log_suspected_orphans: bool = True,
    ) -> ExportFile:
        """Collect the localizable content of templates into an export file.

        Content whose annotation sets ``export: false`` is skipped, as is
        content with an explicit ``id`` unless ``export_for_id`` is set.
        When ``replace_with_ids``, ``normalize_content`` or the annotation
        mode change a template, the processed template is written to
        ``intermediate_dir``.

        :param template_paths: Templates to export.
        :param export_path: Destination of the export file.  Defaults to
            ``export.json`` in ``intermediate_dir``; nothing is written when
            neither is available.
        :param replace_with_ids: ``True`` to replace each content with its id,
            or a pattern in which ``*`` is replaced by the id.
        :param normalize_content: Rewrite content in its normalized form.
        :param preserve_annotations: Annotation mode, see :meth:`Template.clean`.
        :param export_for_id: Export content that has an explicit id.
        :param log_suspected_orphans: Warn about direct annotations that look
            like orphaned annotations.
        :returns: The export file.
        """

        paths = [self._resolve(p, self.source_dir) for p in template_paths]
        mode = preserve_annotations or config.PRESERVE_ANNOTATIONS
        check_annotation_mode(mode)
        self._init_log(paths[0] if paths else "export")
        self.logger.info("Start export: %s templates", len(paths))
        parser = self._new_parser()
        export_file = ExportFile()
        rewrite = bool(replace_with_ids) or normalize_content or mode != "all"

        for path in paths:
            scope = self._scope_path(path)
            try:
                template = parser.parse(self._read_template(path))
                if log_suspected_orphans:
                    for content in template.contents:
                        if content.annotation.is_suspected_orphan:
                            self.logger.warning(
                                "The direct annotation with content '%s' in file %s could be an orphaned annotation.",
                                content.content,
                                path,
                            )
                for content in template.contents:
                    options = content.annotation.options
                    eligible = options.export if options.export is not None else export_for_id or options.id is None
                    if eligible:
                        export_file.add(scope, content.id, content.content, options.hint, options.context)
                if replace_with_ids:
                    pattern = replace_with_ids if isinstance(replace_with_ids, str) else "*"
                    for content in template.contents:
                        content.content = pattern.replace("*", content.id)
                elif normalize_content:
                    for content in template.contents:
                        content.content = content.content
                template.clean(mode)
            except TemplateError as exc:
                self.logger.error("Error while processing file %s: %s", path, exc)
                raise
            self.logger.info("Content found in %s: %s", scope, len(template.contents))
            if rewrite and self.intermediate_dir:
                out_path = self._write_template(self.intermediate_dir, path, template)
                self.logger.info("Processed template path: %s", out_path)

        if export_path is None and self.intermediate_dir:
            export_path = os.path.join(self.intermediate_dir, "export.json")
        if export_path is not None:
            export_path = self._resolve(export_path, self.intermediate_dir)
            export_file.save(export_path)
            self.logger.info("Export path: %s", export_path)
        self.logger.info("Content exported: %s", len(export_file.contents))
        self.logger.info("End export")
        return export_file

    def translate(self, export_path: str, import_path: str, translator: str | None = "pseudo") -> str:
        """Produce an import file by translating an export file.

        With the ``pseudo`` translator this gives fake translations that
        exercise the rest of the workflow without a translation service;
        with ``none`` it gives the import file for the base language.

        :param export_path: Path to the export file.
        :param import_path: Location to write the import file.
        :param translator: Name of the content translator.
        :returns: Path to the created file.
        """

        export_path = self._resolve(export_path, self.intermediate_dir)
        import_path = self._resolve(import_path, self.intermediate_dir)
        self._ensure_log(export_path)
        content_translator = get_content_translator(translator, self.parser_config)
        export_file = ExportFile.load(export_path)
        import_file = ImportFile()
        for content_id, item in export_file.contents.items():
            import_file.set("./", content_id, content_translator.translate(item.content))
        import_file.save(import_path)
        self.logger.info("Translation written: %s (%s entries)", import_path, len(export_file.contents))
        return import_path

    def integrate(
        self,
        import_paths: Iterable[str],
        template_paths: Sequence[str],
        preserve_annotations: str | None = None,
        missing_content: str | None = None,
    ) -> List[str]:
        """Write localized templates using content from import files.

        The first import file containing an id wins.  Annotations inside the
        imported content are cleaned with the same mode as the template.

        :param import_paths: Import files, in order of precedence.
        :param template_paths: Templates to localize.
        :param preserve_annotations: Annotation mode, see :meth:`Template.clean`.
        :param missing_content: ``ignore``, ``warn`` or ``error``.
        :returns: Paths of the written templates.
        """

        mode = preserve_annotations or config.PRESERVE_ANNOTATIONS
        check_annotation_mode(mode)
        missing = missing_content or config.MISSING_CONTENT
        if missing not in MISSING_CONTENT_OPTIONS:
            raise ConfigurationError(f"The missing content handling '{missing}' is not supported.")
        import_paths = [self._resolve(p, self.intermediate_dir) for p in import_paths]
        paths = [self._resolve(p, self.source_dir) for p in template_paths]
        self._init_log(import_paths[0] if import_paths else "integrate")
        self.logger.info("Start integrate: %s", ", ".join(import_paths))
        import_files = [ImportFile.load(p) for p in import_paths]
        parser = self._new_parser()
        out_base = self.target_dir or self.intermediate_dir or "."
        written = []

        for path in paths:
            scope = self._scope_path(path)
            try:
                template = parser.parse(self._read_template(path))
                for content in template.contents:
                    localized = self._find_import_content(import_files, scope, content.id, missing)
                    if localized is None:
                        continue
                    if mode != "all":
                        content_template = parser.parse(localized)
                        content_template.clean(mode)
                        localized = content_template.to_string()
                    content.content = localized
                template.clean(mode)
            except (TemplateError, LookupError) as exc:
                self.logger.error("Error while processing file %s: %s", path, exc)
                raise
            target_path = self._write_template(out_base, path, template)
            self.logger.info("Wrote integrated file: %s", target_path)
            written.append(target_path)

        self.logger.info("End integrate")
        return written

    def _find_import_content(
        self, import_files: List[ImportFile], scope: str, content_id: str, missing: str
    ) -> Optional[str]:
        for import_file in import_files:
            content = import_file.get(scope, content_id)
            if content is not None:
                return content
        message = f"The content for id '{content_id}' in file '{scope}' was not found in the import files."
        if missing == "error":
            raise LookupError(message)
        if missing == "warn":
            self.logger.warning(message)
        return None
