import json
import logging
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from template_translate import AnnotationNestingError, ContentHash, ParserConfig, TemplateWorkflow
from template_translate.content_files import ExportFile, ImportFile


def make_workflow(tmp_path, **kwargs):
    source = tmp_path / "src"
    source.mkdir(exist_ok=True)
    return TemplateWorkflow(
        str(source),
        str(tmp_path / "intermediate"),
        str(tmp_path / "translated"),
        parser_config=ParserConfig(**kwargs),
        log_dir=str(tmp_path / "logs"),
    )


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_full_workflow(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", '<p translate="hint: greeting">Hello</p><p>Untouched</p>')

    export_file = wf.export(["app.html"])
    content_id = ContentHash(9).compute("Hello", "greeting")
    export_path = tmp_path / "intermediate" / "export.json"
    assert export_path.exists()
    data = json.loads(export_path.read_text(encoding="utf-8"))
    assert data == {content_id: {"content": "Hello", "hint": "greeting", "sources": ["./app.html"]}}
    assert list(export_file.contents) == [content_id]
    processed = (tmp_path / "intermediate" / "app.html").read_text(encoding="utf-8")
    assert processed == "<p>Hello</p><p>Untouched</p>"

    import_path = wf.translate("export.json", "pseudo.json")
    assert json.loads(open(import_path, encoding="utf-8").read()) == {"./": {content_id: "[H:e:l:l:o]"}}

    written = wf.integrate(["pseudo.json"], ["app.html"])
    assert written == [os.path.join(str(tmp_path / "translated"), "app.html")]
    result = (tmp_path / "translated" / "app.html").read_text(encoding="utf-8")
    assert result == "<p>[H:e:l:l:o]</p><p>Untouched</p>"
    assert any(name.endswith(".log") for name in os.listdir(tmp_path / "logs"))


def test_export_collects_sources_and_contexts(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "a.html", '<p translate="context: Title">Save</p>')
    write(tmp_path / "src" / "b.html", '<button translate="context: Button">Save</button>')
    export_file = wf.export(["a.html", "b.html"])
    item = export_file.contents[ContentHash(9).compute("Save")]
    assert item.sources == ["./a.html", "./b.html"]
    assert item.context == ["Title", "Button"]


def test_export_eligibility(tmp_path):
    wf = make_workflow(tmp_path)
    write(
        tmp_path / "src" / "app.html",
        '<p translate="export: false">A</p><p translate="id: b-id">B</p>'
        '<p translate="id: c-id; export: true">C</p>',
    )
    assert sorted(wf.export(["app.html"]).contents) == ["c-id"]
    assert sorted(wf.export(["app.html"], export_for_id=True).contents) == ["b-id", "c-id"]


def test_export_replace_with_ids(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", '<p translate>Hello</p><img alt="Cat" alt.translate>')
    wf.export(["app.html"], replace_with_ids="${*}")
    processed = (tmp_path / "intermediate" / "app.html").read_text(encoding="utf-8")
    hello_id = ContentHash(9).compute("Hello")
    cat_id = ContentHash(9).compute("Cat")
    assert processed == f'<p>${{{hello_id}}}</p><img alt="${{{cat_id}}}">'


def test_export_preserve_annotations(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", '<p translate="hint: x">Hello</p>')
    wf.export(["app.html"], preserve_annotations="normalize")
    processed = (tmp_path / "intermediate" / "app.html").read_text(encoding="utf-8")
    assert processed == '<p translate="yes">Hello</p>'


def test_export_logs_and_raises_template_errors(tmp_path, caplog):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "bad.html", "<div translate><p translate>x</p></div>")
    with caplog.at_level(logging.ERROR, logger="TemplateWorkflow"):
        with pytest.raises(AnnotationNestingError):
            wf.export(["bad.html"])
    assert "bad.html" in caplog.text


def test_export_warns_about_suspected_orphans(tmp_path, caplog):
    wf = make_workflow(tmp_path, allow_direct_annotation=True)
    write(tmp_path / "src" / "app.html", '<img alt.translate="yes"><img title.translate="A cat">')
    with caplog.at_level(logging.WARNING, logger="TemplateWorkflow"):
        wf.export(["app.html"])
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "could be an orphaned annotation" in warnings[0].getMessage()

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="TemplateWorkflow"):
        wf.export(["app.html"], log_suspected_orphans=False)
    assert not [r for r in caplog.records if r.levelno == logging.WARNING]


def test_integrate_missing_content(tmp_path, caplog):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", "<p translate>Hello</p>")
    ImportFile().save(str(tmp_path / "intermediate" / "empty.json"))

    with pytest.raises(LookupError):
        wf.integrate(["empty.json"], ["app.html"])

    with caplog.at_level(logging.WARNING, logger="TemplateWorkflow"):
        wf.integrate(["empty.json"], ["app.html"], missing_content="warn")
    assert "was not found in the import files" in caplog.text
    assert (tmp_path / "translated" / "app.html").read_text(encoding="utf-8") == "<p>Hello</p>"

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="TemplateWorkflow"):
        wf.integrate(["empty.json"], ["app.html"], missing_content="ignore")
    assert "was not found" not in caplog.text


def test_integrate_scoped_content_and_precedence(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", "<p translate>Hello</p>")
    write(tmp_path / "src" / "admin" / "page.html", "<p translate>Hello</p>")
    content_id = ContentHash(9).compute("Hello")
    first = ImportFile()
    first.set("./admin/", content_id, "Guten Tag")
    first.save(str(tmp_path / "intermediate" / "first.json"))
    second = ImportFile()
    second.set("./", content_id, "Hallo")
    second.save(str(tmp_path / "intermediate" / "second.json"))

    wf.integrate(
        ["first.json", "second.json"],
        [str(tmp_path / "src" / "app.html"), str(tmp_path / "src" / "admin" / "page.html")],
    )
    assert (tmp_path / "translated" / "app.html").read_text(encoding="utf-8") == "<p>Hallo</p>"
    assert (tmp_path / "translated" / "admin" / "page.html").read_text(encoding="utf-8") == "<p>Guten Tag</p>"


def test_integrate_cleans_imported_annotations(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", '<p translate>Hello <b translate="no">Acme</b></p>')
    content_id = ContentHash(9).compute('Hello <b translate="no">Acme</b>')
    import_file = ImportFile()
    import_file.set("./", content_id, 'Hallo <b translate="no">Acme</b>')
    import_file.save(str(tmp_path / "intermediate" / "de.json"))

    wf.integrate(["de.json"], ["app.html"])
    assert (tmp_path / "translated" / "app.html").read_text(encoding="utf-8") == "<p>Hallo <b>Acme</b></p>"

    wf.integrate(["de.json"], ["app.html"], preserve_annotations="standard")
    assert (tmp_path / "translated" / "app.html").read_text(encoding="utf-8") == (
        '<p>Hallo <b translate="no">Acme</b></p>'
    )


def test_angular_workflow(tmp_path):
    wf = make_workflow(tmp_path, template_language="angular")
    write(tmp_path / "src" / "app.html", '<p translate>Hi {{ user.name }}</p><input placeholder="{{ hint }}">')
    wf.export(["app.html"])
    wf.translate("export.json", "pseudo.json")
    wf.integrate(["pseudo.json"], ["app.html"])
    result = (tmp_path / "translated" / "app.html").read_text(encoding="utf-8")
    assert result == '<p>[H:i {{ user.name }}]</p><input placeholder="{{ hint }}">'


def test_import_file_scopes():
    import_file = ImportFile.parse('{"a": "x", "./admin/": {"a": "y"}}')
    assert import_file.get("./admin/page.html", "a") == "y"
    assert import_file.get("./app.html", "a") == "x"
    assert import_file.get("./app.html", "b") is None


@pytest.mark.parametrize("text", ['{"admin/": {"a": "y"}}', '{"./": ["a"]}', '{"./": {"a": 1}}'])
def test_import_file_invalid(text):
    with pytest.raises(ValueError):
        ImportFile.parse(text)


def test_export_file_parse():
    export_file = ExportFile.parse('{"abc": {"content": "Hi", "hint": "h", "sources": ["./a.html"]}}')
    assert export_file.contents["abc"].content == "Hi"
    assert export_file.contents["abc"].hint == "h"
    assert ExportFile.parse(export_file.to_json()).contents == export_file.contents


@pytest.mark.parametrize(
    "text",
    [
        '{"abc": "Hi"}',
        '{"abc": {"content": 1}}',
        '{"abc": {"content": "Hi", "context": "x"}}',
        '{"abc": {"content": "Hi", "sources": ["a.html"]}}',
    ],
)
def test_export_file_invalid(text):
    with pytest.raises(ValueError):
        ExportFile.parse(text)


def test_workflow_keeps_character_references(tmp_path):
    wf = make_workflow(tmp_path)
    write(tmp_path / "src" / "app.html", "<p translate>Caf&eacute;&nbsp;Bar</p>")
    export_file = wf.export(["app.html"], normalize_content=True)
    content_id = ContentHash(9).compute("Caf&eacute;&nbsp;Bar")
    assert export_file.contents[content_id].content == "Caf&eacute;&nbsp;Bar"
    assert (tmp_path / "intermediate" / "app.html").read_text(encoding="utf-8") == "<p>Caf&eacute;&nbsp;Bar</p>"
    wf.translate("export.json", "pseudo.json")
    wf.integrate(["pseudo.json"], ["app.html"])
    result = (tmp_path / "translated" / "app.html").read_text(encoding="utf-8")
    assert result == "<p>[C:a:f&eacute;&nbsp;B:a:r]</p>"
