import asyncio
import subprocess

import fitz  # PyMuPDF
import pytest

from overprint.__main__ import main
from overprint.core.annotations.persistence import AnnotationPersistence
from overprint.core.errors import AccessDenied, UnsupportedPlatform
from overprint.core.fonts.source import FontconfigSource

from .conftest import free_text, make_pdf, underline


def test_usage_error(capsys):
    assert main(["only-one.pdf"]) == 2
    assert "usage" in capsys.readouterr().err


def test_export_from_command_line(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    source = tmp_path / "in.pdf"
    source.write_bytes(make_pdf())
    annotations_path = tmp_path / "in.annotations.json"
    AnnotationPersistence().save_to_json([underline(), free_text(contents="Native")], str(source),
                                         str(annotations_path))
    output = tmp_path / "out.pdf"

    assert main([str(source), str(annotations_path), str(output)]) == 0

    doc = fitz.open(str(output))
    try:
        page = doc[0]
        assert [annot.type[1] for annot in page.annots()] == ["FreeText"]
        assert len(page.get_drawings()) == 1
    finally:
        doc.close()


def test_missing_annotations_file(tmp_path):
    source = tmp_path / "in.pdf"
    source.write_bytes(make_pdf())
    assert main([str(source), str(tmp_path / "none.json"), str(tmp_path / "out.pdf")]) == 1


def test_fontconfig_unavailable():
    source = FontconfigSource(executable="overprint-no-such-fc-list")
    assert not source.supported()
    with pytest.raises(UnsupportedPlatform):
        asyncio.run(source.query())


def test_fontconfig_prompt_denied(monkeypatch):
    monkeypatch.setattr("overprint.core.fonts.source.shutil.which", lambda name: "/usr/bin/fc-list")
    source = FontconfigSource(confirm=lambda: False)
    with pytest.raises(AccessDenied):
        asyncio.run(source.query())


def test_fontconfig_query_parses_output(monkeypatch):
    monkeypatch.setattr("overprint.core.fonts.source.shutil.which", lambda name: "/usr/bin/fc-list")
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(
            args, 0, stdout="/f/a.ttf|0|Alpha|Bold|Alpha Bold|Alpha-Bold\n", stderr="")

    monkeypatch.setattr("overprint.core.fonts.source.subprocess.run", fake_run)
    fonts = asyncio.run(FontconfigSource(confirm=lambda: True).query())

    assert [f.postscript_name for f in fonts] == ["Alpha-Bold"]
    assert calls[0][0] == "fc-list"
