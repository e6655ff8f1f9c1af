import logging
from pathlib import Path, PurePath

import pytest

from tinytemple.content import SourceEntry, SourceKind
from tinytemple.errors import WriteError
from tinytemple.writer import (
    CopyReport,
    RenderedOutput,
    copy_files,
    copy_static,
    write_rendered,
)


def create_static(tmp_path: Path) -> Path:
    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "foo.html").write_text("static foo", encoding="utf-8")
    (static / "css" / "main.css").write_text("body{}", encoding="utf-8")
    return static


def test_write_rendered_creates_directories(tmp_path):
    out = tmp_path / "html"
    outputs = [
        RenderedOutput(PurePath("index.html"), b"<h1>Demo</h1>"),
        RenderedOutput(PurePath("blog/post.html"), "<p>café</p>".encode()),
    ]
    written = write_rendered(outputs, out)
    assert written == [out / "index.html", out / "blog" / "post.html"]
    assert (out / "index.html").read_bytes() == b"<h1>Demo</h1>"
    assert (out / "blog" / "post.html").read_text(encoding="utf-8") == "<p>café</p>"


def test_write_rendered_overwrites(tmp_path):
    out = tmp_path / "html"
    out.mkdir()
    (out / "index.html").write_text("old", encoding="utf-8")
    write_rendered([RenderedOutput(PurePath("index.html"), b"new")], out)
    assert (out / "index.html").read_text(encoding="utf-8") == "new"


def test_write_rendered_fails_fast_and_keeps_earlier_files(tmp_path):
    out = tmp_path / "html"
    out.mkdir()
    # a file where a directory is needed
    (out / "blog").write_text("in the way", encoding="utf-8")
    outputs = [
        RenderedOutput(PurePath("a.html"), b"a"),
        RenderedOutput(PurePath("blog/post.html"), b"post"),
        RenderedOutput(PurePath("z.html"), b"z"),
    ]
    with pytest.raises(WriteError):
        write_rendered(outputs, out)
    assert (out / "a.html").read_bytes() == b"a"
    assert not (out / "z.html").exists()


def test_write_rendered_out_dir_is_a_file(tmp_path):
    out = tmp_path / "html"
    out.write_text("x", encoding="utf-8")
    with pytest.raises(WriteError) as excinfo:
        write_rendered([], out)
    assert excinfo.value.path == out


def test_copy_static_mirrors_tree(tmp_path):
    static = create_static(tmp_path)
    out = tmp_path / "html"
    report = copy_static(static, out)
    assert (out / "foo.html").read_text(encoding="utf-8") == "static foo"
    assert (out / "css" / "main.css").read_text(encoding="utf-8") == "body{}"
    assert sorted(report.copied) == [out / "css" / "main.css", out / "foo.html"]
    assert report.skipped == []


def test_copy_static_never_clobbers(tmp_path):
    static = create_static(tmp_path)
    out = tmp_path / "html"
    out.mkdir()
    (out / "foo.html").write_text("rendered foo", encoding="utf-8")
    report = copy_static(static, out)
    assert (out / "foo.html").read_text(encoding="utf-8") == "rendered foo"
    assert report.skipped == [out / "foo.html"]
    assert report.copied == [out / "css" / "main.css"]


def test_copy_static_logs_skips_at_debug(tmp_path, caplog):
    static = create_static(tmp_path)
    out = tmp_path / "html"
    out.mkdir()
    (out / "foo.html").write_text("rendered foo", encoding="utf-8")
    with caplog.at_level(logging.DEBUG, logger="tinytemple.writer"):
        copy_static(static, out)
    skips = [r for r in caplog.records if r.getMessage().startswith("skip existing")]
    assert len(skips) == 1
    assert skips[0].levelno == logging.DEBUG
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_copy_static_missing_directory_is_a_no_op(tmp_path):
    report = copy_static(tmp_path / "static", tmp_path / "html")
    assert report == CopyReport()
    assert not (tmp_path / "html").exists()


def test_copy_static_rejects_a_file(tmp_path):
    static = tmp_path / "static"
    static.write_text("x", encoding="utf-8")
    with pytest.raises(WriteError):
        copy_static(static, tmp_path / "html")


def test_copy_files_uses_entry_destination(tmp_path):
    source = tmp_path / "content"
    (source / "img").mkdir(parents=True)
    (source / "img" / "logo.svg").write_text("<svg/>", encoding="utf-8")
    (source / "robots.txt").write_text("new", encoding="utf-8")
    out = tmp_path / "html"
    out.mkdir()
    (out / "robots.txt").write_text("old", encoding="utf-8")
    entries = [
        SourceEntry(
            PurePath("img/logo.svg"), source / "img" / "logo.svg", SourceKind.STATIC
        ),
        SourceEntry(PurePath("robots.txt"), source / "robots.txt", SourceKind.STATIC),
    ]
    report = copy_files(entries, out)
    assert (out / "img" / "logo.svg").read_text(encoding="utf-8") == "<svg/>"
    assert (out / "robots.txt").read_text(encoding="utf-8") == "old"
    assert report.copied == [out / "img" / "logo.svg"]
    assert report.skipped == [out / "robots.txt"]


def test_copy_report_extend():
    first = CopyReport(copied=[Path("a")], skipped=[Path("b")])
    first.extend(CopyReport(copied=[Path("c")]))
    assert first.copied == [Path("a"), Path("c")]
    assert first.skipped == [Path("b")]
