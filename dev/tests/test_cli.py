"""
pngmeta - CLI Tests

Runs cli.main() in-process and checks stdout / exit status.

Can be run standalone: python tests.py --module cli
"""

import io
import json
import tempfile
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import pytest

from png_fixtures import minimal_png, pillow_png, png_without_ihdr

from pngmeta import cli
from pngmeta.formats.png import PngFile


def run(*argv) -> str:
    out = io.StringIO()
    with redirect_stdout(out):
        cli.main(list(argv))
    return out.getvalue()


def run_failing(*argv) -> str:
    err = io.StringIO()
    with redirect_stderr(err), redirect_stdout(io.StringIO()):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(list(argv))
    assert excinfo.value.code == 1
    return err.getvalue()


def test_inspect_json():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        path.write_bytes(minimal_png())
        data = json.loads(run("--format", "json", "inspect", str(path)))
        assert data["image"]["width"] == 1
        assert data["image"]["color_type"] == 2
        assert data["chunk_counts"] == {"IHDR": 1, "IDAT": 1, "IEND": 1}


def test_inspect_table():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        path.write_bytes(pillow_png(size=(4, 3)))
        out = run("inspect", str(path))
        assert "4x3" in out
        assert "IHDR: 1" in out


def test_write_then_read():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        path.write_bytes(pillow_png())
        out = run("write", str(path), "--title", "Hello", "--description", "World",
                  "--url", "https://example.com/a",
                  "--ext", "foo=http://www.foo.org/foo-syntax-ns#:foodie=yes")
        assert "Wrote" in out
        assert Path(f"{path}.bak").exists()

        data = json.loads(run("--format", "json", "read", str(path)))
        assert data["title"] == "Hello"
        assert data["description"] == "World"
        assert data["resource_url"] == "https://example.com/a"
        assert data["extended"]["foo"]["properties"] == {"foodie": "yes"}

        table = run("read", str(path))
        assert "Title:        Hello" in table


def test_add_text_and_chunks():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        out_path = Path(tmp) / "b.png"
        path.write_bytes(minimal_png())
        run("add-text", str(path), "Comment", "hi there", "--lang", "en",
            "--compress", "--output", str(out_path))

        assert path.read_bytes() == minimal_png()
        fields = PngFile.read(out_path).text_chunks()[0]
        assert (fields.keyword, fields.language_tag, fields.text) == ("Comment", "en", "hi there")
        assert fields.compressed

        rows = json.loads(run("--format", "json", "chunks", str(out_path)))
        assert [r["type"] for r in rows] == ["IHDR", "iTXt", "IDAT", "IEND"]
        assert rows[1]["keyword"] == "Comment"
        assert all(r["crc_ok"] for r in rows)

        table = run("chunks", "--strict", str(out_path))
        assert "iTXt" in table


def test_chunks_flags_bad_crc():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        bad = bytearray(minimal_png())
        bad[-1] ^= 0x01
        path.write_bytes(bytes(bad))

        assert "BAD CRC" in run("chunks", str(path))
        assert "CRC mismatch" in run_failing("chunks", "--strict", str(path))


def test_verify():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "a.png"
        path.write_bytes(pillow_png())
        run("add-text", str(path), "Comment", "visible", "--no-backup")
        out = run("verify", str(path))
        assert out.startswith("OK: PNG 4x3 RGB")
        assert "Comment: visible" in out
        assert not Path(f"{path}.bak").exists()


def test_errors_exit_with_status_1():
    with tempfile.TemporaryDirectory() as tmp:
        broken = Path(tmp) / "broken.png"
        broken.write_bytes(png_without_ihdr())
        assert "IHDR" in run_failing("write", str(broken), "--title", "x")
        assert "not found" in run_failing("read", str(Path(tmp) / "missing.png"))
        assert "Bad --ext" in run_failing("write", str(broken), "--title", "x",
                                          "--ext", "nonsense")


def test_no_command_prints_help():
    out = io.StringIO()
    with redirect_stdout(out):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
    assert excinfo.value.code == 0
    assert "usage: pngmeta" in out.getvalue()
