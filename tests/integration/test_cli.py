import tempfile
from pathlib import Path

import fitz
import pytest

from pdf_catalog.main import main


@pytest.fixture(autouse=True)
def isolated_tempdir(tmp_path: Path, monkeypatch) -> Path:
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root


def _create_pdf(path: Path) -> None:
    document = fitz.open()
    page = document.new_page(width=595, height=842)
    page.draw_rect(fitz.Rect(40, 40, 400, 300), color=(0, 0, 0), fill=(0, 0, 0))
    document.save(str(path))
    document.close()


def test_threshold_round_trip(tmp_path: Path, capsys) -> None:
    preferences = str(tmp_path / "prefs.json")

    assert main(["--preferences", preferences, "threshold"]) == 0
    assert capsys.readouterr().out.strip() == "8"

    assert main(["--preferences", preferences, "threshold", "5"]) == 0
    assert main(["--preferences", preferences, "threshold"]) == 0
    assert capsys.readouterr().out.strip() == "5"

    assert main(["--preferences", preferences, "threshold", "-1"]) == 2


def test_scan_prints_groups(tmp_path: Path, capsys) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    _create_pdf(docs / "a.pdf")
    _create_pdf(docs / "b.pdf")
    preferences = str(tmp_path / "prefs.json")

    assert main(["--preferences", preferences, "scan", str(docs), "--no-thumbnails"]) == 0

    out = capsys.readouterr().out
    assert "a.pdf  [1p]" in out and "b.pdf  [1p]" in out
    assert "2 documents, 1 groups (threshold 8)" in out


def test_scan_uses_saved_threshold(tmp_path: Path, capsys) -> None:
    docs = tmp_path / "docs"
    docs.mkdir()
    _create_pdf(docs / "a.pdf")
    preferences = str(tmp_path / "prefs.json")

    assert main(["--preferences", preferences, "threshold", "2"]) == 0
    assert main(["--preferences", preferences, "scan", str(docs), "--no-thumbnails"]) == 0
    assert "(threshold 2)" in capsys.readouterr().out

    assert main(["--preferences", preferences, "scan", str(docs), "--no-thumbnails", "--threshold", "6"]) == 0
    assert "(threshold 6)" in capsys.readouterr().out


def test_scan_empty_and_missing_folder(tmp_path: Path, capsys) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    preferences = str(tmp_path / "prefs.json")

    assert main(["--preferences", preferences, "scan", str(empty)]) == 0
    assert "No PDFs found in this folder." in capsys.readouterr().out

    assert main(["--preferences", preferences, "scan", str(tmp_path / "nope")]) == 1


def test_clear_cache(isolated_tempdir: Path, capsys) -> None:
    cache_dir = isolated_tempdir / "pdf-catalog-cache"
    cache_dir.mkdir()
    (cache_dir / "stale.json").write_text("{}", encoding="utf-8")

    assert main(["clear-cache"]) == 0

    assert cache_dir.is_dir()
    assert list(cache_dir.iterdir()) == []
    assert "Cache cleared" in capsys.readouterr().out


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "pdf-catalog" in capsys.readouterr().out


def test_trash_reports_failures(tmp_path: Path, monkeypatch, capsys) -> None:
    from pdf_catalog.utils import file_ops

    def fake_send2trash(path: str) -> None:
        if path.endswith("locked.pdf"):
            raise OSError("permission denied")

    monkeypatch.setattr(file_ops, "send2trash", fake_send2trash)

    assert main(["trash", str(tmp_path / "a.pdf")]) == 0
    assert main(["trash", str(tmp_path / "a.pdf"), str(tmp_path / "locked.pdf")]) == 1
    assert "W-TRASH" in capsys.readouterr().err
