"""
Tests for persistence — atomic text and JSON writes.
"""

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from gitai.core.persistence.files import atomic_write_text, write_json


class TestAtomicWrite:
    def test_creates_parents(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "file.txt"
        atomic_write_text(path, "hello")
        assert path.read_text(encoding="utf-8") == "hello"

    def test_overwrites(self, tmp_path: Path):
        path = tmp_path / "file.txt"
        path.write_text("old")
        atomic_write_text(path, "new")
        assert path.read_text(encoding="utf-8") == "new"

    def test_no_temp_files_left(self, tmp_path: Path):
        atomic_write_text(tmp_path / "file.txt", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_mode(self, tmp_path: Path):
        path = tmp_path / "script"
        atomic_write_text(path, "#!/bin/sh\n", mode=0o755)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o755

    def test_failed_write_cleans_up(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("gitai.core.persistence.files.os.replace", boom)
        with pytest.raises(OSError, match="disk full"):
            atomic_write_text(tmp_path / "file.txt", "x")
        assert list(tmp_path.iterdir()) == []


class TestWriteJson:
    def test_unicode_and_indent(self, tmp_path: Path):
        path = tmp_path / "stats.json"
        write_json(path, {"language": "中文", "count": 2})
        text = path.read_text(encoding="utf-8")
        assert "中文" in text
        assert text.endswith("}\n")
        assert json.loads(text) == {"language": "中文", "count": 2}
