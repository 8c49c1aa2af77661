"""
Tests for the command line entry point (vibe_write.py)
"""
import json
from unittest.mock import patch

import pytest

import vibe_write
from config.settings import settings


@pytest.fixture
def credentials_file(tmp_path, monkeypatch):
    path = tmp_path / "credentials.json"
    monkeypatch.setattr(settings, "credentials_file", path)
    return path


class TestFormatCommand:
    """Test `format`."""

    def test_rewrites_file_in_place(self, tmp_path):
        article = tmp_path / "article.md"
        article.write_text("#标题\n正文。", encoding="utf-8")

        assert vibe_write.main(["format", str(article)]) == 0
        assert article.read_text(encoding="utf-8") == "# 标题\n\n正文。\n"

    def test_stdout(self, tmp_path, capsys):
        article = tmp_path / "article.md"
        article.write_text("#标题", encoding="utf-8")

        assert vibe_write.main(["format", str(article), "--stdout"]) == 0
        assert capsys.readouterr().out == "# 标题\n"
        assert article.read_text(encoding="utf-8") == "#标题"

    def test_missing_file(self, tmp_path):
        assert vibe_write.main(["format", str(tmp_path / "nope.md")]) == 1


class TestKeysCommand:
    """Test `keys set` / `keys list`."""

    def test_set_and_list(self, credentials_file, capsys):
        assert vibe_write.main(["keys", "set", "deepseek", "sk-deepseek-123456"]) == 0

        stored = json.loads(credentials_file.read_text(encoding="utf-8"))
        assert stored["keys"] == {"deepseek": "sk-deepseek-123456"}

        assert vibe_write.main(["keys", "list"]) == 0
        out = capsys.readouterr().out
        assert "sk-...3456" in out
        assert "sk-deepseek-123456" not in out


class TestWriteCommands:
    """Test `write`, `review` and `revise` with a fake provider."""

    def test_write_from_text(self, tmp_path, make_dispatcher):
        output = tmp_path / "out.md"
        dispatcher = make_dispatcher(["#标题\n", "正文。"])

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main([
                "write", "--text", "素材", "--api-key", "sk-test", "-q", "-o", str(output),
            ])

        assert code == 0
        assert output.read_text(encoding="utf-8") == "# 标题\n\n正文。\n"
        assert len(dispatcher.requests) == 4

    def test_write_without_key_fails(self, tmp_path, credentials_file, make_dispatcher):
        dispatcher = make_dispatcher()

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main(["write", "--text", "素材", "-q", "-o", str(tmp_path / "out.md")])

        assert code == 1
        assert dispatcher.requests == []

    def test_revise_reports_failure(self, tmp_path, make_dispatcher):
        article = tmp_path / "article.md"
        article.write_text("原文。", encoding="utf-8")
        dispatcher = make_dispatcher(["半截"], fail_with=RuntimeError("quota exceeded"))

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main(["revise", str(article), "-i", "改短", "--api-key", "sk", "-q"])

        assert code == 1
        assert article.read_text(encoding="utf-8") == "原文。"

    def test_revise_empty_article_is_pending(self, tmp_path, make_dispatcher, capsys):
        article = tmp_path / "article.md"
        article.write_text("", encoding="utf-8")
        dispatcher = make_dispatcher()

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main(["revise", str(article), "-i", "多举例子", "--api-key", "sk", "-q"])

        err = capsys.readouterr().err
        assert code == 0
        assert "⏳ 多举例子" in err
        assert "❌" not in err
        assert dispatcher.requests == []
        assert article.stat().st_size == 0

    def test_revise_writes_after_partial_success(self, tmp_path, make_dispatcher):
        article = tmp_path / "article.md"
        article.write_text("原文。", encoding="utf-8")
        dispatcher = make_dispatcher(["第一次修改。"], ["  "])

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main(["revise", str(article), "-i", "改短", "-i", "再改", "--api-key", "sk", "-q"])

        assert code == 1
        assert article.read_text(encoding="utf-8") == "第一次修改。\n"

    def test_review_rewrites_file(self, tmp_path, make_dispatcher):
        article = tmp_path / "article.md"
        article.write_text("原文。", encoding="utf-8")
        dispatcher = make_dispatcher(["审校后。"])

        with patch("core.writing_service.get_dispatcher", return_value=dispatcher):
            code = vibe_write.main(["review", str(article), "--step", "detail", "--api-key", "sk", "-q"])

        assert code == 0
        assert article.read_text(encoding="utf-8") == "审校后。\n"
