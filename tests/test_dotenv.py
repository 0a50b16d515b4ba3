"""Tests for the shared env file loader."""

from __future__ import annotations

import os

from notion_capture_mcp.config import ENV_KEYS
from notion_capture_mcp.dotenv import load_env_file, read_env_file


class TestReadEnvFile:
    def test_basic_and_quoted(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text('A=1\nB="two"\nC=\'three\'\nexport D=4\n')
        assert read_env_file(env) == {"A": "1", "B": "two", "C": "three", "D": "4"}

    def test_comments_blanks_and_malformed(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("# comment\n\nNO_EQUALS\n1BAD=x\nKEY=val\n")
        assert read_env_file(env) == {"KEY": "val"}

    def test_value_with_equals(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("URL=https://x?a=b\n")
        assert read_env_file(env) == {"URL": "https://x?a=b"}

    def test_missing_file(self, tmp_path):
        assert read_env_file(tmp_path / "nonexistent") == {}


class TestLoadEnvFile:
    def test_applies_unset_keys(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NOTION_API_KEY", raising=False)
        env = tmp_path / ".env"
        env.write_text("NOTION_API_KEY=from-file\n")
        applied = load_env_file(ENV_KEYS, env)
        assert applied == {"NOTION_API_KEY": "from-file"}
        monkeypatch.delenv("NOTION_API_KEY")

    def test_ignores_keys_the_server_does_not_read(self, tmp_path, monkeypatch):
        monkeypatch.delenv("UNRELATED_SECRET", raising=False)
        env = tmp_path / ".env"
        env.write_text("UNRELATED_SECRET=x\n")
        assert load_env_file(ENV_KEYS, env) == {}
        assert "UNRELATED_SECRET" not in os.environ

    def test_process_env_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        env = tmp_path / ".env"
        env.write_text("GEMINI_API_KEY=from-file\n")
        assert load_env_file(ENV_KEYS, env) == {}

    def test_placeholder_counts_as_unset(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "${OPENROUTER_API_KEY}")
        env = tmp_path / ".env"
        env.write_text("OPENROUTER_API_KEY=real\n")
        assert load_env_file(ENV_KEYS, env) == {"OPENROUTER_API_KEY": "real"}

    def test_default_path(self, tmp_path, monkeypatch):
        env = tmp_path / "shared.env"
        env.write_text("CAPTURE_UPLOAD_URL=https://up.example\n")
        monkeypatch.setattr("notion_capture_mcp.dotenv.DEFAULT_ENV_PATH", env)
        assert load_env_file(["CAPTURE_UPLOAD_URL"]) == {"CAPTURE_UPLOAD_URL": "https://up.example"}
        monkeypatch.delenv("CAPTURE_UPLOAD_URL")
