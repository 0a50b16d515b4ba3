"""Tests for capture sessions, previews and the session store."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

import notion_capture_mcp.config as cfg_mod
from notion_capture_mcp.models.inputs import InputFile
from notion_capture_mcp.previews import PreviewRegistry
from notion_capture_mcp.sessions import CaptureSession, SessionStore
from notion_capture_mcp.state import SetError


def _image(name: str = "a.png") -> InputFile:
    return InputFile(name=name, mime_type="image/png", data=b"\x89PNG")


def _text(name: str = "n.txt") -> InputFile:
    return InputFile(name=name, mime_type="text/plain", data=b"hi")


class TestPreviewRegistry:
    def test_only_images_get_previews(self):
        registry = PreviewRegistry()
        image_path = registry.acquire(_image())
        assert registry.acquire(_text()) is None
        assert Path(image_path).read_bytes() == b"\x89PNG"
        assert registry.paths == [image_path, None]
        registry.release_all()

    def test_release_by_index(self):
        registry = PreviewRegistry()
        first = registry.acquire(_image("a.png"))
        second = registry.acquire(_image("b.png"))
        registry.release(0)
        assert not Path(first).exists()
        assert registry.paths == [second]
        registry.release_all()

    def test_same_name_after_removal_gets_its_own_file(self):
        registry = PreviewRegistry()
        registry.acquire(_image("x.png"))
        kept = registry.acquire(InputFile(name="image.png", mime_type="image/png", data=b"FIRST"))
        registry.release(0)
        added = registry.acquire(InputFile(name="image.png", mime_type="image/png", data=b"SECOND"))

        assert added != kept
        assert Path(kept).read_bytes() == b"FIRST"
        assert Path(added).read_bytes() == b"SECOND"
        registry.release(1)
        assert Path(kept).exists()
        registry.release_all()

    def test_context_manager_releases_on_error(self):
        with pytest.raises(RuntimeError):
            with PreviewRegistry() as registry:
                path = registry.acquire(_image())
                raise RuntimeError("boom")
        assert not Path(path).exists()
        assert len(registry) == 0


class TestCaptureSession:
    def test_remove_file_releases_preview(self):
        session = CaptureSession(session_id="s1")
        session.add_files([_image(), _text()])
        path = session.previews.paths[0]

        removed = session.remove_file(0)

        assert removed.name == "a.png"
        assert not Path(path).exists()
        assert [f.name for f in session.bundle.files] == ["n.txt"]
        assert session.previews.paths == [None]

    def test_remove_out_of_range(self):
        session = CaptureSession(session_id="s1")
        with pytest.raises(IndexError):
            session.remove_file(0)

    def test_reset_clears_everything(self):
        session = CaptureSession(session_id="s1")
        session.bundle.text = "hello"
        session.add_files([_image()])
        path = session.previews.paths[0]
        session.content = {"Title": "x"}
        session.dispatch(SetError("bad"))

        session.reset()

        assert session.bundle.text == ""
        assert session.bundle.files == []
        assert session.content is None
        assert session.state.error == ""
        assert not Path(path).exists()


class TestSessionStore:
    def test_create_and_get(self):
        store = SessionStore()
        session = store.create()
        assert store.get(session.session_id) is session
        assert len(session.session_id) == 12

    def test_get_missing_raises_key_error(self):
        store = SessionStore()
        with pytest.raises(KeyError, match="Session nope not found"):
            store.get("nope")

    def test_eviction_by_max_releases_previews(self):
        cfg_mod._config = cfg_mod.ServerConfig(max_sessions=2, session_timeout_hours=24)
        store = SessionStore()
        oldest = store.create()
        oldest.add_files([_image()])
        path = oldest.previews.paths[0]
        oldest.last_active = datetime.now() - timedelta(minutes=5)
        store.create()

        store.create()

        assert store.count == 2
        with pytest.raises(KeyError):
            store.get(oldest.session_id)
        assert not Path(path).exists()

    def test_expired_sessions_evicted(self):
        cfg_mod._config = cfg_mod.ServerConfig(session_timeout_hours=1)
        store = SessionStore()
        session = store.create()
        session.last_active = datetime.now() - timedelta(hours=2)
        with pytest.raises(KeyError):
            store.get(session.session_id)

    def test_clear(self):
        store = SessionStore()
        store.create()
        store.create()
        assert store.clear() == 2
        assert store.count == 0
