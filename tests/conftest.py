"""Pytest configuration and fixtures shared across the test modules."""

import pytest
from fastapi.testclient import TestClient

from docanalyzer.main import app, get_speech_synthesizer


class FakeSynthesizer:
    """Records synthesis calls and returns recognisable bytes per turn."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def synthesize(self, text, voice):
        self.calls.append((text, voice))
        if text in self.fail_on:
            raise RuntimeError(f"TTS failed for {text!r}")
        return f"<{voice}:{text}>".encode("utf-8")


def make_paragraph(words: int, word: str = "word") -> str:
    return " ".join([word] * words)


@pytest.fixture
def fake_synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def client(fake_synthesizer, tmp_path, monkeypatch):
    """API client with the speech synthesizer replaced and uploads in a temp dir."""
    from docanalyzer.config import settings

    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    app.dependency_overrides[get_speech_synthesizer] = lambda: fake_synthesizer
    yield TestClient(app)
    app.dependency_overrides.clear()
