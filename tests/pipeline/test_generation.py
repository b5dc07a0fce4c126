from unittest.mock import Mock

import pytest
import requests

from services.pipeline.errors import GenerationFailed
from services.pipeline.generation import ChatClient
from shared.config import settings


class FakeSession:
    def __init__(self, replies=None, exc=None):
        self.replies = list(replies or [])
        self.exc = exc
        self.payloads = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.payloads.append(json)
        if self.exc:
            raise self.exc
        resp = Mock()
        resp.raise_for_status = lambda: None
        content = self.replies.pop(0)
        resp.json = lambda: {"choices": [{"message": {"content": content}}]}
        return resp


def test_translate_uses_translation_temperature(monkeypatch):
    monkeypatch.setattr(settings, "TRANSLATION_TEMPERATURE", 0.3)
    session = FakeSession(["  こんにちは  "])
    client = ChatClient("k", session=session, language="Japanese")
    assert client.translate("Hello") == "こんにちは"
    payload = session.payloads[0]
    assert payload["temperature"] == 0.3
    assert "Hello" in payload["messages"][0]["content"]
    assert "Japanese" in payload["messages"][0]["content"]


def test_narration_script_includes_transcript(monkeypatch):
    monkeypatch.setattr(settings, "SCRIPT_TEMPERATURE", 0.7)
    monkeypatch.setattr(settings, "NARRATION_SCRIPT_CHARS", 100)
    session = FakeSession(["A short script."])
    script = ChatClient("k", session=session).narration_script("Hello world")
    assert script == "A short script."
    prompt = session.payloads[0]["messages"][0]["content"]
    assert "Hello world" in prompt
    assert "100" in prompt
    assert session.payloads[0]["temperature"] == 0.7


def test_empty_script_fails():
    with pytest.raises(GenerationFailed):
        ChatClient("k", session=FakeSession(["   "])).narration_script("text")


def test_malformed_reply_fails():
    class BadSession(FakeSession):
        def post(self, url, json=None, headers=None, timeout=None):
            resp = Mock()
            resp.raise_for_status = lambda: None
            resp.json = lambda: {"choices": []}
            return resp

    with pytest.raises(GenerationFailed):
        ChatClient("k", session=BadSession()).translate("hi")


def test_network_error_fails():
    with pytest.raises(GenerationFailed):
        ChatClient("k", session=FakeSession(exc=requests.ConnectionError("x"))).translate("hi")
