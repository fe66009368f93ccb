"""Match counter waterfall and local fallback"""

import json

import pytest
import requests

import counter
from counter import GLOBAL, LOCAL, OFFLINE, CountResult


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class ScriptedCalls(list):
    """Recorded (url, timeout) pairs plus the responses still to hand out."""

    def __init__(self):
        super().__init__()
        self.script = []


@pytest.fixture
def calls(monkeypatch):
    """Route requests.get through a per-test script of responses."""
    recorded = ScriptedCalls()
    script = recorded.script

    def fake_get(url, timeout):
        recorded.append((url, timeout))
        outcome = script.pop(0) if script else requests.ConnectionError("offline")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(counter.requests, "get", fake_get)
    return recorded


@pytest.fixture
def local_file(tmp_path):
    return str(tmp_path / "matches.json")


def test_direct_fetch_wins(calls, local_file):
    calls.script.append(FakeResponse({"count": 41}))
    result = counter.get_match_count("https://example.test/matches", local_file)
    assert result == CountResult(41, GLOBAL)
    assert calls == [("https://example.test/matches", 3.0)]


def test_falls_through_to_proxies(calls, local_file):
    calls.script.extend([
        requests.Timeout("slow"),
        FakeResponse({}, status=502),
        FakeResponse({"count": 7}),
    ])
    result = counter.get_match_count("https://example.test/matches", local_file)
    assert result == CountResult(7, GLOBAL)
    urls = [url for url, _ in calls]
    assert urls[1].startswith("https://corsproxy.io/?")
    assert urls[2].startswith("https://api.allorigins.win/raw?url=")
    assert [timeout for _, timeout in calls] == [3.0, 4.0, 5.0]


def test_body_without_count_is_a_failure(calls, local_file):
    calls.script.extend([
        FakeResponse({"value": 3}),
        FakeResponse(ValueError("not json")),
        FakeResponse({"count": "12"}),
    ])
    result = counter.get_match_count("https://example.test/matches", local_file)
    assert result == CountResult(0, LOCAL)


def test_local_fallback_creates_file(calls, local_file):
    result = counter.get_match_count("https://example.test/matches", local_file)
    assert result == CountResult(0, LOCAL)
    with open(local_file, encoding="utf-8") as f:
        assert json.load(f) == {"count": 0}


def test_increment_updates_local_even_when_offline(calls, local_file):
    assert counter.increment_match_count("https://example.test/matches", local_file) is None
    assert counter.increment_match_count("https://example.test/matches", local_file) is None
    assert counter.get_match_count("https://example.test/matches", local_file) == CountResult(2, LOCAL)


def test_increment_returns_global_count(calls, local_file):
    calls.script.append(FakeResponse({"count": 100}))
    assert counter.increment_match_count("https://example.test/matches", local_file) == 100
    assert calls[0][0] == "https://example.test/matches/up"


def test_corrupt_local_file_is_offline(calls, local_file):
    with open(local_file, "w", encoding="utf-8") as f:
        f.write("{not json")
    assert counter.get_match_count("https://example.test/matches", local_file) == CountResult(0, OFFLINE)
