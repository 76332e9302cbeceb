import asyncio
import json
import logging
from types import SimpleNamespace

import pytest

from media_chain.assistant import AssistResult, Session
from media_chain.errors import UpstreamError
from media_chain.music import LYRICS_MODEL, MusicClient


def not_json():
    raise ValueError("Expecting value: line 1 column 1 (char 0)")


class FakeSession:
    def __init__(self, status_code=200, payload=None, decode=None):
        self.status_code = status_code
        self.payload = [{"audio_url": "https://cdn.example/track.mp3"}] if payload is None else payload
        self.decode = decode
        self.requests = []

    def post(self, url, json=None, timeout=None):
        self.requests.append({"url": url, "json": json})
        return SimpleNamespace(
            status_code=self.status_code,
            ok=200 <= self.status_code < 300,
            text="failure" if self.status_code >= 400 else "<html>oops</html>",
            json=self.decode or (lambda: self.payload),
        )


class FakeRunner:
    def __init__(self, song):
        self.song = song
        self.calls = []
        self.loops = []

    async def assist(self, **kwargs):
        self.calls.append(kwargs)
        self.loops.append(asyncio.get_running_loop())
        return AssistResult(reply=json.dumps(self.song), session=Session())


SONG = {"lyrics": "fish sing loud", "vibe": "dreamy", "mood": "odd", "title": "Fish Choir"}


def test_instrumental_request():
    session = FakeSession()
    client = MusicClient("https://suno.example/", session=session)

    url = asyncio.run(client.text_to_music("ocean waves", instrumental=True))

    assert url == "https://cdn.example/track.mp3"
    req = session.requests[0]
    assert req["url"] == "https://suno.example/api/custom_generate"
    assert req["json"] == {
        "prompt": " ",
        "tags": "ocean waves",
        "title": "ocean waves",
        "make_instrumental": True,
        "wait_audio": True,
    }


def test_lyrics_request():
    session = FakeSession()
    client = MusicClient("https://suno.example", session=session)
    asyncio.run(client.text_to_music("anything", lyrics="la la la", instrumental=False))

    body = session.requests[0]["json"]
    assert (body["prompt"], body["tags"], body["title"]) == ("la la la", "anything", "anything")
    assert body["make_instrumental"] is False


def test_generated_lyrics_come_from_the_assistant():
    runner = FakeRunner(SONG)
    session = FakeSession()
    client = MusicClient("https://suno.example", runner=runner, session=session)
    asyncio.run(client.text_to_music("fish", instrumental=False))

    body = session.requests[0]["json"]
    assert (body["prompt"], body["tags"], body["title"]) == ("fish sing loud", "dreamy, odd", "Fish Choir")
    call = runner.calls[0]
    assert call["model"] == LYRICS_MODEL
    assert call["response_format"] == {"type": "json_object"}
    assert '"fish"' in call["prompt"]


def test_repeated_song_requests_share_the_callers_event_loop():
    runner = FakeRunner(SONG)
    session = FakeSession()
    client = MusicClient("https://suno.example", runner=runner, session=session)

    async def two_songs():
        first = await client.text_to_music("fish", instrumental=False)
        second = await client.text_to_music("birds", instrumental=False)
        return first, second, asyncio.get_running_loop()

    first, second, loop = asyncio.run(two_songs())

    assert first == second == "https://cdn.example/track.mp3"
    assert len(session.requests) == 2
    assert runner.loops == [loop, loop]


def test_write_file_only_warns(caplog):
    client = MusicClient("https://suno.example", session=FakeSession())
    with caplog.at_level(logging.WARNING):
        url = asyncio.run(client.text_to_music("x", write_file=True))
    assert url == "https://cdn.example/track.mp3"
    assert "not implemented" in caplog.text


def test_backend_failure_raises():
    with pytest.raises(UpstreamError):
        asyncio.run(MusicClient("https://suno.example", session=FakeSession(status_code=500)).text_to_music("x"))


def test_empty_result_raises():
    with pytest.raises(UpstreamError):
        asyncio.run(MusicClient("https://suno.example", session=FakeSession(payload=[])).text_to_music("x"))


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(decode=not_json),
        FakeSession(payload=[{"id": "abc"}]),
        FakeSession(payload={"detail": "queued"}),
        FakeSession(payload=["https://cdn.example/track.mp3"]),
    ],
)
def test_malformed_success_body_raises_upstream_error(session):
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(MusicClient("https://suno.example", session=session).text_to_music("x"))
    assert excinfo.value.status_code == 200
    assert excinfo.value.body == "<html>oops</html>"
