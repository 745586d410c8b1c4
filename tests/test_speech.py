"""
Tests for text-to-speech streaming with retry, and fire-and-forget narration.
"""

import httpx
import pytest

from compass.services.speech import Narrator, SpeechClient

from conftest import make_settings, run


class CollectingSink:
    def __init__(self):
        self.chunks = []
        self.closed = False

    async def write(self, chunk):
        self.chunks.append(chunk)

    async def close(self):
        self.closed = True


def scripted_client(statuses, requests):
    def handler(request):
        requests.append(request)
        status = statuses.pop(0)
        return httpx.Response(status, content=b"mp3-bytes" if status == 200 else b"error")
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_speak_streams_audio_into_sink():
    requests = []

    async def scenario():
        async with scripted_client([200], requests) as http_client:
            speech = SpeechClient(make_settings(ELEVENLABS_API_KEY="xi-test"), http_client=http_client)
            sink = CollectingSink()
            await speech.speak("voice-1", "Hello student", sink)
            return sink

    sink = run(scenario())

    assert b"".join(sink.chunks) == b"mp3-bytes"
    assert sink.closed
    request = requests[0]
    assert request.url.path == "/v1/text-to-speech/voice-1/stream"
    assert request.headers["xi-api-key"] == "xi-test"


def test_server_errors_are_retried():
    requests = []

    async def scenario():
        async with scripted_client([503, 200], requests) as http_client:
            speech = SpeechClient(make_settings(ELEVENLABS_API_KEY="xi-test"), http_client=http_client)
            sink = CollectingSink()
            await speech.speak("voice-1", "Hello", sink)
            return sink

    sink = run(scenario())

    assert len(requests) == 2
    assert b"".join(sink.chunks) == b"mp3-bytes"


def test_client_errors_are_not_retried():
    requests = []

    async def scenario():
        async with scripted_client([401], requests) as http_client:
            speech = SpeechClient(make_settings(ELEVENLABS_API_KEY="bad-key"), http_client=http_client)
            await speech.speak("voice-1", "Hello", CollectingSink())

    with pytest.raises(httpx.HTTPStatusError):
        run(scenario())
    assert len(requests) == 1


def test_narration_is_skipped_without_key():
    narrator = Narrator(SpeechClient(make_settings()), voice_id="voice-1")
    assert narrator.narrate_plan("plan text", "Nursing") is None
    assert narrator.pending == 0


def test_narration_failures_are_swallowed():
    requests = []

    async def scenario():
        async with scripted_client([401], requests) as http_client:
            speech = SpeechClient(make_settings(ELEVENLABS_API_KEY="bad-key"), http_client=http_client)
            narrator = Narrator(speech, voice_id="voice-1")
            task = narrator.narrate_plan("Your plan has four terms.", "Nursing")
            await narrator.drain()
            return task

    task = run(scenario())

    assert task.done() and task.exception() is None
    assert b"complete study plan for Nursing" in requests[0].content
