# compass/services/speech.py
# Best-effort narration through the ElevenLabs text-to-speech streaming API.
# Date: 2026-10-19
# Version: 0.1.0

import asyncio
from pathlib import Path
from typing import Optional, Protocol, Set
from uuid import uuid4
import httpx
from compass.core.config import Settings
from compass.utils.logger import console


class AudioSink(Protocol):
    """Receives the synthesized audio stream chunk by chunk."""

    async def write(self, chunk: bytes) -> None: ...

    async def close(self) -> None: ...


class FileAudioSink:
    """Writes one narration to an .mp3 file."""

    def __init__(self, path: Path):
        self.path = path
        self._buffer = bytearray()

    async def write(self, chunk: bytes) -> None:
        self._buffer.extend(chunk)

    async def close(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(self.path.write_bytes, bytes(self._buffer))
        console.info(f"Narration saved to '{self.path}'.")


class SpeechClient:
    """
    Streams speech for a text into an AudioSink. Without an API key `speak`
    logs a warning and returns.
    """
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self._api_key = settings.ELEVENLABS_API_KEY
        self._base_url = settings.ELEVENLABS_BASE_URL.rstrip("/")
        self._model_id = settings.ELEVENLABS_MODEL_ID
        self._max_retries = settings.ELEVENLABS_MAX_RETRIES
        self._timeout = settings.ELEVENLABS_TIMEOUT_SECONDS
        self._narration_dir = Path(settings.NARRATION_DIR)
        self._http_client = http_client
        if not self._api_key:
            console.warning("Missing ELEVENLABS_API_KEY. Text-to-speech will be disabled.")

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def default_sink(self) -> FileAudioSink:
        return FileAudioSink(self._narration_dir / f"narration-{uuid4().hex[:12]}.mp3")

    async def _stream_once(self, client: httpx.AsyncClient, voice_id: str, text: str, sink: AudioSink):
        url = f"{self._base_url}/v1/text-to-speech/{voice_id}/stream"
        headers = {"xi-api-key": self._api_key, "accept": "audio/mpeg"}
        payload = {"text": text, "model_id": self._model_id}
        async with client.stream("POST", url, json=payload, headers=headers, timeout=self._timeout) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                await sink.write(chunk)

    async def speak(self, voice_id: str, text: str, sink: Optional[AudioSink] = None) -> None:
        """
        Synthesizes `text` and streams it into `sink`. Transport errors and
        5xx responses are retried up to the configured count.
        """
        if not self.enabled:
            console.warning("Cannot speak: ElevenLabs API key not configured.")
            return

        sink = sink or self.default_sink()
        client = self._http_client or httpx.AsyncClient()
        try:
            attempt = 0
            while True:
                try:
                    await self._stream_once(client, voice_id, text, sink)
                    break
                except (httpx.TransportError, httpx.HTTPStatusError) as e:
                    retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500
                    if not retryable or attempt >= self._max_retries:
                        raise
                    attempt += 1
                    console.warning(f"Text-to-speech attempt {attempt} failed ({e}). Retrying...")
                    await asyncio.sleep(0.5 * 2 ** (attempt - 1))
            await sink.close()
        finally:
            if self._http_client is None:
                await client.aclose()


class Narrator:
    """
    Fire-and-forget narration of finished study plans. Failures are logged and
    never reach the chat.
    """
    def __init__(self, speech: SpeechClient, voice_id: str):
        self._speech = speech
        self._voice_id = voice_id
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _narrate(self, text: str):
        try:
            console.info("Speaking career plan...")
            await self._speech.speak(self._voice_id, text)
        except Exception as e:
            console.error(f"Error speaking career plan: {e}")

    def narrate_plan(self, text: str, career: Optional[str] = None) -> Optional[asyncio.Task]:
        if not self._speech.enabled:
            return None
        speaking_text = f"I've generated a complete study plan for {career}. {text}" if career else text
        task = asyncio.create_task(self._narrate(speaking_text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self):
        """Waits for in-flight narrations; used at shutdown."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
