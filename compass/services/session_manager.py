# This module keeps the live chat widgets and persists transcript snapshots in Redis.
# Date: 2026-10-19
# Version: 0.3.0

import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional
from pydantic import BaseModel, Field
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from compass.core.widget import WidgetController
from compass.models.common import ChatMessage
from compass.utils.logger import console

if TYPE_CHECKING:
    from compass.core.container import CompassServices


class TranscriptSnapshot(BaseModel):
    session_id: str
    messages: List[ChatMessage] = Field(default_factory=list)
    current_career: Optional[str] = None


class SessionManager:
    """
    Live widgets are kept in memory: each owns a conversation handle that
    cannot be serialized. A widget unused for SESSION_TTL_SECONDS is evicted,
    the same lifetime its Redis transcript snapshot gets, so the transcript
    can still be read back after the widget is gone.
    """
    _session_ttl: int

    def __init__(self, services: "CompassServices", redis_client: Optional[Redis] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._services = services
        self._widgets: Dict[str, WidgetController] = {}
        self._last_used: Dict[str, float] = {}
        self._clock = clock
        self._session_ttl = services.settings.SESSION_TTL_SECONDS
        self._redis_client = redis_client
        if self._redis_client is None and services.settings.REDIS_URL:
            self._redis_client = from_url(services.settings.REDIS_URL, decode_responses=True)
            console.info("Async Redis client for transcript snapshots initialized.")
        if self._redis_client is None:
            console.warning("REDIS_URL is not set. Transcripts will not be archived.")

    @property
    def active_count(self) -> int:
        return len(self._widgets)

    def _touch(self, session_id: str):
        self._last_used[session_id] = self._clock()

    def evict_idle(self) -> List[str]:
        """Drops widgets idle for longer than the session TTL; a widget mid-exchange is kept."""
        cutoff = self._clock() - self._session_ttl
        expired = [
            session_id for session_id, last_used in self._last_used.items()
            if last_used < cutoff and not self._widgets[session_id].state.is_loading
        ]
        for session_id in expired:
            self.drop_widget(session_id)
        if expired:
            console.info(f"Evicted {len(expired)} idle widget session(s).")
        return expired

    def create_widget(self) -> WidgetController:
        self.evict_idle()
        widget = WidgetController(self._services)
        widget.start()
        self._widgets[widget.session_id] = widget
        self._touch(widget.session_id)
        console.info(f"New widget session created: {widget.session_id}")
        return widget

    def get_widget(self, session_id: str) -> Optional[WidgetController]:
        self.evict_idle()
        widget = self._widgets.get(session_id)
        if widget is not None:
            self._touch(session_id)
        return widget

    def drop_widget(self, session_id: str) -> bool:
        self._last_used.pop(session_id, None)
        return self._widgets.pop(session_id, None) is not None

    @staticmethod
    def _key(session_id: str) -> str:
        return f"compass:transcript:{session_id}"

    async def save_transcript(self, widget: WidgetController):
        """Saves a snapshot of the widget transcript. Failures are logged only."""
        if self._redis_client is None:
            return
        document = widget.state.current_document
        snapshot = TranscriptSnapshot(
            session_id=widget.session_id,
            messages=widget.state.messages,
            current_career=document.career if document else None,
        )
        try:
            await self._redis_client.set(self._key(widget.session_id), snapshot.model_dump_json(), ex=self._session_ttl)
            console.info(f"Transcript for session '{widget.session_id}' saved to Redis.")
        except RedisError:
            console.exception(f"Failed to save transcript for session '{widget.session_id}' to Redis.")

    async def get_transcript(self, session_id: str) -> Optional[TranscriptSnapshot]:
        """Live transcript when the widget exists, otherwise the archived snapshot."""
        widget = self.get_widget(session_id)
        if widget is not None:
            document = widget.state.current_document
            return TranscriptSnapshot(
                session_id=session_id,
                messages=list(widget.state.messages),
                current_career=document.career if document else None,
            )
        if self._redis_client is None:
            return None
        try:
            snapshot_json = await self._redis_client.get(self._key(session_id))
        except RedisError:
            console.exception(f"Could not read transcript for session '{session_id}' from Redis.")
            return None
        if not snapshot_json:
            return None
        return TranscriptSnapshot.model_validate_json(snapshot_json)

    async def close(self):
        if self._redis_client is not None:
            await self._redis_client.aclose()
