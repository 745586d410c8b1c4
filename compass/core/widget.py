# compass/core/widget.py
# The chat widget controller: UI state, message sending with a watchdog, and PDF export.
# Date: 2026-10-19
# Version: 0.1.0

import asyncio
from typing import TYPE_CHECKING, Optional, Set
from uuid import uuid4
from compass.core.conversation import ConversationSession
from compass.core.dispatcher import ToolDispatcher, display_text
from compass.core.errors import RenderError, SetupError
from compass.models.common import ChatMessage, MessageKind, Role, WidgetState
from compass.services.document_renderer import ExportedDocument
from compass.tools.pdf_export_tool import NO_DOCUMENT_ERROR
from compass.utils.logger import console

if TYPE_CHECKING:
    from compass.core.container import CompassServices

INITIALIZING_MESSAGE = "Please wait while I initialize..."
CONNECTIVITY_MESSAGE = "Sorry, I'm having trouble connecting right now. Please check your API key configuration."
TIMEOUT_MESSAGE = "Sorry, the request is taking too long. Please try again."
GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."
EMPTY_REPLY_MESSAGE = "I received your message but didn't get a response. Please try again."

CAREER_PROMPT = (
    "I'm interested in pursuing a career in {career} at {institution}. Please generate a complete 2-year "
    "Associate degree study plan starting in Fall 2025. I'd like to take 4 courses per term. After generating "
    "the plan, please offer to create a PDF document of the complete course plan."
)

INIT_ATTEMPTS = 2


class Exchange:
    """
    One send and everything it triggers. Once the watchdog gives up on an
    exchange its later output is dropped.
    """
    def __init__(self, widget: "WidgetController"):
        self._widget = widget
        self.state = widget.state
        self.timed_out = False

    def add_bot_message(self, content: str, kind: MessageKind = "text") -> None:
        if self.timed_out:
            console.warning("Dropping output of an exchange that already timed out.")
            return
        self._widget.add_message("bot", content, kind=kind)


class WidgetController:
    """
    Owns the widget state. Open/closed and loading are independent; a message
    can only be sent while not loading, and every exchange that sets loading
    clears it again, either when it finishes or when the watchdog fires.
    """
    def __init__(self, services: "CompassServices", session_id: Optional[str] = None):
        self.services = services
        self.state = WidgetState(session_id=session_id or str(uuid4()))
        self.session: Optional[ConversationSession] = None
        self.dispatcher: Optional[ToolDispatcher] = None
        self._send_timeout = services.settings.SEND_TIMEOUT_SECONDS
        self._init_retry_delay = services.settings.INIT_RETRY_DELAY_SECONDS
        self._current: Optional[Exchange] = None
        self._late_exchanges: Set[asyncio.Task] = set()

    @property
    def session_id(self) -> str:
        return self.state.session_id

    # --- open / close ---

    def open(self):
        if self.state.is_open:
            return
        self.state.is_open = True
        console.info(f"Chat opened for session '{self.session_id}'.")

    def close(self):
        if not self.state.is_open:
            return
        self.state.is_open = False
        console.info(f"Chat closed for session '{self.session_id}'.")

    def toggle(self):
        if self.state.is_open:
            self.close()
        else:
            self.open()

    # --- transcript ---

    def add_message(self, role: Role, content: str, kind: MessageKind = "text") -> ChatMessage:
        message = ChatMessage(role=role, content=content, kind=kind)
        self.state.messages.append(message)
        return message

    def _set_loading(self, loading: bool):
        self.state.is_loading = loading

    # --- initialization ---

    def initialize(self) -> bool:
        """Creates the conversation; returns False when the backend is not configured."""
        try:
            self.session = self.services.new_session()
            self.dispatcher = self.services.new_dispatcher(self.session)
            console.success(f"AI chat initialized for session '{self.session_id}'.")
            return True
        except SetupError as e:
            console.error(f"Failed to initialize AI chat: {e}")
            self.session = None
            self.dispatcher = None
            return False

    def start(self):
        if not self.initialize():
            self.add_message("bot", CONNECTIVITY_MESSAGE)

    async def _ensure_session(self) -> bool:
        if self.session is not None:
            return True

        self.add_message("bot", INITIALIZING_MESSAGE, kind="notice")
        for attempt in range(INIT_ATTEMPTS):
            if self.initialize():
                return True
            if attempt + 1 < INIT_ATTEMPTS:
                await asyncio.sleep(self._init_retry_delay)
        self.add_message("bot", CONNECTIVITY_MESSAGE)
        return False

    # --- sending ---

    async def send_message(self, text: str) -> bool:
        """
        Sends one user message and waits for the exchange, at most the watchdog
        timeout. Returns False when nothing was sent.
        """
        message = (text or "").strip()
        if not message or self.state.is_loading:
            return False

        self._set_loading(True)
        ready = False
        try:
            ready = await self._ensure_session()
        finally:
            if not ready:
                self._set_loading(False)
        if not ready:
            return False

        self.add_message("user", message)
        exchange = Exchange(self)
        self._current = exchange
        task = asyncio.create_task(self._run_exchange(exchange, message))

        done, _ = await asyncio.wait({task}, timeout=self._send_timeout)
        if task in done:
            return True

        # The remote call keeps running; only the local wait ends here.
        exchange.timed_out = True
        console.error(f"Request timeout after {self._send_timeout}s - clearing loading state.")
        self._set_loading(False)
        self.add_message("bot", TIMEOUT_MESSAGE)
        self._late_exchanges.add(task)
        task.add_done_callback(self._late_exchanges.discard)
        return True

    async def _run_exchange(self, exchange: Exchange, message: str):
        try:
            response = await self.session.send(message)
            if response.has_function_calls:
                await self.dispatcher.dispatch(response.function_calls, exchange)
            elif response.text:
                exchange.add_bot_message(display_text(response))
            else:
                console.warning("No text or function calls in response.")
                exchange.add_bot_message(EMPTY_REPLY_MESSAGE)
        except Exception as e:
            console.exception(f"Error sending message: {e}")
            exchange.add_bot_message(GENERIC_ERROR_MESSAGE)
        finally:
            if exchange.timed_out:
                console.warning("A timed-out exchange finished late; its output was discarded.")
            elif exchange is self._current:
                self._set_loading(False)

    async def open_with_career(self, career: str) -> bool:
        """Opens the widget and asks for a study plan for the given career."""
        self.open()
        prompt = CAREER_PROMPT.format(career=career, institution=self.services.settings.HOME_INSTITUTION)
        return await self.send_message(prompt)

    # --- document ---

    def timeline_html(self) -> Optional[str]:
        document = self.state.current_document
        if document is None:
            return None
        return self.services.renderer.render(document).to_html()

    async def export_current_document(self) -> Optional[ExportedDocument]:
        """
        User-initiated export. A failure leaves export_status at 'failed' so
        the export control can offer a retry.
        """
        document = self.state.current_document
        if document is None:
            self.add_message("bot", NO_DOCUMENT_ERROR, kind="notice")
            return None

        self.state.export_status = "exporting"
        try:
            exported = await self.services.exporter.export(document, self.session_id)
        except RenderError as e:
            console.error(f"PDF export failed: {e}")
            self.state.export_status = "failed"
            self.add_message("bot", f"Sorry, I couldn't create the PDF. {e} Please try again.", kind="notice")
            return None

        self.state.export_status = "ready"
        self.state.last_export_filename = exported.filename
        self.add_message("bot", f"Your study plan '{exported.filename}' is ready to download.", kind="notice")
        return exported
