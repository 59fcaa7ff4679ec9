import asyncio
import logging
from typing import Callable, Optional, Protocol

from interview_sim.timings import DEFAULT_TIMINGS, SessionTimings

logger = logging.getLogger("speech_capture")

FragmentSink = Callable[[str, bool], None]


class TranscriptListener(Protocol):
    def on_fragment(self, text: str, is_final: bool) -> None:
        ...

    def on_end(self) -> None:
        ...

    def on_error(self, error: Exception) -> None:
        ...


class SpeechToTextProvider(Protocol):
    """Push-based recognizer; callbacks may fire on any thread."""

    def start(self, listener: TranscriptListener) -> None:
        ...

    def stop(self) -> None:
        ...


class SpeechCapture:
    """
    Wraps a push-based speech provider for one session.

    Provider callbacks are marshalled onto the event loop. When the
    provider ends or errors on its own, capture is restarted after a short
    delay, unless it was stopped on purpose or shutdown has begun.
    """

    def __init__(
        self,
        provider: SpeechToTextProvider,
        sink: FragmentSink,
        timings: SessionTimings = DEFAULT_TIMINGS,
        session_id: str = "",
    ):
        self.provider = provider
        self.sink = sink
        self.timings = timings
        self.session_id = session_id
        self.listening = False
        self.wanted = False
        self.shutting_down = False
        self.restarts = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._restart_handle: Optional[asyncio.TimerHandle] = None

    def start(self) -> bool:
        if self.shutting_down:
            return False
        self.wanted = True
        if self.listening:
            return True
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        try:
            self.provider.start(self)
        except Exception as exc:
            logger.error(f"[SPEECH {self.session_id}] failed to start recognition: {exc}")
            return False
        self.listening = True
        logger.info(f"[SPEECH {self.session_id}] recognition started")
        return True

    def stop(self) -> None:
        self.wanted = False
        self._cancel_restart()
        if not self.listening:
            return
        self.listening = False
        try:
            self.provider.stop()
        except Exception as exc:
            logger.warning(f"[SPEECH {self.session_id}] provider stop failed: {exc}")
        logger.info(f"[SPEECH {self.session_id}] recognition stopped")

    def shutdown(self) -> None:
        self.shutting_down = True
        self.stop()

    # provider callbacks

    def on_fragment(self, text: str, is_final: bool) -> None:
        self._dispatch(self._deliver, str(text or ""), bool(is_final))

    def on_end(self) -> None:
        self._dispatch(self._handle_end)

    def on_error(self, error: Exception) -> None:
        self._dispatch(self._handle_error, error)

    def _dispatch(self, callback, *args) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(callback, *args)

    def _deliver(self, text: str, is_final: bool) -> None:
        if self.shutting_down or not text:
            return
        self.sink(text, is_final)

    def _handle_end(self) -> None:
        self.listening = False
        logger.info(f"[SPEECH {self.session_id}] recognition ended")
        self._schedule_restart(self.timings.speech_restart_after_end_sec)

    def _handle_error(self, error: Exception) -> None:
        self.listening = False
        logger.error(f"[SPEECH {self.session_id}] recognition error: {error}")
        self._schedule_restart(self.timings.speech_restart_after_error_sec)

    def _schedule_restart(self, delay: float) -> None:
        if self.shutting_down or not self.wanted or self._loop is None:
            return
        self._cancel_restart()
        self._restart_handle = self._loop.call_later(delay, self._restart)

    def _restart(self) -> None:
        self._restart_handle = None
        if self.shutting_down or not self.wanted or self.listening:
            return
        if self.start():
            self.restarts += 1
            logger.info(f"[SPEECH {self.session_id}] auto-restarted recognition")

    def _cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None
