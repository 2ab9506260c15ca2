import logging
from typing import Callable, Optional

from devices import MicrophonePermission, VoiceCapture

logger = logging.getLogger(__name__)

TranscriptHandler = Callable[[str], object]


class PermissionDeniedError(RuntimeError):
    """Microphone access was refused."""


class CaptureError(RuntimeError):
    """Voice capture could not be started or stopped."""


class VoiceController:
    """Owns the single capture session and its single transcript handler.

    Subscribing replaces the previous handler instead of adding a second
    one, and a running capture is always stopped before a new one starts.
    """

    def __init__(
        self,
        capture: VoiceCapture,
        permission: MicrophonePermission | None = None,
        locale: str = "es-ES",
    ) -> None:
        self.capture = capture
        self.permission = permission or MicrophonePermission()
        self.locale = locale
        self.recording = False
        self.last_transcript = ""
        self._handler: Optional[TranscriptHandler] = None

    @property
    def handler(self) -> Optional[TranscriptHandler]:
        return self._handler

    def subscribe(self, handler: TranscriptHandler) -> None:
        self._handler = handler

    def unsubscribe(self) -> None:
        self._handler = None

    def start(self) -> None:
        if not self.permission.request():
            raise PermissionDeniedError("microphone permission denied")
        if self.recording:
            self.stop()
        self.recording = True
        try:
            self.capture.start(self.locale)
        except Exception as e:
            self.recording = False
            raise CaptureError(str(e)) from e
        logger.info("voice capture started (%s)", self.locale)

    def stop(self) -> None:
        if not self.recording:
            return
        self.recording = False
        try:
            self.capture.stop()
        except Exception as e:
            raise CaptureError(str(e)) from e
        logger.info("voice capture stopped")

    def toggle(self) -> bool:
        if self.recording:
            self.stop()
        else:
            self.start()
        return self.recording

    def deliver(self, text: str):
        """Forward a transcript to the subscribed handler."""
        text = text.lower().strip()
        if not text:
            return None
        self.last_transcript = text
        logger.debug("heard %r", text)
        if self._handler is None:
            return None
        return self._handler(text)

    def deliver_error(self, reason: str) -> None:
        logger.warning("speech recognition error: %s", reason)
