"""Interfaces to the device collaborators.

Concrete apps subclass these; the base implementations only log, which is
what the CLI and the REST API run with.
"""
import logging

logger = logging.getLogger(__name__)

REST_ALERT_PATTERN = [500, 200, 500]


class VoiceCapture:
    """Speech capture that yields lowercase transcripts."""

    def start(self, locale: str) -> None:
        raise NotImplementedError()

    def stop(self) -> None:
        raise NotImplementedError()


class NullVoiceCapture(VoiceCapture):
    def __init__(self) -> None:
        self.started: list[str] = []
        self.stops = 0

    def start(self, locale: str) -> None:
        self.started.append(locale)

    def stop(self) -> None:
        self.stops += 1


class MicrophonePermission:
    def request(self) -> bool:
        return True


class CuePlayer:
    """Fire-and-forget audio cues."""

    def play(self, cue: str) -> None:
        logger.debug("cue %s", cue)


class Haptics:
    def vibrate(self, pattern: list[int]) -> None:
        logger.debug("vibrate %s", pattern)


def play_cue(player: CuePlayer | None, cue: str) -> None:
    """Play ``cue`` without letting a player failure reach the caller."""
    if player is None:
        return
    try:
        player.play(cue)
    except Exception as e:
        logger.warning("could not play cue %s: %s", cue, e)


def vibrate(haptics: Haptics | None, pattern: list[int]) -> None:
    if haptics is None:
        return
    try:
        haptics.vibrate(pattern)
    except Exception as e:
        logger.warning("could not vibrate: %s", e)
