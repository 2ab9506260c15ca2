from __future__ import annotations

import datetime
import enum
import logging
from typing import Callable, Optional

from alternatives import machine_id
from db import (
    ProgressRepository,
    SubstitutionHistoryRepository,
    WorkoutHistoryRepository,
)
from devices import CuePlayer, Haptics, MicrophonePermission, NullVoiceCapture, VoiceCapture
from localization import Translator
from models import utcnow
from program import WORKOUT_PHASES
from progress_tracker import ProgressTracker
from settings_schema import SettingsSchema
from substitution_session import SubstitutionSession, SubstitutionState
from voice_control import CaptureError, PermissionDeniedError, VoiceController
from workout_session import SessionState, SessionStateError, WorkoutSession

logger = logging.getLogger(__name__)


class Screen(enum.Enum):
    WORKOUT = "WorkoutTracker"
    SUBSTITUTION = "AlternativeExercise"


class TrainerService:
    """Wires the sessions, the tracker and voice capture together.

    Only one session receives transcripts at a time. Opening the
    substitution flow suspends the workout session untouched, and returning
    resumes it where it was.
    """

    def __init__(
        self,
        db_path: str = "trainer.db",
        settings: SettingsSchema | None = None,
        *,
        capture: VoiceCapture | None = None,
        permission: MicrophonePermission | None = None,
        cues: CuePlayer | None = None,
        haptics: Haptics | None = None,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        self.settings = settings or SettingsSchema(db_path=db_path)
        self.translator = Translator(self.settings.language)
        self.cues = cues or CuePlayer()
        self.haptics = haptics or Haptics()
        self.clock = clock
        self.progress_repo = ProgressRepository(db_path)
        self.workout_history = WorkoutHistoryRepository(db_path)
        self.substitution_history = SubstitutionHistoryRepository(db_path)
        self.tracker = ProgressTracker(self.progress_repo, WORKOUT_PHASES, self.translator)
        self.workout = WorkoutSession(
            self.workout_history,
            self.tracker,
            WORKOUT_PHASES,
            haptics=self.haptics,
            translator=self.translator,
            alert_pattern=self.settings.rest_alert_pattern,
            auto_tick=self.settings.auto_tick,
            clock=clock,
        )
        self.substitution: Optional[SubstitutionSession] = None
        self.voice = VoiceController(
            capture or NullVoiceCapture(), permission, self.settings.locale
        )
        self.voice.subscribe(self.handle_transcript)
        self.screen = Screen.WORKOUT
        self.route_params: dict[str, str] = {}
        self.notices: list[str] = []

    def _notify(self, message: str) -> str:
        self.notices.append(message)
        return message

    def pop_notices(self) -> list[str]:
        notices, self.notices = self.notices, []
        return notices

    def reconcile_progress(self, now: datetime.datetime | None = None) -> Optional[str]:
        notice = self.tracker.reconcile(now or self.clock())
        if notice:
            self._notify(notice)
        return notice

    def start_workout(self, index: int | None = None):
        if self.screen is not Screen.WORKOUT:
            raise SessionStateError("finish the alternative exercise first")
        return self.workout.select_phase(index)

    def handle_transcript(self, text: str):
        """Route a transcript to whichever session owns the screen."""
        if self.screen is Screen.SUBSTITUTION and self.substitution is not None:
            return self.substitution.handle_transcript(text)
        return self.workout.handle_transcript(text)

    def start_recording(self) -> None:
        try:
            self.voice.start()
        except PermissionDeniedError:
            self._notify(
                self.translator.gettext("Microphone permission is required to record")
            )
            raise
        except CaptureError:
            self._notify(self.translator.gettext("Could not start voice recording"))
            raise

    def stop_recording(self) -> None:
        try:
            self.voice.stop()
        except CaptureError:
            self._notify(self.translator.gettext("Could not stop voice recording"))
            raise
        if (
            self.screen is Screen.WORKOUT
            and self.workout.state is SessionState.ACTIVE
            and self.workout.current_entries()
        ):
            self.workout.start_rest()

    def toggle_recording(self) -> bool:
        if self.voice.recording:
            self.stop_recording()
        else:
            self.start_recording()
        return self.voice.recording

    def _substitution_voice(self, enabled: bool) -> None:
        try:
            if enabled:
                self.voice.start()
            else:
                self.voice.stop()
        except (PermissionDeniedError, CaptureError) as e:
            logger.warning("voice toggle failed during substitution: %s", e)
            key = "Could not start voice recording" if enabled else "Could not stop voice recording"
            self._notify(self.translator.gettext(key))

    def machine_busy(self) -> SubstitutionSession:
        """Open the alternative-exercise flow for the current exercise."""
        exercise = self.workout.current_exercise
        if exercise is None:
            raise SessionStateError("no active exercise")
        return self.open_substitution(machine_id(exercise), exercise)

    def open_substitution(self, machine: str, machine_name: str) -> SubstitutionSession:
        if self.screen is Screen.SUBSTITUTION:
            raise SessionStateError("alternative exercise already open")
        self.voice.stop()
        self.substitution = SubstitutionSession(
            machine,
            machine_name,
            self.substitution_history,
            cues=self.cues,
            on_voice_change=self._substitution_voice,
            rest_seconds=self.settings.substitution_rest_seconds,
            auto_tick=self.settings.auto_tick,
            clock=self.clock,
        )
        self.screen = Screen.SUBSTITUTION
        self.route_params = {"machineId": machine, "machineName": machine_name}
        if self.substitution.state is SubstitutionState.EMPTY:
            self._notify(self.translator.gettext("No alternative exercises available"))
        logger.info("machine %s busy, showing alternatives", machine)
        return self.substitution

    def return_to_workout(self) -> None:
        session = self.substitution
        if session is not None:
            if session.state is SubstitutionState.COMPLETED and not session.saved:
                logger.warning("discarding unsaved log for %s", session.machine_id)
                self._notify(
                    self.translator.gettext("The unsaved exercise log was discarded")
                )
            session.timer.cancel()
            if session.voice_enabled:
                self.voice.stop()
        self.substitution = None
        self.screen = Screen.WORKOUT
        self.route_params = {}

    def close(self) -> None:
        """Release voice capture and stop any running countdown."""
        self.return_to_workout()
        self.workout.timer.cancel()
        self.voice.stop()
        self.voice.unsubscribe()
