from __future__ import annotations

import datetime
import enum
import logging
from typing import Callable, Optional, Sequence

from db import StorageError, WorkoutHistoryRepository
from devices import REST_ALERT_PATTERN, Haptics, vibrate
from localization import Translator, translator as default_translator
from models import SavedWorkout, WorkoutEntry, utcnow
from program import WORKOUT_PHASES, WorkoutPhase
from progress_tracker import ProgressTracker
from rest_timer import RestTimer
from transcript_parser import (
    Action,
    ControlIntent,
    Direction,
    Intent,
    NavigationIntent,
    QuantityIntent,
    build_entry,
    parse_workout_utterance,
)

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class SessionStateError(RuntimeError):
    """Raised when an operation is not valid in the current state."""


class SessionBusyError(SessionStateError):
    """Raised while a completion is being persisted."""


def format_series(entries: Sequence[WorkoutEntry], field: str) -> str:
    """Join one field of ``entries`` as ``"12-10-8"``."""
    if not entries:
        return "N/A"
    return "-".join(getattr(e, field) or "-" for e in entries)


class WorkoutSession:
    """State of one workout: phase, exercise pointer and the log in progress."""

    def __init__(
        self,
        history: WorkoutHistoryRepository,
        tracker: ProgressTracker,
        phases: Sequence[WorkoutPhase] = WORKOUT_PHASES,
        *,
        haptics: Haptics | None = None,
        translator: Translator | None = None,
        alert_pattern: list[int] | None = None,
        auto_tick: bool = False,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        self.history = history
        self.tracker = tracker
        self.phases = phases
        self.haptics = haptics
        self.translator = translator or default_translator
        self.alert_pattern = alert_pattern or REST_ALERT_PATTERN
        self.clock = clock
        self.timer = RestTimer(on_expire=self._rest_expired, auto_tick=auto_tick)
        self._phase_index: Optional[int] = None
        self._exercise_index = 0
        self._log: list[WorkoutEntry] = []
        self._history: Optional[list[SavedWorkout]] = None
        self._saving = False
        self._appended: Optional[SavedWorkout] = None

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self._phase_index is None else SessionState.ACTIVE

    @property
    def phase(self) -> Optional[WorkoutPhase]:
        if self._phase_index is None:
            return None
        return self.phases[self._phase_index]

    @property
    def phase_index(self) -> Optional[int]:
        return self._phase_index

    @property
    def exercise_index(self) -> int:
        return self._exercise_index

    @property
    def current_exercise(self) -> Optional[str]:
        phase = self.phase
        if phase is None:
            return None
        return phase.exercises[self._exercise_index]

    @property
    def is_last_exercise(self) -> bool:
        phase = self.phase
        return phase is not None and self._exercise_index == len(phase.exercises) - 1

    @property
    def log(self) -> tuple[WorkoutEntry, ...]:
        return tuple(self._log)

    def _check_mutable(self) -> None:
        if self._saving:
            raise SessionBusyError("workout is being saved")
        if self._appended is not None:
            # history already holds this workout; only the completion retry is left
            raise SessionBusyError("workout saved, retry completing it")

    def _require_active(self) -> WorkoutPhase:
        phase = self.phase
        if phase is None:
            raise SessionStateError("no active phase")
        return phase

    def select_phase(self, index: int | None = None) -> WorkoutPhase:
        """Start a workout of phase ``index`` or the recommended phase."""
        self._check_mutable()
        if index is None:
            index = self.tracker.current_phase_index
        index = max(0, min(index, len(self.phases) - 1))
        self.timer.cancel()
        self._phase_index = index
        self._exercise_index = 0
        self._log = []
        self._appended = None
        logger.info("workout started: %s", self.phases[index].name)
        return self.phases[index]

    def record_intent(
        self, intent: Intent, exercise: str | None = None
    ) -> Optional[WorkoutEntry]:
        """Append a log entry for a quantity intent; other intents are ignored."""
        self._check_mutable()
        if not isinstance(intent, QuantityIntent):
            return None
        if exercise is None:
            self._require_active()
            exercise = self.current_exercise
        entry = build_entry(intent, exercise, self.clock())
        self._log.append(entry)
        logger.debug("logged %s reps=%s weight=%s", exercise, entry.reps, entry.weight)
        return entry

    def handle_transcript(self, text: str) -> Optional[Intent]:
        """Parse ``text`` and apply the resulting intent, if any."""
        if self.state is SessionState.IDLE:
            return None
        intent = parse_workout_utterance(text)
        if intent is None:
            return None
        if isinstance(intent, QuantityIntent):
            self.record_intent(intent)
        elif isinstance(intent, ControlIntent) and intent.action is Action.FINISH_EXERCISE:
            self.advance()
        elif isinstance(intent, NavigationIntent) and intent.direction is Direction.PREVIOUS:
            self.retreat()
        return intent

    def advance(self) -> Optional[SavedWorkout]:
        """Move to the next exercise, completing the workout after the last."""
        if self._appended is not None:
            return self.complete_session()
        self._check_mutable()
        phase = self._require_active()
        if self._exercise_index < len(phase.exercises) - 1:
            self._exercise_index += 1
            return None
        return self.complete_session()

    def retreat(self) -> Optional[str]:
        """Move back one exercise; returns a notice at the first one."""
        self._check_mutable()
        self._require_active()
        if self._exercise_index > 0:
            self._exercise_index -= 1
            return None
        return self.translator.gettext("Already at the first exercise")

    def delete_entry(self, index: int) -> WorkoutEntry:
        self._check_mutable()
        if not 0 <= index < len(self._log):
            raise IndexError(f"no log entry at {index}")
        return self._log.pop(index)

    def complete_session(self) -> SavedWorkout:
        """Persist the workout and return to idle.

        On a storage failure the session keeps its phase and log so the
        caller can retry; the error propagates.
        """
        if self._saving:
            raise SessionBusyError("workout is being saved")
        phase = self._require_active()
        self._saving = True
        try:
            now = self.clock()
            workout = self._appended
            if workout is None:
                workout = SavedWorkout(date=now, phase=phase.name, log=tuple(self._log))
                self.history.append(workout)
                self._appended = workout
            self.tracker.record_workout(now)
        except StorageError as e:
            logger.error("could not save workout: %s", e)
            raise
        finally:
            self._saving = False
        if self._history is not None:
            self._history.append(workout)
        self.timer.cancel()
        self._phase_index = None
        self._exercise_index = 0
        self._log = []
        self._appended = None
        logger.info("workout saved with %d entries", len(workout.log))
        return workout

    def set_numbers(self) -> list[int]:
        """1-based set number of each log entry within its exercise."""
        seen: dict[str, int] = {}
        numbers = []
        for entry in self._log:
            seen[entry.exercise] = seen.get(entry.exercise, 0) + 1
            numbers.append(seen[entry.exercise])
        return numbers

    def current_entries(self) -> list[WorkoutEntry]:
        exercise = self.current_exercise
        return [e for e in self._log if e.exercise == exercise]

    def set_count(self) -> int:
        return len(self.current_entries())

    def _saved_workouts(self) -> list[SavedWorkout]:
        if self._history is None:
            try:
                self._history = self.history.fetch_all_records()
            except StorageError as e:
                logger.warning("could not load workout history: %s", e)
                return []
        return self._history

    def previous_entries(self, exercise: str | None = None) -> list[WorkoutEntry]:
        """Entries for ``exercise`` from the latest workout that included it."""
        exercise = exercise or self.current_exercise
        if exercise is None:
            return []
        workouts = sorted(self._saved_workouts(), key=lambda w: w.date, reverse=True)
        for workout in workouts:
            entries = workout.entries_for(exercise)
            if entries:
                return entries
        return []

    def start_rest(self) -> int:
        phase = self._require_active()
        seconds = phase.rest_seconds
        self.timer.start(seconds)
        return seconds

    def stop_rest(self) -> None:
        self.timer.cancel()

    def _rest_expired(self) -> None:
        if self.state is not SessionState.ACTIVE:
            return
        vibrate(self.haptics, self.alert_pattern)

    def summary(self) -> dict:
        phase = self.phase
        if phase is None:
            return {"state": self.state.value}
        current = self.current_entries()
        previous = self.previous_entries()
        return {
            "state": self.state.value,
            "phase": phase.to_dict(),
            "phaseIndex": self._phase_index,
            "exercise": self.current_exercise,
            "exerciseIndex": self._exercise_index,
            "exerciseCount": len(phase.exercises),
            "log": [
                dict(e.to_json(), set=n)
                for e, n in zip(self._log, self.set_numbers())
            ],
            "today": {
                "reps": format_series(current, "reps"),
                "weight": format_series(current, "weight"),
                "sets": len(current),
            },
            "previous": {
                "reps": format_series(previous, "reps"),
                "weight": format_series(previous, "weight"),
                "date": previous[0].timestamp.isoformat() if previous else None,
            },
            "rest": {
                "active": self.timer.active,
                "remaining": self.timer.remaining,
            },
        }
