"""Alternative-exercise flow for when a machine is busy.

The session starts by browsing a wrap-around carousel of alternatives for
the machine. Accepting one switches to counting repetitions by voice, with
a rest countdown between series. Finishing the exercise stores a
:class:`~models.SubstitutionLog`.
"""
from __future__ import annotations

import datetime
import enum
import logging
from typing import Callable, Optional

from alternatives import AlternativeExercise, alternatives_for
from db import StorageError, SubstitutionHistoryRepository
from devices import CuePlayer, play_cue
from models import SubstitutionLog, utcnow
from program import DEFAULT_REST_SECONDS
from rest_timer import RestTimer
from transcript_parser import (
    Action,
    ControlIntent,
    Direction,
    Intent,
    NavigationIntent,
    parse_control,
    parse_navigation,
)
from workout_session import SessionBusyError, SessionStateError

logger = logging.getLogger(__name__)

CUE_REP = "beep"
CUE_SERIES_COMPLETED = "serieCompleted"
CUE_EXERCISE_COMPLETED = "exerciseCompleted"


class SubstitutionState(enum.Enum):
    EMPTY = "empty"
    BROWSING = "browsing"
    ACTIVE = "active"
    RESTING = "resting"
    COMPLETED = "completed"


class SubstitutionSession:
    def __init__(
        self,
        machine_id: str,
        machine_name: str,
        repo: SubstitutionHistoryRepository,
        *,
        cues: CuePlayer | None = None,
        on_voice_change: Callable[[bool], None] | None = None,
        rest_seconds: int = DEFAULT_REST_SECONDS,
        auto_tick: bool = False,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        if not machine_id:
            raise ValueError("machine id required")
        self.machine_id = machine_id
        self.machine_name = machine_name
        self.repo = repo
        self.cues = cues
        self.on_voice_change = on_voice_change
        self.rest_seconds = rest_seconds
        self.clock = clock
        self.timer = RestTimer(on_expire=self._rest_expired, auto_tick=auto_tick)
        self.candidates: list[AlternativeExercise] = alternatives_for(machine_id)
        self.state = (
            SubstitutionState.BROWSING if self.candidates else SubstitutionState.EMPTY
        )
        self.index = 0
        self.exercise: Optional[AlternativeExercise] = None
        self.reps = 0
        self.series = 1
        self.awaiting_series_confirmation = False
        self.voice_enabled = False
        self.pending_log: Optional[SubstitutionLog] = None
        self.saved = False
        self._saving = False

    @property
    def current_candidate(self) -> Optional[AlternativeExercise]:
        if not self.candidates:
            return None
        return self.candidates[self.index]

    def _set_voice(self, enabled: bool) -> None:
        if self.voice_enabled == enabled:
            return
        self.voice_enabled = enabled
        if self.on_voice_change is not None:
            self.on_voice_change(enabled)

    def _expect(self, *states: SubstitutionState) -> None:
        if self._saving:
            raise SessionBusyError("exercise log is being saved")
        if self.state not in states:
            raise SessionStateError(f"not allowed while {self.state.value}")

    def next(self) -> AlternativeExercise:
        self._expect(SubstitutionState.BROWSING)
        self.index = (self.index + 1) % len(self.candidates)
        return self.candidates[self.index]

    def previous(self) -> AlternativeExercise:
        self._expect(SubstitutionState.BROWSING)
        self.index = (self.index - 1) % len(self.candidates)
        return self.candidates[self.index]

    def accept(self) -> AlternativeExercise:
        self._expect(SubstitutionState.BROWSING)
        self.exercise = self.candidates[self.index]
        self.reps = 0
        self.series = 1
        self.awaiting_series_confirmation = False
        self.state = SubstitutionState.ACTIVE
        self._set_voice(True)
        logger.info("substituting %s with %s", self.machine_name, self.exercise.name)
        return self.exercise

    def rep_done(self) -> int:
        self._expect(SubstitutionState.ACTIVE)
        self.reps += 1
        play_cue(self.cues, CUE_REP)
        if self.reps >= self.exercise.repetitions and not self.awaiting_series_confirmation:
            self.awaiting_series_confirmation = True
            play_cue(self.cues, CUE_SERIES_COMPLETED)
        return self.reps

    def finish_series(self) -> SubstitutionState:
        """Close the current series: rest before the next one, or complete."""
        self._expect(SubstitutionState.ACTIVE)
        self.awaiting_series_confirmation = False
        if self.series < self.exercise.series:
            self.series += 1
            self.reps = 0
            self.state = SubstitutionState.RESTING
            self._set_voice(False)
            self.timer.start(self.rest_seconds)
        else:
            self.finish_exercise()
        return self.state

    def skip_rest(self) -> None:
        self._expect(SubstitutionState.RESTING)
        self.timer.cancel()
        self._end_rest()

    def _end_rest(self) -> None:
        self.state = SubstitutionState.ACTIVE
        self._set_voice(True)

    def _rest_expired(self) -> None:
        if self.state is not SubstitutionState.RESTING:
            return
        self._end_rest()

    def finish_exercise(self) -> SubstitutionLog:
        """Complete the exercise and store its log.

        A storage failure propagates; the log is kept in ``pending_log`` and
        :meth:`retry_save` stores it again.
        """
        self._expect(
            SubstitutionState.ACTIVE, SubstitutionState.RESTING
        )
        self.timer.cancel()
        self._set_voice(False)
        self.state = SubstitutionState.COMPLETED
        play_cue(self.cues, CUE_EXERCISE_COMPLETED)
        now = self.clock()
        self.pending_log = SubstitutionLog(
            id=str(int(now.timestamp() * 1000)),
            exercise_id=self.exercise.id,
            exercise_name=self.exercise.name,
            original_machine_id=self.machine_id,
            original_machine_name=self.machine_name,
            series=self.series,
            repetitions=self.reps,
            date=now,
        )
        self._save()
        return self.pending_log

    def retry_save(self) -> SubstitutionLog:
        if self._saving:
            raise SessionBusyError("exercise log is being saved")
        if self.state is not SubstitutionState.COMPLETED or self.pending_log is None:
            raise SessionStateError("nothing to save")
        if not self.saved:
            self._save()
        return self.pending_log

    def _save(self) -> None:
        self._saving = True
        try:
            self.repo.append(self.pending_log)
        except StorageError as e:
            logger.error("could not save substitution log: %s", e)
            raise
        finally:
            self._saving = False
        self.saved = True
        logger.info(
            "%s logged: %d series, %d reps in last",
            self.pending_log.exercise_name,
            self.pending_log.series,
            self.pending_log.repetitions,
        )

    def handle_intent(self, intent: Intent) -> bool:
        """Apply ``intent`` if it is meaningful in the current state."""
        if self.state is SubstitutionState.BROWSING and isinstance(intent, NavigationIntent):
            if intent.direction is Direction.NEXT:
                self.next()
            elif intent.direction is Direction.PREVIOUS:
                self.previous()
            else:
                self.accept()
            return True
        if not isinstance(intent, ControlIntent):
            return False
        if self.state is SubstitutionState.RESTING:
            if intent.action is Action.SKIP_REST:
                self.skip_rest()
                return True
            return False
        if self.state is not SubstitutionState.ACTIVE:
            return False
        if intent.action is Action.REP_DONE:
            self.rep_done()
        elif intent.action is Action.FINISH_SERIES:
            self.finish_series()
        elif intent.action is Action.FINISH_EXERCISE:
            self.finish_exercise()
        else:
            return False
        return True

    def handle_transcript(self, text: str) -> Optional[Intent]:
        if self.state is SubstitutionState.BROWSING:
            intent = parse_navigation(text)
        elif self.state in (SubstitutionState.ACTIVE, SubstitutionState.RESTING):
            intent = parse_control(text)
        else:
            return None
        if intent is None or not self.handle_intent(intent):
            return None
        return intent

    def summary(self) -> dict:
        candidate = self.current_candidate
        data = {
            "state": self.state.value,
            "machineId": self.machine_id,
            "machineName": self.machine_name,
            "index": self.index,
            "count": len(self.candidates),
            "candidate": candidate.model_dump() if candidate else None,
            "voiceEnabled": self.voice_enabled,
        }
        if self.exercise is not None:
            data.update(
                exercise=self.exercise.model_dump(),
                reps=self.reps,
                series=self.series,
                awaitingSeriesConfirmation=self.awaiting_series_confirmation,
                rest={"active": self.timer.active, "remaining": self.timer.remaining},
            )
        if self.pending_log is not None:
            data.update(log=self.pending_log.to_json(), saved=self.saved)
        return data
