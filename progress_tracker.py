from __future__ import annotations

import datetime
import logging
from typing import Optional, Sequence

from db import ProgressRepository, StorageError
from localization import Translator, translator as default_translator
from models import ProgramProgress, as_utc, utcnow
from program import WORKOUT_PHASES, WorkoutPhase

logger = logging.getLogger(__name__)

WEEK = datetime.timedelta(days=7)


def elapsed_weeks(start: datetime.datetime, today: datetime.datetime) -> int:
    return (as_utc(today) - as_utc(start)) // WEEK


def recommended_phase_index(
    progress: ProgramProgress,
    phases: Sequence[WorkoutPhase],
    today: datetime.datetime,
) -> int:
    """Return the phase the program should be in on ``today``.

    The first phase whose cumulative duration exceeds the elapsed weeks
    wins; past the end of the program the last phase is kept.
    """
    weeks = elapsed_weeks(progress.start_date, today)
    boundary = 0
    for i, phase in enumerate(phases):
        boundary += phase.duration_weeks
        if weeks < boundary:
            return i
    return len(phases) - 1


class ProgressTracker:
    """Keeps the stored phase index in line with the calendar."""

    def __init__(
        self,
        repo: ProgressRepository,
        phases: Sequence[WorkoutPhase] = WORKOUT_PHASES,
        translator: Translator | None = None,
    ) -> None:
        self.repo = repo
        self.phases = phases
        self.translator = translator or default_translator
        self._progress: Optional[ProgramProgress] = None
        self._loaded = False

    @property
    def progress(self) -> Optional[ProgramProgress]:
        if not self._loaded:
            self.load()
        return self._progress

    @property
    def current_phase_index(self) -> int:
        progress = self.progress
        if progress is None:
            return 0
        return min(progress.current_phase_index, len(self.phases) - 1)

    def load(self) -> Optional[ProgramProgress]:
        try:
            self._progress = self.repo.load()
        except StorageError as e:
            logger.warning("could not load program progress, using defaults: %s", e)
            self._progress = None
        self._loaded = True
        return self._progress

    def reconcile(self, now: datetime.datetime | None = None) -> Optional[str]:
        """Align the stored phase index with elapsed time.

        Returns a notice when the program moved forward to a later phase.
        Running it again with the same inputs changes nothing.
        """
        now = as_utc(now or utcnow())
        progress = self.progress
        if progress is None:
            progress = ProgramProgress.fresh(now)
            self._progress = progress
            self.repo.save(progress)
            logger.info("program started at %s", now.isoformat())
            return None

        previous = progress.current_phase_index
        index = recommended_phase_index(progress, self.phases, now)
        if index == previous:
            return None
        updated = progress.model_copy(update={"current_phase_index": index})
        self.repo.save(updated)
        self._progress = updated
        logger.info("phase index moved from %d to %d", previous, index)
        if index > previous:
            return self.translator.gettext(
                "You are now in {phase}", phase=self.phases[index].name
            )
        return None

    def record_workout(self, now: datetime.datetime | None = None) -> ProgramProgress:
        """Persist ``now`` as the date of the last completed workout."""
        now = as_utc(now or utcnow())
        progress = self.progress or ProgramProgress.fresh(now)
        updated = progress.model_copy(update={"last_workout_date": now})
        self.repo.save(updated)
        self._progress = updated
        return updated

    def week_info(self, now: datetime.datetime | None = None) -> str:
        progress = self.progress
        if progress is None:
            return ""
        now = now or utcnow()
        index = self.current_phase_index
        weeks_before = sum(p.duration_weeks for p in self.phases[:index])
        week_in_phase = elapsed_weeks(progress.start_date, now) - weeks_before
        return self.translator.gettext(
            "Week {week} of {weeks} (Phase {phase})",
            week=week_in_phase + 1,
            weeks=self.phases[index].duration_weeks,
            phase=index + 1,
        )
