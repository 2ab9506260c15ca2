import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ProgressRepository, StorageError, WorkoutHistoryRepository
from devices import Haptics
from models import SavedWorkout, WorkoutEntry
from program import WORKOUT_PHASES
from progress_tracker import ProgressTracker
from transcript_parser import QuantityIntent
from workout_session import (
    SessionBusyError,
    SessionState,
    SessionStateError,
    WorkoutSession,
    format_series,
)

UTC = datetime.timezone.utc


class Clock:
    def __init__(self, now: datetime.datetime) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now


class RecordingHaptics(Haptics):
    def __init__(self) -> None:
        self.patterns = []

    def vibrate(self, pattern) -> None:
        self.patterns.append(list(pattern))


class FlakyHistory(WorkoutHistoryRepository):
    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.fail = False
        self.appends = 0
        self.during_append = None

    def append(self, record) -> None:
        if self.fail:
            raise StorageError("disk full")
        if self.during_append is not None:
            self.during_append()
        self.appends += 1
        super().append(record)


class FlakyProgress(ProgressRepository):
    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.fail = False

    def save(self, progress) -> None:
        if self.fail:
            raise StorageError("disk full")
        super().save(progress)


class WorkoutSessionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_workout_session.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.clock = Clock(datetime.datetime(2024, 2, 1, 18, 0, tzinfo=UTC))
        self.history = FlakyHistory(self.db_path)
        self.progress_repo = FlakyProgress(self.db_path)
        self.tracker = ProgressTracker(self.progress_repo, WORKOUT_PHASES)
        self.tracker.reconcile(self.clock())
        self.haptics = RecordingHaptics()
        self.session = WorkoutSession(
            self.history,
            self.tracker,
            WORKOUT_PHASES,
            haptics=self.haptics,
            clock=self.clock,
        )

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_idle_ignores_transcripts(self) -> None:
        self.assertIs(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.handle_transcript("doce reps"))
        self.assertEqual(self.session.log, ())
        with self.assertRaises(SessionStateError):
            self.session.advance()

    def test_select_recommended_phase(self) -> None:
        phase = self.session.select_phase()
        self.assertEqual(phase.name, "Fase Uno: Resistencia Muscular")
        self.assertEqual(self.session.current_exercise, "Press de Hombros con Barra")
        self.assertIs(self.session.state, SessionState.ACTIVE)

    def test_select_phase_clamped(self) -> None:
        self.assertEqual(self.session.select_phase(7).name, "Fase Tres: Fuerza")
        self.assertEqual(self.session.select_phase(-2).name, WORKOUT_PHASES[0].name)

    def test_transcript_logs_current_exercise(self) -> None:
        self.session.select_phase(0)
        self.session.handle_transcript("doce reps y quince kilos")
        self.assertEqual(len(self.session.log), 1)
        entry = self.session.log[0]
        self.assertEqual(entry.exercise, "Press de Hombros con Barra")
        self.assertEqual(entry.reps, "12")
        self.assertEqual(entry.weight, "15")
        self.assertEqual(entry.timestamp, self.clock.now)

    def test_unmatched_transcript_changes_nothing(self) -> None:
        self.session.select_phase(0)
        self.assertIsNone(self.session.handle_transcript("hola mundo"))
        self.assertEqual(self.session.log, ())
        self.assertEqual(self.session.exercise_index, 0)

    def test_set_numbers_renumber_after_delete(self) -> None:
        self.session.select_phase(0)
        for text in ("diez reps", "once reps", "doce reps"):
            self.session.handle_transcript(text)
        self.assertEqual(self.session.set_numbers(), [1, 2, 3])
        removed = self.session.delete_entry(1)
        self.assertEqual(removed.reps, "11")
        self.assertEqual(self.session.set_numbers(), [1, 2])
        self.assertEqual([e.reps for e in self.session.log], ["10", "12"])

    def test_set_numbers_per_exercise(self) -> None:
        self.session.select_phase(0)
        self.session.handle_transcript("diez reps")
        self.session.advance()
        self.session.handle_transcript("ocho reps")
        self.session.handle_transcript("ocho reps")
        self.assertEqual(self.session.set_numbers(), [1, 1, 2])
        self.assertEqual(self.session.set_count(), 2)

    def test_delete_out_of_range(self) -> None:
        self.session.select_phase(0)
        with self.assertRaises(IndexError):
            self.session.delete_entry(0)

    def test_retreat_at_first_exercise(self) -> None:
        self.session.select_phase(0)
        notice = self.session.retreat()
        self.assertEqual(notice, "Ya estás en el primer ejercicio")
        self.assertEqual(self.session.exercise_index, 0)
        self.session.advance()
        self.assertIsNone(self.session.retreat())
        self.assertEqual(self.session.exercise_index, 0)

    def test_voice_retreat(self) -> None:
        self.session.select_phase(0)
        self.session.advance()
        self.session.handle_transcript("ejercicio anterior")
        self.assertEqual(self.session.exercise_index, 0)

    def test_complete_workout_by_voice(self) -> None:
        self.session.select_phase(0)
        for _ in range(5):
            self.session.advance()
        self.assertTrue(self.session.is_last_exercise)
        self.session.handle_transcript("doce reps")
        self.session.handle_transcript("catorce reps")
        self.clock.now = self.clock.now + datetime.timedelta(minutes=50)
        self.session.handle_transcript("finalizar ejercicio")

        self.assertIs(self.session.state, SessionState.IDLE)
        self.assertEqual(self.session.log, ())
        saved = self.history.fetch_all_records()
        self.assertEqual(len(saved), 1)
        self.assertEqual(saved[0].phase, "Fase Uno: Resistencia Muscular")
        self.assertEqual([e.reps for e in saved[0].log], ["12", "14"])
        self.assertEqual(
            self.progress_repo.load().last_workout_date, self.clock.now
        )

    def test_storage_failure_keeps_session(self) -> None:
        self.session.select_phase(0)
        for _ in range(5):
            self.session.advance()
        self.session.handle_transcript("doce reps")
        self.history.fail = True
        with self.assertRaises(StorageError):
            self.session.advance()
        self.assertIs(self.session.state, SessionState.ACTIVE)
        self.assertEqual(len(self.session.log), 1)
        self.assertTrue(self.session.is_last_exercise)

        self.history.fail = False
        saved = self.session.complete_session()
        self.assertEqual(len(saved.log), 1)
        self.assertIs(self.session.state, SessionState.IDLE)

    def test_retry_after_progress_failure_appends_once(self) -> None:
        self.session.select_phase(0)
        self.session.handle_transcript("doce reps")
        self.progress_repo.fail = True
        with self.assertRaises(StorageError):
            self.session.complete_session()
        self.assertIs(self.session.state, SessionState.ACTIVE)
        self.progress_repo.fail = False
        self.session.complete_session()
        self.assertEqual(self.history.appends, 1)
        self.assertEqual(len(self.history.fetch_all_records()), 1)

    def test_log_locked_once_workout_stored(self) -> None:
        self.session.select_phase(0)
        for _ in range(5):
            self.session.advance()
        self.session.handle_transcript("doce reps")
        self.progress_repo.fail = True
        with self.assertRaises(StorageError):
            self.session.advance()

        with self.assertRaises(SessionBusyError):
            self.session.handle_transcript("catorce reps")
        with self.assertRaises(SessionBusyError):
            self.session.delete_entry(0)
        with self.assertRaises(SessionBusyError):
            self.session.retreat()
        with self.assertRaises(SessionBusyError):
            self.session.select_phase(1)
        self.assertEqual([e.reps for e in self.session.log], ["12"])

        self.progress_repo.fail = False
        self.assertIsNotNone(self.session.handle_transcript("finalizar ejercicio"))
        self.assertIs(self.session.state, SessionState.IDLE)
        stored = self.history.fetch_all_records()
        self.assertEqual(len(stored), 1)
        self.assertEqual([e.reps for e in stored[0].log], ["12"])

    def test_no_mutation_while_saving(self) -> None:
        self.session.select_phase(0)
        self.session.handle_transcript("doce reps")
        attempts = []

        def mutate() -> None:
            for call in (
                lambda: self.session.record_intent(QuantityIntent(reps="9")),
                lambda: self.session.delete_entry(0),
                self.session.advance,
                self.session.retreat,
                self.session.complete_session,
            ):
                with self.assertRaises(SessionBusyError):
                    call()
                attempts.append(call)

        self.history.during_append = mutate
        saved = self.session.complete_session()
        self.assertEqual(len(attempts), 5)
        self.assertEqual([e.reps for e in saved.log], ["12"])
        self.assertEqual(self.history.appends, 1)
        self.assertIs(self.session.state, SessionState.IDLE)

    def test_previous_entries_from_latest_workout(self) -> None:
        exercise = "Sentadilla con Barra"
        for day, reps in ((1, "10"), (8, "12")):
            date = datetime.datetime(2024, 1, day, tzinfo=UTC)
            self.history.append(
                SavedWorkout(
                    date=date,
                    phase=WORKOUT_PHASES[0].name,
                    log=(
                        WorkoutEntry(exercise=exercise, reps=reps, weight="40", timestamp=date),
                        WorkoutEntry(exercise=exercise, reps=reps, weight=None, timestamp=date),
                    ),
                )
            )
        self.session.select_phase(0)
        self.session.advance()
        previous = self.session.previous_entries()
        self.assertEqual([e.reps for e in previous], ["12", "12"])
        self.assertEqual(format_series(previous, "weight"), "40--")
        self.assertEqual(self.session.previous_entries("Clean con Barra"), [])

    def test_record_intent_with_explicit_exercise(self) -> None:
        entry = self.session.record_intent(QuantityIntent(weight="20"), "Clean con Barra")
        self.assertEqual(entry.exercise, "Clean con Barra")
        self.assertEqual(entry.weight, "20")

    def test_rest_expiry_vibrates(self) -> None:
        self.session.select_phase(0)
        seconds = self.session.start_rest()
        self.assertEqual(seconds, 45)
        for _ in range(44):
            self.session.timer.tick()
        self.assertEqual(self.haptics.patterns, [])
        self.session.timer.tick()
        self.assertEqual(self.haptics.patterns, [[500, 200, 500]])

    def test_stopped_rest_never_vibrates(self) -> None:
        self.session.select_phase(2)
        self.assertEqual(self.session.start_rest(), 90)
        self.session.timer.tick()
        self.session.stop_rest()
        self.session.timer.tick()
        self.assertEqual(self.haptics.patterns, [])

    def test_stop_rest_on_last_second_never_vibrates(self) -> None:
        self.session.select_phase(0)
        self.session.start_rest()
        self.session.timer.on_tick = lambda remaining: remaining == 0 and self.session.stop_rest()
        for _ in range(45):
            self.session.timer.tick()
        self.assertEqual(self.haptics.patterns, [])
        self.assertFalse(self.session.timer.active)

    def test_summary(self) -> None:
        self.assertEqual(self.session.summary(), {"state": "idle"})
        self.session.select_phase(1)
        self.session.handle_transcript("diez reps")
        summary = self.session.summary()
        self.assertEqual(summary["phaseIndex"], 1)
        self.assertEqual(summary["exerciseCount"], 6)
        self.assertEqual(summary["log"][0]["set"], 1)
        self.assertEqual(summary["today"], {"reps": "10", "weight": "-", "sets": 1})
        self.assertEqual(summary["previous"]["reps"], "N/A")


class FormatSeriesTest(unittest.TestCase):
    def test_empty(self) -> None:
        self.assertEqual(format_series([], "reps"), "N/A")


if __name__ == "__main__":
    unittest.main()
