import re
from dataclasses import dataclass

DEFAULT_REST_SECONDS = 60

_REST_PATTERN = re.compile(r"(\d+)\s*s")


@dataclass(frozen=True)
class WorkoutPhase:
    """One stage of the training program."""

    name: str
    exercises: tuple[str, ...]
    sets: int
    reps: str
    rest: str
    tempo: str
    duration_weeks: int

    @property
    def rest_seconds(self) -> int:
        return parse_rest_seconds(self.rest)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "exercises": list(self.exercises),
            "sets": self.sets,
            "reps": self.reps,
            "rest": self.rest,
            "tempo": self.tempo,
            "durationWeeks": self.duration_weeks,
        }


def parse_rest_seconds(rest: str, default: int = DEFAULT_REST_SECONDS) -> int:
    """Return the number of seconds in a rest string such as ``"45s"``."""
    m = _REST_PATTERN.search(rest or "")
    if m:
        return int(m.group(1))
    return default


WORKOUT_PHASES: tuple[WorkoutPhase, ...] = (
    WorkoutPhase(
        name="Fase Uno: Resistencia Muscular",
        exercises=(
            "Press de Hombros con Barra",
            "Sentadilla con Barra",
            "Press de Pecho con Mancuernas",
            "Remo Inclinado con Barra",
            "Peso Muerto con Mancuernas",
            "Estocada con Mancuernas",
        ),
        sets=3,
        reps="12-15",
        rest="45s",
        tempo="Lento",
        duration_weeks=4,
    ),
    WorkoutPhase(
        name="Fase Dos: Hipertrofia",
        exercises=(
            "Clean con Barra",
            "Sentadilla Frontal con Barra",
            "Press de Pecho Inclinado con Mancuernas",
            "Dominadas/Jalón al Pecho",
            "Peso Muerto con Barra",
            "Estocada con Barra",
        ),
        sets=3,
        reps="8-12",
        rest="60s",
        tempo="Lento a Rápido",
        duration_weeks=4,
    ),
    WorkoutPhase(
        name="Fase Tres: Fuerza",
        exercises=(
            "Clean y Press con Barra",
            "Sentadilla Frontal con Barra",
            "Press de Pecho con Barra",
            "Dominadas/Jalón al Pecho",
            "Peso Muerto Rumano con Barra",
            "Sentadilla Split con Mancuernas",
        ),
        sets=3,
        reps="6-8",
        rest="90s",
        tempo="Rápido",
        duration_weeks=4,
    ),
)


def total_weeks(phases=WORKOUT_PHASES) -> int:
    return sum(p.duration_weeks for p in phases)
