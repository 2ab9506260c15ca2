from __future__ import annotations

import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    # naive timestamps are treated as UTC so history stays comparable
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


Timestamp = Annotated[datetime.datetime, AfterValidator(as_utc)]


class StoredModel(BaseModel):
    """Base for records persisted as JSON blobs with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: dict):
        return cls.model_validate(data)


class WorkoutEntry(StoredModel):
    model_config = ConfigDict(frozen=True)

    exercise: str
    reps: Optional[str] = None
    weight: Optional[str] = None
    timestamp: Timestamp


class SavedWorkout(StoredModel):
    model_config = ConfigDict(frozen=True)

    date: Timestamp
    phase: str
    log: tuple[WorkoutEntry, ...] = ()

    def entries_for(self, exercise: str) -> list[WorkoutEntry]:
        return [e for e in self.log if e.exercise == exercise]


class ProgramProgress(StoredModel):
    start_date: Timestamp
    current_phase_index: int = Field(default=0, ge=0)
    last_workout_date: Timestamp

    @classmethod
    def fresh(cls, now: datetime.datetime) -> "ProgramProgress":
        return cls(start_date=now, current_phase_index=0, last_workout_date=now)


class SubstitutionLog(StoredModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "alternative"
    exercise_id: str
    exercise_name: str
    original_machine_id: str
    original_machine_name: str
    series: int = Field(ge=0)
    repetitions: int = Field(ge=0)
    date: Timestamp
