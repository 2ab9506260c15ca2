from typing import Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException
from pydantic import BaseModel, Field

from alternatives import alternatives_for, get_exercise
from config import APP_VERSION, YamlConfig
from db import StorageError
from program import WORKOUT_PHASES
from settings_schema import SettingsSchema
from trainer_service import Screen, TrainerService
from voice_control import CaptureError, PermissionDeniedError
from workout_session import SessionStateError


class TranscriptRequest(BaseModel):
    text: str


class SubstitutionRequest(BaseModel):
    machine_id: Optional[str] = Field(default=None, alias="machineId")
    machine_name: Optional[str] = Field(default=None, alias="machineName")


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, StorageError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, IndexError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, CaptureError):
        return HTTPException(status_code=500, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))


_HANDLED = (StorageError, IndexError, SessionStateError, PermissionDeniedError, CaptureError)


class TrainerAPI:
    """Provides REST endpoints for voice-driven workout tracking."""

    def __init__(
        self,
        db_path: str = "trainer.db",
        yaml_path: str = "settings.yaml",
        *,
        settings: SettingsSchema | None = None,
    ) -> None:
        self.config = YamlConfig(yaml_path)
        settings = settings or self.config.settings()
        self.service = TrainerService(db_path, settings)
        self.service.reconcile_progress()
        self.app = FastAPI(
            title="Voice Trainer API",
            description="REST API for voice-driven strength training sessions",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _state(self) -> dict:
        data = {
            "screen": self.service.screen.value,
            "routeParams": self.service.route_params,
            "workout": self.service.workout.summary(),
            "notices": self.service.pop_notices(),
        }
        if self.service.substitution is not None:
            data["substitution"] = self.service.substitution.summary()
        return data

    def _setup_routes(self) -> None:
        workout_router = APIRouter(prefix="/workout", tags=["Workout"])
        substitution_router = APIRouter(prefix="/substitution", tags=["Substitution"])
        history_router = APIRouter(prefix="/history", tags=["History"])
        service = self.service

        @self.app.get("/health")
        def health():
            try:
                service.progress_repo.keys()
                return {"status": "ok"}
            except StorageError as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/phases")
        def list_phases():
            return [p.to_dict() for p in WORKOUT_PHASES]

        @self.app.get("/progress")
        def get_progress():
            progress = service.tracker.progress
            return {
                "progress": progress.to_json() if progress else None,
                "recommendedPhase": service.tracker.current_phase_index,
                "info": service.tracker.week_info(),
            }

        @self.app.post("/progress/reconcile")
        def reconcile():
            try:
                notice = service.reconcile_progress()
            except StorageError as e:
                raise _http_error(e)
            return {
                "notice": notice,
                "recommendedPhase": service.tracker.current_phase_index,
            }

        @workout_router.post("/start")
        def start_workout(index: Optional[int] = Body(default=None, embed=True)):
            try:
                service.start_workout(index)
            except _HANDLED as e:
                raise _http_error(e)
            return self._state()

        @workout_router.get("")
        def get_workout():
            return self._state()

        @workout_router.post("/transcript")
        def workout_transcript(req: TranscriptRequest):
            if service.screen is not Screen.WORKOUT:
                raise HTTPException(status_code=409, detail="workout is suspended")
            try:
                intent = service.voice.deliver(req.text)
            except _HANDLED as e:
                raise _http_error(e)
            return {"matched": intent is not None, "state": self._state()}

        @workout_router.post("/next")
        def next_exercise():
            try:
                saved = service.workout.advance()
            except _HANDLED as e:
                raise _http_error(e)
            data = self._state()
            if saved is not None:
                data["saved"] = saved.to_json()
            return data

        @workout_router.post("/previous")
        def previous_exercise():
            try:
                notice = service.workout.retreat()
            except _HANDLED as e:
                raise _http_error(e)
            data = self._state()
            data["notice"] = notice
            return data

        @workout_router.delete("/entries/{index}")
        def delete_entry(index: int):
            try:
                service.workout.delete_entry(index)
            except _HANDLED as e:
                raise _http_error(e)
            return self._state()

        @workout_router.post("/rest")
        def start_rest():
            try:
                seconds = service.workout.start_rest()
            except _HANDLED as e:
                raise _http_error(e)
            return {"seconds": seconds}

        @workout_router.delete("/rest")
        def stop_rest():
            service.workout.stop_rest()
            return {"status": "stopped"}

        @workout_router.post("/recording")
        def toggle_recording():
            try:
                recording = service.toggle_recording()
            except _HANDLED as e:
                raise _http_error(e)
            return {"recording": recording}

        @self.app.get("/machines/{machine_id}/alternatives")
        def list_alternatives(machine_id: str):
            return [ex.model_dump() for ex in alternatives_for(machine_id)]

        @self.app.get("/alternatives/{exercise_id}")
        def get_alternative(exercise_id: str):
            exercise = get_exercise(exercise_id)
            if exercise is None:
                raise HTTPException(status_code=404, detail="unknown exercise")
            return exercise.model_dump()

        @substitution_router.post("/start")
        def start_substitution(req: SubstitutionRequest = Body(default=None)):
            try:
                if req is None or req.machine_id is None:
                    service.machine_busy()
                else:
                    service.open_substitution(
                        req.machine_id, req.machine_name or req.machine_id
                    )
            except _HANDLED as e:
                raise _http_error(e)
            return self._state()

        @substitution_router.get("")
        def get_substitution():
            if service.substitution is None:
                raise HTTPException(status_code=404, detail="no substitution open")
            return service.substitution.summary()

        @substitution_router.post("/transcript")
        def substitution_transcript(req: TranscriptRequest):
            if service.substitution is None:
                raise HTTPException(status_code=404, detail="no substitution open")
            try:
                intent = service.voice.deliver(req.text)
            except _HANDLED as e:
                raise _http_error(e)
            return {"matched": intent is not None, "state": service.substitution.summary()}

        @substitution_router.post("/save")
        def retry_substitution_save():
            if service.substitution is None:
                raise HTTPException(status_code=404, detail="no substitution open")
            try:
                log = service.substitution.retry_save()
            except _HANDLED as e:
                raise _http_error(e)
            return log.to_json()

        @substitution_router.post("/return")
        def return_to_workout():
            service.return_to_workout()
            return self._state()

        @history_router.get("/workouts")
        def workout_history():
            try:
                return [w.to_json() for w in service.workout_history.fetch_all_records()]
            except StorageError as e:
                raise _http_error(e)

        @history_router.get("/substitutions")
        def substitution_history(machine_id: Optional[str] = None):
            repo = service.substitution_history
            try:
                if machine_id is None:
                    records = repo.fetch_all_records()
                else:
                    records = repo.fetch_for_machine(machine_id)
                return [r.to_json() for r in records]
            except StorageError as e:
                raise _http_error(e)

        self.app.include_router(workout_router)
        self.app.include_router(substitution_router)
        self.app.include_router(history_router)


if __name__ == "__main__":
    import uvicorn

    api = TrainerAPI()
    uvicorn.run(api.app)
