import requests
from typing import Optional


class TrainerClient:
    """Simple REST client for the trainer API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 5) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        resp = self.session.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        resp.raise_for_status()
        return resp.json()

    def start_workout(self, index: Optional[int] = None) -> dict:
        return self._request("POST", "/workout/start", json={"index": index})

    def workout(self) -> dict:
        return self._request("GET", "/workout")

    def say(self, text: str) -> dict:
        """Send a transcript to whichever screen is active."""
        state = self.workout()
        path = (
            "/substitution/transcript"
            if state.get("screen") == "AlternativeExercise"
            else "/workout/transcript"
        )
        return self._request("POST", path, json={"text": text})

    def next_exercise(self) -> dict:
        return self._request("POST", "/workout/next")

    def previous_exercise(self) -> dict:
        return self._request("POST", "/workout/previous")

    def delete_entry(self, index: int) -> dict:
        return self._request("DELETE", f"/workout/entries/{index}")

    def machine_busy(self) -> dict:
        return self._request("POST", "/substitution/start")

    def return_to_workout(self) -> dict:
        return self._request("POST", "/substitution/return")

    def progress(self) -> dict:
        return self._request("GET", "/progress")

    def workout_history(self) -> list:
        return self._request("GET", "/history/workouts")
