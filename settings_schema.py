from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    language: str = "es"
    locale: str = "es-ES"
    db_path: str = "trainer.db"
    substitution_rest_seconds: int = Field(default=60, ge=0)
    rest_alert_pattern: list[int] = Field(default_factory=lambda: [500, 200, 500])
    auto_tick: bool = True
    speech_api_key: str | None = None


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
