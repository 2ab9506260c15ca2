class Translator:
    """User-facing messages, keyed by their English text."""

    def __init__(self, language: str = "es") -> None:
        self.language = language
        self.translations = {
            "en": {},
            "es": {
                "Already at the first exercise": "Ya estás en el primer ejercicio",
                "You are now in {phase}": "Ahora estás en la {phase}",
                "Week {week} of {weeks} (Phase {phase})": "Semana {week} de {weeks} (Fase {phase})",
                "Microphone permission is required to record": "Se requiere permiso de micrófono para grabar",
                "Could not start voice recording": "No se pudo iniciar la grabación de voz",
                "Could not stop voice recording": "No se pudo detener la grabación de voz",
                "No alternative exercises available": "No hay ejercicios alternativos disponibles",
                "The unsaved exercise log was discarded": "Se descartó el registro del ejercicio sin guardar",
            },
        }

    def gettext(self, key: str, **params) -> str:
        text = self.translations.get(self.language, {}).get(key, key)
        return text.format(**params) if params else text


translator = Translator()
