import os
import yaml
import keyring

from settings_schema import SettingsSchema, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Trainer settings stored in a YAML file.

    With ``ENCRYPT_SETTINGS=1`` the credentials in ``SENSITIVE_KEYS`` live in
    the system keyring; the file only marks them as present.
    """

    SENSITIVE_KEYS = {"speech_api_key"}
    SERVICE = "voicetrainer"

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _read_secrets(self, data: dict) -> dict:
        stored = {k for k in data if k in self.SENSITIVE_KEYS}
        for key in stored:
            secret = keyring.get_password(self.SERVICE, key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def _stash_secrets(self, data: dict) -> dict:
        for key in data.keys() & self.SENSITIVE_KEYS:
            keyring.set_password(self.SERVICE, key, str(data[key]))
            data[key] = True
        return data

    def load(self) -> dict:
        """Raw settings from disk, empty when the file does not exist."""
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return self._read_secrets(data) if self.encrypt else data

    def save(self, data: dict) -> None:
        # unset options are left out so defaults can change between versions
        out = {key: value for key, value in data.items() if value is not None}
        if self.encrypt:
            out = self._stash_secrets(out)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, allow_unicode=True, sort_keys=True)

    def settings(self) -> SettingsSchema:
        """Validated settings with defaults for missing keys."""
        return validate_settings(self.load())

    def update(self, **changes) -> SettingsSchema:
        merged = self.settings().model_dump()
        merged.update(changes)
        settings = validate_settings(merged)
        self.save(settings.model_dump())
        return settings
