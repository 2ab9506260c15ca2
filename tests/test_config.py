import os
import sys
import unittest
import keyring
import yaml
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig


class DummyKeyring(keyring.backend.KeyringBackend):
    priority = 1

    def __init__(self):
        self.store = {}

    def get_password(self, service, username):
        return self.store.get((service, username))

    def set_password(self, service, username, password):
        self.store[(service, username)] = password

    def delete_password(self, service, username):
        self.store.pop((service, username), None)


class SettingsEncryptionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.keyring = DummyKeyring()
        keyring.set_keyring(self.keyring)
        os.environ['ENCRYPT_SETTINGS'] = '1'
        self.path = 'enc_settings.yaml'
        if os.path.exists(self.path):
            os.remove(self.path)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop('ENCRYPT_SETTINGS', None)

    def test_encrypt_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'speech_api_key': 'secret', 'locale': 'es-MX'})
        self.assertTrue(os.path.exists(self.path))
        with open(self.path, encoding='utf-8') as f:
            raw = yaml.safe_load(f)
        self.assertIs(raw['speech_api_key'], True)
        self.assertEqual(self.keyring.store[('voicetrainer', 'speech_api_key')], 'secret')
        data = cfg.load()
        self.assertEqual(data['speech_api_key'], 'secret')
        self.assertEqual(data['locale'], 'es-MX')

    def test_missing_secret_dropped(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'speech_api_key': True}, f)
        self.assertEqual(YamlConfig(self.path).load(), {})


class SettingsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.path = 'test_trainer_settings.yaml'
        if os.path.exists(self.path):
            os.remove(self.path)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)

    def test_defaults_without_file(self) -> None:
        settings = YamlConfig(self.path).settings()
        self.assertEqual(settings.language, 'es')
        self.assertEqual(settings.locale, 'es-ES')
        self.assertEqual(settings.rest_alert_pattern, [500, 200, 500])
        self.assertEqual(settings.substitution_rest_seconds, 60)
        self.assertTrue(settings.auto_tick)

    def test_update_persists(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.update(substitution_rest_seconds=45, auto_tick=False)
        settings = YamlConfig(self.path).settings()
        self.assertEqual(settings.substitution_rest_seconds, 45)
        self.assertFalse(settings.auto_tick)
        with open(self.path, encoding='utf-8') as f:
            self.assertNotIn('speech_api_key', yaml.safe_load(f))

    def test_invalid_value_rejected(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'substitution_rest_seconds': -5}, f)
        with self.assertRaises(ValueError):
            YamlConfig(self.path).settings()


if __name__ == '__main__':
    unittest.main()
