import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from precommit_installer.config import DEFAULT_SETTINGS, load_settings


class SettingsTests(unittest.TestCase):
    def test_defaults_when_file_missing(self):
        with TemporaryDirectory() as tmp:
            settings = load_settings(Path(tmp) / "missing.json")
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertEqual(settings['hook_types'], ['pre-commit', 'pre-push'])
        self.assertEqual(settings['config_file'], '.pre-commit-config.yaml')

    def test_user_values_override_defaults(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text(json.dumps({'hook_types': ['pre-commit'], 'install_hook_envs': False, 'bogus': 1}))
            settings = load_settings(path)
        self.assertEqual(settings['hook_types'], ['pre-commit'])
        self.assertFalse(settings['install_hook_envs'])
        self.assertNotIn('bogus', settings)
        self.assertEqual(settings['scripts_dir'], 'scripts')

    def test_invalid_list_falls_back_to_default(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text(json.dumps({'required_commands': 'git'}))
            settings = load_settings(path)
        self.assertEqual(settings['required_commands'], ['git', 'pre-commit', 'tar'])

    def test_corrupt_file_returns_defaults(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text("{oops")
            settings = load_settings(path)
        self.assertEqual(settings, DEFAULT_SETTINGS)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
