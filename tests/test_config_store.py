import tempfile
import unittest
from pathlib import Path

import yaml

from reddit_insight.services.config_store import ConfigStore


class ConfigStoreTest(unittest.TestCase):
    def test_load_creates_default_and_save_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config" / "settings.yaml"
            store = ConfigStore(config_path=config_path)

            loaded = store.load()
            self.assertTrue(config_path.exists())
            self.assertEqual(loaded.backend.default_provider, "gemini")
            self.assertEqual(loaded.backend.default_model, "gemini-2.5-flash")
            self.assertEqual(loaded.caps.topics, 4)
            self.assertEqual(loaded.research.source_domain, "reddit.com")

            updated = loaded.model_copy(
                update={"search": loaded.search.model_copy(update={"max_sources": 3})}
            )
            store.save(updated)
            self.assertEqual(store.load().search.max_sources, 3)

    def test_patch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = ConfigStore(config_path=Path(tmpdir) / "settings.yaml")
            patched = store.patch({"cache": {"namespace": "ri:", "themes_key": "themes"}})
            self.assertEqual(patched.cache.namespace, "ri:")
            self.assertEqual(store.load().cache.themes_key, "themes")

    def test_missing_provider_list_gets_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "settings.yaml"
            config_path.write_text(
                yaml.safe_dump({"backend": {"default_provider": "mock"}}),
                encoding="utf-8",
            )
            config = ConfigStore(config_path=config_path).load()
            ids = [provider.provider_id for provider in config.backend.providers]
            self.assertEqual(ids, ["gemini", "openai_compatible", "mock"])
            self.assertEqual(config.backend.default_provider, "mock")

    def test_unknown_default_provider_is_reset(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "settings.yaml"
            config_path.write_text(
                yaml.safe_dump(
                    {
                        "backend": {
                            "default_provider": "gone",
                            "providers": [
                                {"provider_id": "mock", "type": "mock", "models": ["mock-research"]},
                                {"provider_id": "mock", "type": "mock"},
                            ],
                        }
                    }
                ),
                encoding="utf-8",
            )
            config = ConfigStore(config_path=config_path).load()
            self.assertEqual(len(config.backend.providers), 1)
            self.assertEqual(config.backend.default_provider, "mock")
            self.assertEqual(config.backend.default_model, "mock-research")

    def test_rejects_non_mapping_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "settings.yaml"
            config_path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                ConfigStore(config_path=config_path).load()


if __name__ == "__main__":
    unittest.main()
