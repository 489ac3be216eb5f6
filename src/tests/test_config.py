import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from hn_tui import config


class TestConfigLoading(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="hn_config_")
        self.env = patch.dict(os.environ, {config.BASE_DIR_ENV: self.test_dir})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.test_dir)

    def test_paths_follow_base_dir(self):
        self.assertEqual(config.get_base_dir(), self.test_dir)
        self.assertEqual(
            config.get_store_path(), os.path.join(self.test_dir, "data", "db.json")
        )

    def test_default_base_dir(self):
        with patch.dict(os.environ, {config.BASE_DIR_ENV: "  "}):
            self.assertEqual(config.get_base_dir(), os.path.expanduser("~/.config/hn"))

    def test_default_config_is_written(self):
        loaded = config.load_config()

        self.assertTrue(os.path.exists(config.get_config_path()))
        self.assertEqual(loaded, config.DEFAULT_CONFIG)

    def test_user_values_override_defaults(self):
        with open(config.get_config_path(), "w") as f:
            json.dump({"read_flush_threshold": 3}, f)

        loaded = config.load_config()

        self.assertEqual(loaded["read_flush_threshold"], 3)
        self.assertEqual(loaded["hits_per_page"], 30)

    def test_corrupt_config_falls_back_to_defaults(self):
        with open(config.get_config_path(), "w") as f:
            f.write("{not json")

        self.assertEqual(config.load_config(), config.DEFAULT_CONFIG)


if __name__ == "__main__":
    unittest.main()
