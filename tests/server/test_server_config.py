import tempfile
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings
from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_without_index_file(self) -> None:
        config = UIServerConfig.from_settings(UIServerSettings())

        self.assertTrue(config.enabled)
        self.assertEqual("", config.index_file)
        self.assertIsNone(config.index_path)
        self.assertEqual("/ws", config.websocket_path)

    def test_from_settings_keeps_explicit_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            custom = Path(temp_dir) / "index.html"
            custom.write_text("<html></html>", encoding="utf-8")

            config = UIServerConfig.from_settings(
                UIServerSettings(index_file=f"  {custom}  ")
            )

            self.assertEqual(str(custom), config.index_file)
            self.assertEqual(custom, config.index_path)

    def test_missing_index_file_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(ServerConfigurationError):
                UIServerConfig(index_file=str(Path(temp_dir) / "nope.html"))

    def test_disabled_server_skips_index_validation(self) -> None:
        config = UIServerConfig(enabled=False, index_file="/does/not/exist.html")
        self.assertFalse(config.enabled)

    def test_invalid_port_and_host_are_rejected(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(port=0)
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(host="  ")


if __name__ == "__main__":
    unittest.main()
