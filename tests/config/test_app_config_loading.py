import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config import (
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class AppConfigLoadingTests(unittest.TestCase):
    def test_load_app_config_reads_sections(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [logging]
                    level = "debug"

                    [server]
                    host = "0.0.0.0"
                    port = "9001"
                    ws_path = "/events"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual("DEBUG", app_config.logging.level)
            self.assertEqual("0.0.0.0", app_config.server.host)
            self.assertEqual(9001, app_config.server.port)
            self.assertEqual("/events", app_config.server.ws_path)

    def test_missing_sections_use_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "")

            app_config = load_app_config(str(config_path))

            self.assertEqual("INFO", app_config.logging.level)
            self.assertEqual("127.0.0.1", app_config.server.host)
            self.assertEqual(8080, app_config.server.port)
            self.assertEqual("/ws", app_config.server.ws_path)

    def test_load_app_config_rejects_bad_values(self) -> None:
        cases = {
            "[server]\nport = true\n": "server.port",
            "[server]\nport = \"eighty\"\n": "server.port",
            "[logging]\nlevel = \"loud\"\n": "logging.level",
            "server = 3\n": "[server]",
        }
        for content, field in cases.items():
            with self.subTest(field=field), tempfile.TemporaryDirectory() as temp_dir:
                config_path = Path(temp_dir) / "config.toml"
                _write_text(config_path, content)

                with self.assertRaises(AppConfigurationError) as context:
                    load_app_config(str(config_path))

                self.assertIn(field, str(context.exception))

    def test_load_app_config_reports_missing_and_malformed_files(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(AppConfigurationError):
                load_app_config(str(Path(temp_dir) / "absent.toml"))

            broken = Path(temp_dir) / "broken.toml"
            _write_text(broken, "[server\n")
            with self.assertRaises(AppConfigurationError):
                load_app_config(str(broken))

    def test_resolve_config_path_prefers_argument_then_environment(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            cwd = Path(temp_dir)
            with patch("app_config.Path.cwd", return_value=cwd):
                from_env = resolve_config_path(
                    environ={"CALABASH_CONFIG_FILE": "custom.toml"}
                )
                explicit = resolve_config_path(
                    "explicit.toml",
                    environ={"CALABASH_CONFIG_FILE": "custom.toml"},
                )
                default = resolve_config_path(environ={})

            self.assertEqual((cwd / "custom.toml").resolve(), from_env)
            self.assertEqual((cwd / "explicit.toml").resolve(), explicit)
            self.assertEqual((cwd / "config.toml").resolve(), default)


if __name__ == "__main__":
    unittest.main()
