import unittest

from app_config_schema import ServerSettings
from server.config import ServerConfigurationError, ServerConfig


class ServerConfigTests(unittest.TestCase):
    def test_from_settings_copies_values(self) -> None:
        config = ServerConfig.from_settings(
            ServerSettings(host="0.0.0.0", port=9000, ws_path="/events")
        )

        self.assertEqual("0.0.0.0", config.host)
        self.assertEqual(9000, config.port)
        self.assertEqual("/events", config.websocket_path)

    def test_from_settings_defaults_empty_ws_path(self) -> None:
        config = ServerConfig.from_settings(ServerSettings(ws_path=""))
        self.assertEqual("/ws", config.websocket_path)

    def test_rejects_invalid_values(self) -> None:
        for kwargs in (
            {"host": "  "},
            {"port": 0},
            {"port": 70000},
            {"websocket_path": "ws"},
            {"websocket_path": "/pomodoro"},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ServerConfigurationError):
                    ServerConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()
