import json
import logging
import socket
import unittest
import urllib.error
import urllib.request

from websockets.sync.client import connect

from pomodoro import SessionRegistry
from server import ServerConfig, SessionServer


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class SessionServerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = SessionRegistry(tick_interval_seconds=60.0)
        self.server = SessionServer(
            config=ServerConfig(host="127.0.0.1", port=_free_port()),
            registry=self.registry,
            logger=logging.getLogger("test.server"),
        )
        self.server.start(timeout_seconds=5.0)

    def tearDown(self) -> None:
        self.registry.shutdown(timeout_seconds=2.0)
        self.server.stop(timeout_seconds=5.0)

    def _url(self, path: str) -> str:
        return f"http://{self.server.host}:{self.server.port}{path}"

    def _get(self, path: str) -> tuple[int, bytes]:
        try:
            with urllib.request.urlopen(self._url(path), timeout=5.0) as response:
                return response.status, response.read()
        except urllib.error.HTTPError as error:
            return error.code, error.read()

    def test_http_routes(self) -> None:
        self.assertEqual((200, b'"pong"'), self._get("/"))
        self.assertEqual((200, b"ok\n"), self._get("/healthz"))
        self.assertEqual(404, self._get("/missing")[0])

        status, body = self._get("/pomodoro")
        self.assertEqual(404, status)
        self.assertEqual("not_found", json.loads(body)["reason"])

    def test_websocket_commands_drive_registry(self) -> None:
        uri = f"ws://{self.server.host}:{self.server.port}{self.server.websocket_path}"
        with connect(uri, open_timeout=5.0) as websocket:
            hello = json.loads(websocket.recv(timeout=5.0))
            self.assertEqual("hello", hello["type"])

            websocket.send(json.dumps({"action": "create"}))
            event = json.loads(websocket.recv(timeout=5.0))
            self.assertEqual("pomodoro", event["type"])
            self.assertEqual("create", event["action"])
            self.assertEqual(200, event["status"])

            websocket.send("garbage")
            error = self._next_of_type(websocket, "error")
            self.assertIn("JSON", error["message"])

        status, body = self._get("/pomodoro")
        self.assertEqual(200, status)
        self.assertTrue(json.loads(body)["session"]["started"])

    def test_sender_gets_one_reply_per_command(self) -> None:
        with connect(self._ws_uri(), open_timeout=5.0) as websocket:
            websocket.recv(timeout=5.0)

            websocket.send(json.dumps({"action": "create"}))
            self.assertEqual("create", json.loads(websocket.recv(timeout=5.0))["action"])

            websocket.send(json.dumps({"action": "read"}))
            self.assertEqual("read", json.loads(websocket.recv(timeout=5.0))["action"])

    def test_replay_after_delete_has_no_stale_tick(self) -> None:
        with connect(self._ws_uri(), open_timeout=5.0) as websocket:
            websocket.recv(timeout=5.0)
            websocket.send(json.dumps({"action": "create"}))
            self._next_of_type(websocket, "pomodoro")

            self.server.publish(
                "pomodoro_tick",
                session=self.registry.current.snapshot().to_dict(),
            )
            self._next_of_type(websocket, "pomodoro_tick")

            websocket.send(json.dumps({"action": "delete"}))
            self.assertEqual("delete", self._next_of_type(websocket, "pomodoro")["action"])

        with connect(self._ws_uri(), open_timeout=5.0) as late_client:
            self.assertEqual("hello", json.loads(late_client.recv(timeout=5.0))["type"])
            replayed = []
            while True:
                try:
                    replayed.append(json.loads(late_client.recv(timeout=0.5)))
                except TimeoutError:
                    break

        self.assertNotIn("pomodoro_tick", [event["type"] for event in replayed])
        self.assertEqual("delete", replayed[-1]["action"])
        self.assertFalse(replayed[-1]["session"]["running"])

    def _ws_uri(self) -> str:
        return f"ws://{self.server.host}:{self.server.port}{self.server.websocket_path}"

    @staticmethod
    def _next_of_type(websocket, event_type: str) -> dict:
        while True:
            event = json.loads(websocket.recv(timeout=5.0))
            if event["type"] == event_type:
                return event


if __name__ == "__main__":
    unittest.main()
