import logging
import unittest

from pomodoro import RuleSet, SessionMachine, SessionTick
from runtime.ticks import TickDependencies, TickProcessor
from runtime.ui import RuntimeEventPublisher


class _ServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))


def _processor(server: _ServerStub) -> TickProcessor:
    return TickProcessor(
        TickDependencies(
            logger=logging.getLogger("test"),
            ui=RuntimeEventPublisher(server),
        )
    )


def _snapshot_after(ticks: int):
    machine = SessionMachine(RuleSet.default())
    machine.start()
    machine.toggle()
    for _ in range(ticks):
        machine.update()
    return machine.snapshot()


class TickStateFlowTests(unittest.TestCase):
    def test_plain_tick_publishes_tick_event_only(self) -> None:
        server = _ServerStub()
        tick = SessionTick(snapshot=_snapshot_after(2))

        _processor(server).handle_tick(tick)

        self.assertEqual(["pomodoro_tick"], [kind for kind, _ in server.events])
        session = server.events[0][1]["session"]
        self.assertEqual(2, session["elapsed_seconds"])

    def test_phase_change_publishes_update_then_tick(self) -> None:
        server = _ServerStub()
        tick = SessionTick(snapshot=_snapshot_after(5), phase_changed=True)

        _processor(server).handle_tick(tick)

        self.assertEqual(
            ["pomodoro", "pomodoro_tick"],
            [kind for kind, _ in server.events],
        )
        update = server.events[0][1]
        self.assertEqual("phase_changed", update["action"])
        self.assertEqual("break", update["session"]["phase"])

    def test_completion_publishes_completed_update(self) -> None:
        server = _ServerStub()
        tick = SessionTick(snapshot=_snapshot_after(55), done=True)

        with self.assertLogs("test", level="INFO"):
            _processor(server).handle_tick(tick)

        self.assertEqual(1, len(server.events))
        kind, payload = server.events[0]
        self.assertEqual("pomodoro", kind)
        self.assertEqual("completed", payload["action"])
        self.assertTrue(payload["accepted"])
        self.assertTrue(payload["session"]["finished"])

    def test_publisher_without_server_is_silent(self) -> None:
        publisher = RuntimeEventPublisher(None)
        publisher.publish_tick(_snapshot_after(1))

        server = _ServerStub()
        publisher.attach(server)
        publisher.publish_tick(_snapshot_after(1))
        self.assertEqual(1, len(server.events))


if __name__ == "__main__":
    unittest.main()
