"""Test doubles: a fake clock and a scripted heartbeat source."""

import json

from rfdiscover.heartbeat import HeartbeatEvent


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class ScriptedSource:
    """Delivers events at fixed times on a FakeClock.

    ``next_event(timeout)`` advances the clock either to the next scheduled
    event or by the full timeout, whichever comes first.
    """

    def __init__(self, clock: FakeClock, schedule=()):
        self.clock = clock
        self.schedule = sorted(schedule, key=lambda item: item[0])
        self.waits: list[float] = []

    def next_event(self, timeout):
        self.waits.append(timeout)
        deadline = self.clock.now + timeout
        if self.schedule and self.schedule[0][0] <= deadline:
            at, event = self.schedule.pop(0)
            self.clock.now = max(self.clock.now, at)
            if isinstance(event, Exception):
                raise event
            return event
        self.clock.now = deadline
        return None


def make_event(topic: str, services=None, **fields) -> HeartbeatEvent:
    body = {"services": services if services is not None else {}}
    body.update(fields)
    return HeartbeatEvent.from_topic(topic, json.dumps(body).encode())
