"""Discovery session: the event loop and its dual-timeout termination policy."""

import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Protocol, TextIO

from .heartbeat import HeartbeatError, HeartbeatEvent, parse_event
from .registry import ServiceRegistry


Clock = Callable[[], float]


class EventSource(Protocol):
    """Anything that can hand the loop its next heartbeat event.

    ``next_event`` blocks for at most *timeout* seconds and returns ``None``
    when nothing arrived in that time.  Transport failures are raised as
    :class:`~rfdiscover.transport.TransportError`.
    """

    def next_event(self, timeout: float) -> Optional[HeartbeatEvent]: ...


class Diagnostics:
    """Stderr-style sink for the session's progress and per-event errors."""

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False,
                 tag: str = "discover"):
        self.stream = stream if stream is not None else sys.stderr
        self.verbose = verbose
        self.tag = tag

    def _emit(self, message: str) -> None:
        print(f"[{self.tag}] {message}", file=self.stream)

    def info(self, message: str) -> None:
        self._emit(message)

    def error(self, message: str) -> None:
        self._emit(f"error: {message}")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit(message)


class SessionState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class StopReason(Enum):
    IDLE = "idle"
    ABSOLUTE = "absolute"


class TerminationPolicy:
    """Races an idle deadline against an absolute session deadline.

    Both deadlines start at :meth:`start`.  Every delivered event re-arms the
    idle deadline via :meth:`record_event`; nothing else moves it.
    """

    def __init__(self, idle_timeout: float, discovery_timeout: float,
                 clock: Clock = time.monotonic):
        if idle_timeout <= 0 or discovery_timeout <= 0:
            raise ValueError("timeouts must be positive")
        self.idle_timeout = idle_timeout
        self.discovery_timeout = discovery_timeout
        self._clock = clock
        self.state = SessionState.RUNNING
        self.reason: Optional[StopReason] = None
        self.started_at: Optional[float] = None
        self.stopped_at: Optional[float] = None
        self._idle_deadline = 0.0
        self._absolute_deadline = 0.0

    def start(self) -> None:
        now = self._clock()
        self.started_at = now
        self._idle_deadline = now + self.idle_timeout
        self._absolute_deadline = now + self.discovery_timeout

    @property
    def running(self) -> bool:
        return self.state is SessionState.RUNNING

    def _next_deadline(self) -> tuple[float, StopReason]:
        # On a tie the absolute deadline is reported.
        if self._absolute_deadline <= self._idle_deadline:
            return self._absolute_deadline, StopReason.ABSOLUTE
        return self._idle_deadline, StopReason.IDLE

    def time_remaining(self) -> float:
        """Seconds until the nearest deadline, never negative."""
        deadline, _ = self._next_deadline()
        return max(0.0, deadline - self._clock())

    def record_event(self) -> None:
        if not self.running:
            return
        self._idle_deadline = self._clock() + self.idle_timeout

    def poll(self) -> bool:
        """Stop if a deadline has already passed. Returns ``running``."""
        if self.running:
            now = self._clock()
            deadline, reason = self._next_deadline()
            if now >= deadline:
                self._stop(reason, now)
        return self.running

    def expire(self) -> None:
        """The wait timed out: the nearest deadline won this iteration."""
        if self.running:
            _, reason = self._next_deadline()
            self._stop(reason, self._clock())

    def _stop(self, reason: StopReason, now: float) -> None:
        self.state = SessionState.STOPPED
        self.reason = reason
        self.stopped_at = now

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.stopped_at if self.stopped_at is not None else self._clock()
        return end - self.started_at


@dataclass(frozen=True)
class DiscoveryResult:
    """Frozen outcome of a finished session."""
    services: Mapping[str, frozenset[str]]
    events_received: int
    events_skipped: int
    elapsed: float
    reason: StopReason

    @property
    def host_count(self) -> int:
        hosts: set[str] = set()
        for names in self.services.values():
            hosts.update(names)
        return len(hosts)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: sorted(self.services[name]) for name in sorted(self.services)}


class DiscoverySession:
    """One bounded discovery run over an :class:`EventSource`."""

    def __init__(
        self,
        source: EventSource,
        idle_timeout: float = 4.0,
        discovery_timeout: float = 30.0,
        diagnostics: Optional[Diagnostics] = None,
        clock: Clock = time.monotonic,
    ):
        self.source = source
        self.diagnostics = diagnostics or Diagnostics()
        self.registry = ServiceRegistry()
        self.policy = TerminationPolicy(idle_timeout, discovery_timeout, clock=clock)
        self.events_received = 0
        self.events_skipped = 0

    def handle(self, event: HeartbeatEvent) -> bool:
        """Fold one event into the registry. Returns False if it was skipped."""
        try:
            heartbeat, host = parse_event(event)
        except HeartbeatError as e:
            self.events_skipped += 1
            self.diagnostics.error(f"skipped event on {event.topic!r}: {e}")
            return False
        self.registry.record(heartbeat.service_names, host)
        self.diagnostics.debug(
            f"HB {host}: {', '.join(sorted(heartbeat.service_names)) or '(none)'}"
        )
        return True

    def run(self) -> DiscoveryResult:
        """Consume events until either deadline fires.

        Transport errors raised by the source propagate unchanged; no
        partial result is returned in that case.
        """
        policy = self.policy
        self.diagnostics.info(
            f"running service discovery (idle {policy.idle_timeout:g}s,"
            f" max {policy.discovery_timeout:g}s)"
        )
        policy.start()
        while policy.poll():
            event = self.source.next_event(policy.time_remaining())
            if event is None:
                policy.expire()
                break
            self.events_received += 1
            policy.record_event()
            self.handle(event)

        self.diagnostics.debug(
            f"session stopped ({policy.reason.value}) after {policy.elapsed:.1f}s"
        )
        return DiscoveryResult(
            services=self.registry.snapshot(),
            events_received=self.events_received,
            events_skipped=self.events_skipped,
            elapsed=policy.elapsed,
            reason=policy.reason,
        )
