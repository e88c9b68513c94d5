"""Heartbeat listener: topic validation and strict payload decoding."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


class HeartbeatError(Exception):
    """A single heartbeat event could not be used. Never fatal."""


class TopicError(HeartbeatError):
    """Topic path too short to carry a host identity."""


class PayloadError(HeartbeatError):
    """Payload does not match the heartbeat schema."""


@dataclass(frozen=True)
class HeartbeatEvent:
    """Raw event as delivered by the subscription."""
    path: tuple[str, ...]
    payload: bytes

    @property
    def topic(self) -> str:
        return "/".join(self.path)

    @classmethod
    def from_topic(cls, topic: str, payload: bytes) -> 'HeartbeatEvent':
        return cls(path=tuple(topic.split("/")), payload=payload)


# Optional top-level fields and the JSON types they may hold.  bool is
# excluded explicitly from the numeric checks since it subclasses int.
_OPTIONAL_FIELDS: Dict[str, tuple[type, ...]] = {
    "node_name": (str,),
    "node_uuid": (str,),
    "fqdn": (str,),
    "ts": (int, float, str),
    "interval": (int, float),
}


@dataclass
class Heartbeat:
    """Decoded heartbeat record.

    Only the keys of ``services`` matter for discovery; the per-service
    values are kept as-is and never interpreted.
    """
    services: Dict[str, Any]
    node_name: Optional[str] = None
    node_uuid: Optional[str] = None
    fqdn: Optional[str] = None
    ts: Any = None
    interval: Optional[float] = None

    @property
    def service_names(self) -> frozenset[str]:
        return frozenset(self.services)

    @classmethod
    def from_dict(cls, data: Any) -> 'Heartbeat':
        """Validate *data* against the schema, rejecting anything unexpected."""
        if not isinstance(data, dict):
            raise PayloadError(f"expected a JSON object, got {type(data).__name__}")
        if "services" not in data:
            raise PayloadError("missing 'services' field")
        unknown = sorted(set(data) - {"services"} - set(_OPTIONAL_FIELDS))
        if unknown:
            raise PayloadError(f"unexpected field(s): {', '.join(unknown)}")

        services = data["services"]
        if not isinstance(services, dict):
            raise PayloadError(
                f"'services' must be an object, got {type(services).__name__}"
            )

        optional = {}
        for name, types in _OPTIONAL_FIELDS.items():
            if name not in data:
                continue
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, types):
                raise PayloadError(
                    f"'{name}' has wrong type {type(value).__name__}"
                )
            optional[name] = value
        return cls(services=dict(services), **optional)

    @classmethod
    def decode(cls, payload: bytes) -> 'Heartbeat':
        try:
            data = json.loads(payload.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise PayloadError(f"payload is not UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise PayloadError(f"payload is not JSON: {e}") from e
        return cls.from_dict(data)


def host_from_path(path: tuple[str, ...]) -> str:
    """Return the announcing host: the last topic segment, verbatim."""
    if len(path) < 2:
        raise TopicError(f"path too short: {'/'.join(path)!r}")
    host = path[-1]
    if not host:
        raise TopicError(f"empty host segment: {'/'.join(path)!r}")
    return host


def parse_event(event: HeartbeatEvent) -> tuple[Heartbeat, str]:
    """Turn one subscription event into a ``(heartbeat, host)`` pair.

    Raises a :class:`HeartbeatError` subclass when the event has to be
    skipped; callers treat that as a per-event diagnostic only.
    """
    host = host_from_path(event.path)
    return Heartbeat.decode(event.payload), host
