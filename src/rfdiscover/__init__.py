"""rfdiscover: time-bounded service discovery over MQTT heartbeats."""

__version__ = '0.1.0'
