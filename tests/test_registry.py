"""Tests for the discovered-service registry."""

import pytest

from rfdiscover.registry import ServiceRegistry


class TestServiceRegistry:
    def test_starts_empty(self):
        registry = ServiceRegistry()
        assert len(registry) == 0
        assert registry.services() == []
        assert registry.hosts("web") == frozenset()

    def test_record_creates_service(self):
        registry = ServiceRegistry()
        registry.record(["web"], "host-a")
        assert "web" in registry
        assert registry.hosts("web") == {"host-a"}

    def test_record_is_idempotent(self):
        registry = ServiceRegistry()
        registry.record(["web"], "host-a")
        registry.record(["web"], "host-a")
        assert registry.to_dict() == {"web": ["host-a"]}

    def test_host_in_multiple_services(self):
        registry = ServiceRegistry()
        registry.record(["web", "db"], "host-a")
        registry.record(["web"], "host-b")
        assert registry.hosts("web") == {"host-a", "host-b"}
        assert registry.hosts("db") == {"host-a"}
        assert registry.host_count() == 2

    def test_hosts_taken_verbatim(self):
        registry = ServiceRegistry()
        registry.record(["web"], "Host-A")
        registry.record(["web"], "host-a")
        assert registry.hosts("web") == {"Host-A", "host-a"}

    def test_snapshot_is_frozen(self):
        registry = ServiceRegistry()
        registry.record(["web"], "host-a")
        snap = registry.snapshot()
        registry.record(["web"], "host-b")
        registry.record(["db"], "host-b")
        assert dict(snap) == {"web": frozenset({"host-a"})}
        with pytest.raises(TypeError):
            snap["db"] = frozenset()

    def test_to_dict_sorted(self):
        registry = ServiceRegistry()
        registry.record(["zeta"], "h2")
        registry.record(["alpha", "zeta"], "h1")
        assert list(registry.to_dict()) == ["alpha", "zeta"]
        assert registry.to_dict()["zeta"] == ["h1", "h2"]
