#!/usr/bin/env python3
"""
Discovered Service Registry

This module provides:
- ServiceRegistry: additive service name -> announcing hosts mapping built
  up over one discovery session
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping


class ServiceRegistry:
    """Dict-backed registry of services and the hosts announcing them.

    The registry only grows: hosts are added per service and never removed.
    It is owned by a single discovery loop, so no locking is done.
    """

    def __init__(self):
        self._services: Dict[str, set[str]] = {}

    def record(self, services: Iterable[str], host: str) -> None:
        """Add *host* to the host set of every name in *services*."""
        for name in services:
            self._services.setdefault(name, set()).add(host)

    def services(self) -> List[str]:
        return sorted(self._services)

    def hosts(self, service: str) -> frozenset[str]:
        return frozenset(self._services.get(service, ()))

    def host_count(self) -> int:
        """Number of distinct hosts across all services."""
        seen: set[str] = set()
        for hosts in self._services.values():
            seen.update(hosts)
        return len(seen)

    def snapshot(self) -> Mapping[str, frozenset[str]]:
        """Return a read-only copy that later updates do not affect."""
        return MappingProxyType(
            {name: frozenset(hosts) for name, hosts in self._services.items()}
        )

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to a JSON-serialisable dictionary with sorted host lists."""
        return {name: sorted(self._services[name]) for name in self.services()}

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, service: object) -> bool:
        return service in self._services
