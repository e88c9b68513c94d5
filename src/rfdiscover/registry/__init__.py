"""
Discovered Service Registry

This package provides:
1. ServiceRegistry — service name -> set of announcing hosts, filled in by
   the discovery loop and read once by the reporter
"""

from .service_registry import ServiceRegistry

__all__ = [
    'ServiceRegistry',
]
