"""
System module - direct OS accessors.

Components:
- Host: sysctl, block device and memory access
- ServiceController: systemd service queries
"""

from .host import Host, HostConfig
from .service import ServiceController, ServiceConfig

__all__ = [
    "Host",
    "HostConfig",
    "ServiceController",
    "ServiceConfig",
]
