"""
ServiceController - queries systemd services.

Used to detect a running tuned daemon, which would fight over the same
tunables.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional


logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """Configuration for service controller."""
    systemctl: str = "systemctl"
    timeout: int = 10  # seconds


class ServiceController:
    """Thin wrapper around systemctl."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        self.config = config or ServiceConfig()

    def _run_command(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run systemctl with the given arguments."""
        return subprocess.run(
            [self.config.systemctl, *args],
            capture_output=True,
            text=True,
            timeout=self.config.timeout,
            check=False,
        )

    def _query(self, verb: str, service: str) -> str:
        try:
            result = self._run_command([verb, service])
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("systemctl %s %s failed: %s", verb, service, e)
            return "unknown"
        return result.stdout.strip()

    def is_enabled(self, service: str) -> bool:
        """Check if a service is enabled."""
        return self._query("is-enabled", service) == "enabled"

    def is_running(self, service: str) -> bool:
        """Check if a service is active."""
        return self._query("is-active", service) == "active"
