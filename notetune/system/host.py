"""
Host - direct accessors for kernel tunables, block devices and memory.

Reads and writes go through /proc/sys and /sys/block below a configurable
root, so tests (and chroot installs) can point at a fake tree.
"""

import os
import platform
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class HostConfig:
    """Configuration for host access."""
    root: Path = Path("/")
    machine: Optional[str] = None


class Host:
    """
    Single-value OS accessors.

    Every method either returns a value or raises OSError.
    """

    def __init__(self, config: Optional[HostConfig] = None):
        self.config = config or HostConfig()
        self.root = Path(self.config.root)

    # =========================================================================
    # Kernel tunables
    # =========================================================================

    def _sysctl_path(self, name: str) -> Path:
        return self.root / "proc" / "sys" / name.replace(".", "/")

    def get_sysctl(self, name: str) -> str:
        """Current value of a sysctl, whitespace normalised."""
        value = self._sysctl_path(name).read_text()
        return " ".join(value.split())

    def set_sysctl(self, name: str, value: str) -> None:
        path = self._sysctl_path(name)
        if not path.exists():
            raise FileNotFoundError(f"sysctl '{name}' not available ({path})")
        path.write_text(f"{value}\n")

    # =========================================================================
    # Block devices
    # =========================================================================

    def _queue_path(self, device: str, param: str) -> Path:
        return self.root / "sys" / "block" / device / "queue" / param

    def block_devices(self) -> List[str]:
        """Block devices with a queue directory, sorted by name."""
        block_dir = self.root / "sys" / "block"
        try:
            entries = sorted(os.listdir(block_dir))
        except FileNotFoundError:
            return []
        return [d for d in entries if (block_dir / d / "queue").is_dir()]

    def schedulers(self, device: str) -> List[str]:
        """Available schedulers of a device, e.g. ['mq-deadline', 'kyber', 'none']."""
        raw = self._queue_path(device, "scheduler").read_text()
        return [s.strip("[]") for s in raw.split()]

    def get_scheduler(self, device: str) -> str:
        """Active scheduler of a device (the bracketed entry)."""
        raw = self._queue_path(device, "scheduler").read_text()
        match = re.search(r"\[([^\]]+)\]", raw)
        if match:
            return match.group(1)
        return raw.strip()

    def set_scheduler(self, device: str, scheduler: str) -> None:
        path = self._queue_path(device, "scheduler")
        choices = self.schedulers(device)
        if scheduler not in choices:
            raise ValueError(f"scheduler '{scheduler}' is not valid for '{device}' ({' '.join(choices)})")
        path.write_text(f"{scheduler}\n")
        # sysfs answers with the bracketed list, a plain file keeps what was written
        if "[" not in path.read_text():
            path.write_text(" ".join(f"[{s}]" if s == scheduler else s for s in choices) + "\n")

    def get_nr_requests(self, device: str) -> int:
        return int(self._queue_path(device, "nr_requests").read_text().strip())

    def set_nr_requests(self, device: str, value: int) -> None:
        path = self._queue_path(device, "nr_requests")
        if not path.exists():
            raise FileNotFoundError(f"nr_requests not available for '{device}' ({path})")
        path.write_text(f"{int(value)}\n")

    # =========================================================================
    # Memory / architecture
    # =========================================================================

    def mem_total_mb(self) -> int:
        """Total main memory in MB (from /proc/meminfo)."""
        meminfo = (self.root / "proc" / "meminfo").read_text()
        match = re.search(r"^MemTotal:\s+(\d+)\s*kB", meminfo, re.MULTILINE)
        if not match:
            raise OSError("MemTotal not found in /proc/meminfo")
        return int(match.group(1)) // 1024

    def machine(self) -> str:
        return self.config.machine or platform.machine()

    def describe(self) -> Dict[str, str]:
        """Short host summary for logs."""
        info = {"machine": self.machine(), "root": str(self.root)}
        try:
            info["memory_mb"] = str(self.mem_total_mb())
        except OSError:
            info["memory_mb"] = "unknown"
        return info
