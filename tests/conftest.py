"""
Shared fixtures: a temporary three-area tree, a fake /proc and /sys tree and
a RunContext pointing at both.
"""

import io
import logging
from pathlib import Path
from typing import Optional

import pytest
from rich.console import Console

from notetune.config import AreaPaths, Config
from notetune.context import RunContext
from notetune.system import Host, HostConfig


SYSCONFIG_TEXT = """\
# notetune settings
# keep this comment

STAGING="true"
TUNE_FOR_SOLUTIONS=""
TUNE_FOR_NOTES=""
NOTE_APPLY_ORDER=""
SOME_OTHER_SETTING='untouched'
"""


def note_text(
    version: str = "1",
    date: str = "01.01.2024",
    description: str = "Test note",
    body: str = "",
) -> str:
    """Definition file text with a [version] section."""
    return (
        "[version]\n"
        f"VERSION={version}\n"
        f"DATE={date}\n"
        f"DESCRIPTION={description}\n"
        "\n"
        f"{body}"
    )


class Tree:
    """Temporary notetune installation below tmp_path."""

    def __init__(self, root: Path):
        self.root = root
        self.paths = AreaPaths().under(root)
        for directory in (
            self.paths.package_notes,
            self.paths.working_notes,
            self.paths.staging_area,
            self.paths.override_dir,
            self.paths.saved_state_dir,
            self.paths.sysconfig_file.parent,
        ):
            directory.mkdir(parents=True, exist_ok=True)
        self.paths.sysconfig_file.write_text(SYSCONFIG_TEXT)

    def _note_path(self, area: str, name: str) -> Path:
        if area == "staging":
            return self.paths.staging_area / name
        base = {"package": self.paths.package_area, "working": self.paths.working_area}[area]
        if name == "solutions":
            return base / name
        return base / "notes" / name

    def write(self, area: str, name: str, text: str) -> Path:
        path = self._note_path(area, name)
        path.write_text(text)
        return path

    def path(self, area: str, name: str) -> Path:
        return self._note_path(area, name)

    def set_sysconfig(self, key: str, value: str) -> None:
        text = self.paths.sysconfig_file.read_text()
        lines = [
            f'{key}="{value}"' if line.startswith(f"{key}=") else line
            for line in text.splitlines()
        ]
        self.paths.sysconfig_file.write_text("\n".join(lines) + "\n")

    def mark_applied(self, note_id: str) -> None:
        (self.paths.saved_state_dir / note_id).write_text('{"note_id": "%s", "states": {}}' % note_id)


@pytest.fixture
def tree(tmp_path):
    return Tree(tmp_path)


@pytest.fixture
def fake_system(tmp_path):
    """Fake /proc/sys, /proc/meminfo and /sys/block below tmp_path."""
    vm = tmp_path / "proc" / "sys" / "vm"
    vm.mkdir(parents=True)
    (vm / "swappiness").write_text("60\n")
    (vm / "dirty_ratio").write_text("20\n")
    (vm / "pagecache_limit_mb").write_text("0\n")
    (vm / "pagecache_limit_ignore_dirty").write_text("1\n")
    (tmp_path / "proc" / "meminfo").write_text(
        "MemTotal:       16384000 kB\n"
        "MemFree:         8000000 kB\n"
    )

    for device, scheduler, depth in (
        ("sda", "[mq-deadline] kyber bfq none", 64),
        ("sdb", "[none] mq-deadline", 256),
    ):
        queue = tmp_path / "sys" / "block" / device / "queue"
        queue.mkdir(parents=True)
        (queue / "scheduler").write_text(scheduler + "\n")
        (queue / "nr_requests").write_text(f"{depth}\n")
    return tmp_path


@pytest.fixture
def host(tmp_path):
    return Host(HostConfig(root=tmp_path, machine="x86_64"))


@pytest.fixture
def make_ctx(tree, host):
    """Build a RunContext for the current state of the tree."""

    def _make(console: Optional[Console] = None) -> RunContext:
        config = Config(root=tree.root)
        console = console or Console(file=io.StringIO(), width=200)
        return RunContext.create(config, console=console, host=host)

    return _make


def output_of(ctx: RunContext) -> str:
    return ctx.console.file.getvalue()


@pytest.fixture(autouse=True)
def reset_notetune_logger():
    yield
    logger = logging.getLogger("notetune")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
