"""
Staging commands - status, enable/disable, list, diff, analysis, release.

Each command returns the process exit code; fatal problems are raised as
NotetuneError subclasses and mapped to exit codes by the CLI.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..context import RunContext
from ..errors import ExitCode
from ..ui import ConsoleUI, InteractionManager
from .diff import diff_object
from .models import ALL_OBJECTS
from .registry import Registry
from .release import ReleaseCoordinator, analyze
from .switch import is_staging_enabled, set_staging, status_text


logger = logging.getLogger(__name__)

RELEASE_REMINDER = "Remember: To release from staging use the command 'notetune staging release ...'."
DIFF_REMINDER = "          You can check the differences with 'notetune staging diff ...'."
ANALYSIS_REMINDER = (
    "Remember: To release from staging use the command 'notetune staging release ...'. "
    "Check the differences first with 'notetune staging diff...'."
)

ACTIONS = ("status", "is-enabled", "enable", "disable", "list", "diff", "analysis", "release")


class StagingCommands:
    """Dispatches the 'staging' sub commands."""

    def __init__(
        self,
        ctx: RunContext,
        ui: Optional[ConsoleUI] = None,
        interaction: Optional[InteractionManager] = None,
    ):
        self.ctx = ctx
        self.ui = ui or ConsoleUI(ctx.console)
        self.interaction = interaction or InteractionManager(ctx.console)
        self._registry: Optional[Registry] = None

        self._handlers: Dict[str, Callable[[List[str]], int]] = {
            "status": self._cmd_status,
            "is-enabled": self._cmd_is_enabled,
            "enable": self._cmd_enable,
            "disable": self._cmd_disable,
            "list": self._cmd_list,
            "diff": self._cmd_diff,
            "analysis": self._cmd_analysis,
            "release": self._cmd_release,
        }

    @property
    def registry(self) -> Registry:
        """Registry of the staging area, built on first use."""
        if self._registry is None:
            self._registry = Registry.build(self.ctx)
        return self._registry

    def run(self, action: str, objects: Sequence[str] = ()) -> int:
        handler = self._handlers.get(action)
        if handler is None:
            raise ValueError(f"unknown staging action '{action}'")
        return handler(list(objects))

    def _precondition_failed(self) -> bool:
        """Staging disabled or empty: tell the operator, nothing to do."""
        if not is_staging_enabled(self.ctx.sysconfig):
            self.ui.text("ATTENTION: Staging is currently disabled. Please enable staging first and try again.")
            return True
        if len(self.registry) == 0:
            self.ui.text("Empty staging area, no Notes or solutions available. So nothing to do")
            return True
        return False

    # =========================================================================
    # Switch
    # =========================================================================

    def _cmd_status(self, objects: List[str]) -> int:
        self.ui.text(status_text(self.ctx.sysconfig))
        return ExitCode.OK

    def _cmd_is_enabled(self, objects: List[str]) -> int:
        if is_staging_enabled(self.ctx.sysconfig):
            return ExitCode.OK
        return ExitCode.FAILURE

    def _cmd_enable(self, objects: List[str]) -> int:
        set_staging(self.ctx.sysconfig, True)
        return ExitCode.OK

    def _cmd_disable(self, objects: List[str]) -> int:
        set_staging(self.ctx.sysconfig, False)
        return ExitCode.OK

    # =========================================================================
    # Inspection
    # =========================================================================

    def _cmd_list(self, objects: List[str]) -> int:
        if self._precondition_failed():
            return ExitCode.OK

        self.ui.text()
        for status in self.registry:
            name = status.identifier
            sep = "\t" if len(name) >= 8 else "\t\t"
            self.ui.text(f"\t{name}{sep}{status.description}")
            self.ui.text(f"\t\t\t({status.change.value})")
        self.ui.text()
        self.ui.text(RELEASE_REMINDER)
        self.ui.text(DIFF_REMINDER)
        return ExitCode.OK

    def _expand(self, objects: List[str]) -> List[str]:
        names: List[str] = []
        for name in objects or [ALL_OBJECTS]:
            if name == ALL_OBJECTS:
                names.extend(self.registry.identifiers)
            else:
                names.append(name)
        return names

    def _cmd_diff(self, objects: List[str]) -> int:
        if self._precondition_failed():
            return ExitCode.OK

        for name in self._expand(objects):
            status = self.registry.get(name)
            if status is None:
                logger.error("'%s' not found in staging area, skipping diff", name)
                continue
            table = diff_object(status, self.ctx.selector)
            if table is None:
                continue
            self.ui.lines(table.lines())
            self.ui.text()

        self.ui.text()
        self.ui.text(RELEASE_REMINDER)
        return ExitCode.OK

    def _cmd_analysis(self, objects: List[str]) -> int:
        if self._precondition_failed():
            return ExitCode.OK

        self.ui.text()
        for name in self._expand(objects):
            status = self.registry.get(name)
            if status is None:
                logger.error("'%s' not found in staging area, skipping analysis", name)
                continue
            self.ui.lines(analyze(status, self.registry, self.ctx.selector))

        self.ui.text()
        self.ui.text(ANALYSIS_REMINDER)
        return ExitCode.OK

    # =========================================================================
    # Release
    # =========================================================================

    def _cmd_release(self, objects: List[str]) -> int:
        if self._precondition_failed():
            return ExitCode.OK

        coordinator = ReleaseCoordinator(
            registry=self.registry,
            selector=self.ctx.selector,
            confirm=self.interaction.confirm,
            report=self.ui.text,
        )
        outcome = coordinator.release(objects or [ALL_OBJECTS])
        if not outcome.confirmed:
            logger.info("release aborted by the operator")
        return ExitCode.OK
