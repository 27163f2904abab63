"""
ReleaseCoordinator - analyse, confirm and promote staged objects.

Releasing moves an object from the staging area into the working area, or
removes it from both areas if it is no longer shipped. The action is
irreversible, so the analysis is always shown and confirmed first.
"""

import logging
import os
from typing import Callable, List, Sequence

from ..definitions import solutions_for_arch
from ..errors import (
    DefinitionError,
    ExitCode,
    FailureList,
    ObjectNotStagedError,
    PromotionError,
    ReleaseError,
)
from .models import ALL_OBJECTS, ReleaseErrors, ReleaseOutcome, TuningObjectStatus
from .registry import Registry


logger = logging.getLogger(__name__)

PREFIX = "    --> "
CONFIRM_TEXT = "Releasing is irreversible! Are you sure"

ConfirmFn = Callable[[str], bool]


# =============================================================================
# Analysis
# =============================================================================

def analyze_note(status: TuningObjectStatus) -> List[str]:
    """Impact lines of releasing one Note."""
    lines = []
    deleted = status.is_deleted

    if deleted:
        lines.append(f"Deletion of {status.identifier}")
        override_text = "Override file exists and can be deleted."
        applied_text = "Note is enabled and must be reverted."
        enabled_sol_text = "Note is part of the currently enabled solution '{}'. Release would break the solution!"
        other_sol_text = "Note is part of the not-enabled solution(s) '{}'. Release would break the solution(s)!"
    else:
        override_text = "Override file exists and might need adjustments."
        applied_text = "Note is enabled and must be reapplied."
        enabled_sol_text = "Note is part of the currently enabled solution '{}'."
        other_sol_text = "Note is part of the not-enabled solution(s) '{}'"

    if status.has_override:
        lines.append(PREFIX + override_text)

    if not status.is_new:
        if status.is_applied:
            lines.append(PREFIX + applied_text)
        else:
            lines.append(PREFIX + "Note is not enabled, no action required.")

    for solution in status.member_of_solutions:
        if solution == status.enabled_solution:
            lines.append(PREFIX + enabled_sol_text.format(solution))
        else:
            lines.append(PREFIX + other_sol_text.format(solution))

    return lines


def analyze_solutions(
    status: TuningObjectStatus,
    staged_ids: Sequence[str],
    selector: str,
) -> List[str]:
    """
    Impact lines of releasing the solution definition.

    Raises:
        DefinitionError: the staged definition cannot be read or has no
            section for this architecture
    """
    solutions = solutions_for_arch(status.files.staging, selector)
    if solutions is None:
        raise DefinitionError(f"No solution definition available for system architecture '{selector}'.")

    lines = []
    enabled_seen = False
    for name in sorted(solutions):
        if name == status.enabled_solution:
            lines.append(PREFIX + f"Solution '{name}' is enabled and must be re-applied.")
            enabled_seen = True
        for note_id in solutions[name]:
            if note_id in staged_ids:
                lines.append(PREFIX + f"Solution '{name}' requires releasing of '{note_id}' or it breaks!")

    if status.enabled_solution and not enabled_seen:
        lines.append(
            PREFIX + f"Solution '{status.enabled_solution}' is currently enabled, but now deleted. Must be reverted."
        )
    return lines


def analyze(status: TuningObjectStatus, registry: Registry, selector: str) -> List[str]:
    """Full analysis of one staged object."""
    lines = []
    if not status.is_deleted:
        lines.append(f"Release of {status.identifier} Version {status.version} ({status.date})")
    if status.is_solutions:
        lines.extend(analyze_solutions(status, registry.identifiers, selector))
    else:
        lines.extend(analyze_note(status))
    return lines


# =============================================================================
# Promotion
# =============================================================================

def _exists(path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def promote(status: TuningObjectStatus) -> None:
    """
    Move a staged object into the working area.

    An object that is in the working area but no longer in the package area
    is removed from the working and the staging area instead. Both removals
    are attempted before failing.

    Raises:
        PromotionError: a move or removal failed
    """
    files = status.files
    if _exists(files.working) and not _exists(files.package):
        failures = FailureList()
        for area, path in (("working area", files.working), ("staging area", files.staging)):
            try:
                os.remove(path)
            except OSError as e:
                logger.error("Problems during removal of '%s' from %s: %s", status.identifier, area, e)
                failures.add(area, e)
        if not failures.ok:
            raise PromotionError(status.identifier, failures)
        logger.info("'%s' removed from working and staging area", status.identifier)
        return

    try:
        os.replace(files.staging, files.working)
    except OSError as e:
        logger.error("Problems during move of '%s' from staging to working area: %s", status.identifier, e)
        failures = FailureList()
        failures.add("move", e)
        raise PromotionError(status.identifier, failures) from e


# =============================================================================
# Release
# =============================================================================

class ReleaseCoordinator:
    """Runs analysis, confirmation and promotion for staged objects."""

    def __init__(
        self,
        registry: Registry,
        selector: str,
        confirm: ConfirmFn,
        report: Callable[[str], None] = print,
    ):
        """
        Args:
            registry: the staging registry of this run
            selector: architecture section of the solutions file
            confirm: asks the operator, returns True on 'yes'
            report: receives every analysis line
        """
        self.registry = registry
        self.selector = selector
        self.confirm = confirm
        self.report = report

    def show_analysis(self, status: TuningObjectStatus) -> None:
        for line in analyze(status, self.registry, self.selector):
            self.report(line)

    def release(self, names: Sequence[str]) -> ReleaseOutcome:
        """
        Release the named objects ('all' for everything staged).

        Returns:
            ReleaseOutcome; confirmed=False if the operator declined

        Raises:
            ObjectNotStagedError: a named object is not staged
            ReleaseError: promotion failed (exit code 126 for 'all',
                128 for a single object)
        """
        outcome = ReleaseOutcome(confirmed=True)
        for name in names or [ALL_OBJECTS]:
            if name == ALL_OBJECTS:
                step = self._release_all()
            else:
                step = self._release_one(name)
            outcome.released.extend(step.released)
            if not step.confirmed:
                outcome.confirmed = False
                return outcome
        return outcome

    def _release_all(self) -> ReleaseOutcome:
        for status in self.registry:
            self.show_analysis(status)

        if not self.confirm(CONFIRM_TEXT):
            logger.info("release aborted by user")
            return ReleaseOutcome(confirmed=False)

        outcome = ReleaseOutcome(confirmed=True, errors=ReleaseErrors())
        for status in self.registry:
            if not _exists(status.files.staging):
                logger.error(
                    "file '%s' not found in staging area, nothing to do, skipping ...",
                    status.files.staging,
                )
                outcome.errors.add(status.identifier, "not found in staging area")
                continue
            try:
                promote(status)
            except PromotionError as e:
                outcome.errors.add(status.identifier, e.failures.summary())
                continue
            outcome.released.append(status.identifier)
            logger.info("%s Version %s (%s) released", status.identifier, status.version, status.date)

        if not outcome.ok:
            raise ReleaseError(
                f"Release failed for: {', '.join(outcome.errors.labels())}",
                exit_code=ExitCode.RELEASE_ALL_FAILED,
            )
        return outcome

    def _release_one(self, name: str) -> ReleaseOutcome:
        status = self.registry.get(name)
        if status is None:
            raise ObjectNotStagedError(f"'{name}' not found in staging area, nothing to do.")

        self.show_analysis(status)
        if not self.confirm(CONFIRM_TEXT):
            logger.info("release of '%s' aborted by user", name)
            return ReleaseOutcome(confirmed=False)

        try:
            promote(status)
        except PromotionError as e:
            raise ReleaseError(str(e), exit_code=ExitCode.RELEASE_FAILED) from e

        logger.info("%s Version %s (%s) released", status.identifier, status.version, status.date)
        return ReleaseOutcome(confirmed=True, released=[status.identifier])
