"""
ActiveConfiguration - what is currently enabled and applied on this host.

Enabled Notes are listed in NOTE_APPLY_ORDER of the sysconfig file (in the
order they get applied). A Note is applied when a saved-state snapshot for
it exists in the saved-state directory.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .definitions import SolutionDefinition, SysconfigFile, solutions_for_arch
from .errors import DefinitionError


logger = logging.getLogger(__name__)


@dataclass
class ActiveConfiguration:
    """Currently active tuning configuration."""
    sysconfig: SysconfigFile
    saved_state_dir: Path
    all_solutions: SolutionDefinition = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        sysconfig: SysconfigFile,
        saved_state_dir: Path,
        solutions_file: Path,
        selector: str,
    ) -> "ActiveConfiguration":
        """
        Build the active configuration.

        A missing or unreadable solutions file leaves the solution list empty.
        """
        all_solutions: SolutionDefinition = {}
        try:
            arch_solutions = solutions_for_arch(solutions_file, selector)
        except DefinitionError as e:
            logger.warning("no solution definitions available: %s", e)
        else:
            if arch_solutions is None:
                logger.warning("no solutions defined for architecture '%s' in '%s'", selector, solutions_file)
            else:
                all_solutions = arch_solutions
        return cls(
            sysconfig=sysconfig,
            saved_state_dir=Path(saved_state_dir),
            all_solutions=all_solutions,
        )

    @property
    def tune_for_solutions(self) -> List[str]:
        return self.sysconfig.get_list("TUNE_FOR_SOLUTIONS")

    @property
    def tune_for_notes(self) -> List[str]:
        return self.sysconfig.get_list("TUNE_FOR_NOTES")

    @property
    def note_apply_order(self) -> List[str]:
        return self.sysconfig.get_list("NOTE_APPLY_ORDER")

    @property
    def enabled_solution(self) -> str:
        """The enabled solution, empty if none."""
        solutions = self.tune_for_solutions
        return solutions[0] if solutions else ""

    def saved_state_file(self, note_id: str) -> Path:
        return self.saved_state_dir / note_id

    def is_note_applied(self, note_id: str) -> bool:
        return self.saved_state_file(note_id).is_file()

    def position_in_apply_order(self, note_id: str) -> int:
        """Index in NOTE_APPLY_ORDER, -1 if the Note is not enabled."""
        try:
            return self.note_apply_order.index(note_id)
        except ValueError:
            return -1

    def solutions_containing(self, note_id: str) -> List[str]:
        """Names of all solutions requiring the Note, sorted by name."""
        return [
            name for name in sorted(self.all_solutions)
            if note_id in self.all_solutions[name]
        ]

    def add_to_apply_order(self, note_id: str) -> None:
        order = self.note_apply_order
        if note_id not in order:
            order.append(note_id)
            self.sysconfig.set("NOTE_APPLY_ORDER", " ".join(order))

    def remove_from_apply_order(self, note_id: str) -> None:
        order = [n for n in self.note_apply_order if n != note_id]
        self.sysconfig.set("NOTE_APPLY_ORDER", " ".join(order))
        notes = [n for n in self.tune_for_notes if n != note_id]
        if notes != self.tune_for_notes:
            self.sysconfig.set("TUNE_FOR_NOTES", " ".join(notes))

    def save(self) -> None:
        """Write the sysconfig file back (raises ConfigError)."""
        self.sysconfig.save()
