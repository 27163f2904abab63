"""
NoteTuner - apply and revert Notes on the live system.

Apply runs, per parameter kind the Note defines:
1. INSPECT  - read the live values
2. SAVE     - keep them for revert
3. OPTIMISE - compute the target values
4. APPLY    - write them

Failures of one kind do not stop the others; they are collected and raised
together once every kind was processed.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..context import RunContext
from ..definitions import ParameterSet, parse_ini_file
from ..errors import ApplyError, ConfigError, DefinitionError, FailureList
from .modules import MODULES
from .snapshot import NoteSnapshot


logger = logging.getLogger(__name__)


@dataclass
class NoteInfo:
    """One Note of the working area, for listing."""
    note_id: str
    description: str
    version: str
    applied: bool
    enabled: bool


class NoteTuner:
    """Applies and reverts Notes of the working area."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def note_file(self, note_id: str) -> Path:
        return self.ctx.paths.working_notes / note_id

    def load_parameters(self, note_id: str) -> ParameterSet:
        """
        Note definition with the override file layered on top.

        Raises:
            DefinitionError: the Note does not exist or cannot be read
        """
        path = self.note_file(note_id)
        if not path.is_file():
            raise DefinitionError(f"Note '{note_id}' not found in working area '{path.parent}'")
        params = parse_ini_file(path).parameters

        override = self.ctx.paths.override_dir / note_id
        if override.is_file():
            logger.info("using override file '%s'", override)
            params = params.merged_with(parse_ini_file(override).parameters)
        return params

    def apply(self, note_id: str) -> NoteSnapshot:
        """
        Apply a Note.

        Returns:
            The saved pre-apply state

        Raises:
            DefinitionError: the Note cannot be read
            ApplyError: one or more parameters could not be set
        """
        active = self.ctx.active
        if active.is_note_applied(note_id):
            logger.info("Note '%s' already applied, nothing to do", note_id)
            return NoteSnapshot.load(active.saved_state_file(note_id))

        params = self.load_parameters(note_id)
        snapshot = NoteSnapshot.create(note_id)
        failures = FailureList()
        host = self.ctx.host

        for kind, module in MODULES.items():
            rules = module.rules(params)
            if not rules:
                continue
            state = module.inspect(host, rules)
            snapshot.add(kind, state)
            try:
                target = module.optimise(state, rules)
            except DefinitionError as e:
                logger.error("Note '%s', %s: %s", note_id, kind, e)
                failures.add(kind, e)
                continue
            try:
                module.apply(host, target)
            except ApplyError as e:
                for failure in e.failures:
                    failures.add(f"{kind}:{failure.label}", failure.message)
            logger.debug("Note '%s', %s: %s -> %s", note_id, kind, state, target)

        try:
            snapshot.save(active.saved_state_file(note_id))
        except OSError as e:
            raise ConfigError(f"Unable to save state of Note '{note_id}': {e}") from e

        active.add_to_apply_order(note_id)
        active.save()

        if not failures.ok:
            raise ApplyError(failures)
        logger.info("Note '%s' applied", note_id)
        return snapshot

    def revert(self, note_id: str) -> None:
        """
        Revert a Note to the values saved when it was applied.

        Raises:
            ConfigError: the saved state is unreadable
            ApplyError: one or more parameters could not be restored
        """
        active = self.ctx.active
        state_file = active.saved_state_file(note_id)

        if not active.is_note_applied(note_id):
            logger.info("Note '%s' is not applied, nothing to revert", note_id)
            if active.position_in_apply_order(note_id) >= 0:
                active.remove_from_apply_order(note_id)
                active.save()
            return

        try:
            snapshot = NoteSnapshot.load(state_file)
        except (OSError, ValueError, KeyError) as e:
            raise ConfigError(f"Unable to read saved state of Note '{note_id}': {e}") from e

        failures = FailureList()
        for kind in reversed(snapshot.order):
            module = MODULES.get(kind)
            if module is None:
                logger.warning("saved state of Note '%s' has unknown kind '%s'", note_id, kind)
                continue
            try:
                module.apply(self.ctx.host, snapshot.states[kind])
            except ApplyError as e:
                for failure in e.failures:
                    failures.add(f"{kind}:{failure.label}", failure.message)

        try:
            os.remove(state_file)
        except OSError as e:
            failures.add("saved state", e)

        active.remove_from_apply_order(note_id)
        active.save()

        if not failures.ok:
            raise ApplyError(failures)
        logger.info("Note '%s' reverted", note_id)

    def list_notes(self) -> List[NoteInfo]:
        """All Notes of the working area, sorted by id."""
        notes_dir = self.ctx.paths.working_notes
        try:
            names = sorted(n for n in os.listdir(notes_dir) if (notes_dir / n).is_file())
        except FileNotFoundError:
            return []

        active = self.ctx.active
        notes = []
        for name in names:
            try:
                ini = parse_ini_file(notes_dir / name)
                description = ini.version_entry("description") or ini.version_entry("name")
                version = ini.version_entry("version")
            except DefinitionError as e:
                logger.warning("unable to read Note '%s': %s", name, e)
                description, version = "", ""
            notes.append(NoteInfo(
                note_id=name,
                description=description,
                version=version,
                applied=active.is_note_applied(name),
                enabled=active.position_in_apply_order(name) >= 0,
            ))
        return notes
