"""
Registry - status of every object in the staging area.

The registry is built once per invocation from the directory listing of
the staging area, cross-checked against the working area, the package area
and the active configuration.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from ..context import RunContext
from ..definitions import parse_ini_file
from ..errors import DefinitionError
from .models import AreaFiles, ChangeKind, SOLUTIONS_ID, TuningObjectStatus


logger = logging.getLogger(__name__)

SOLUTIONS_DESCRIPTION = "Definition of solutions"


def staged_identifiers(staging_area: Path) -> List[str]:
    """Sorted names of all regular files in the staging area."""
    try:
        entries = os.listdir(staging_area)
    except FileNotFoundError:
        return []
    return sorted(e for e in entries if (Path(staging_area) / e).is_file())


def area_files(ctx: RunContext, identifier: str) -> AreaFiles:
    """Resolve the three locations of an object."""
    paths = ctx.paths
    staging = paths.staging_area / identifier
    if identifier == SOLUTIONS_ID:
        return AreaFiles(
            package=paths.package_area / identifier,
            working=paths.working_area / identifier,
            staging=staging,
        )
    return AreaFiles(
        package=paths.package_notes / identifier,
        working=paths.working_notes / identifier,
        staging=staging,
    )


def _exists(path: Path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("unable to check '%s': %s", path, e)
        return False
    return True


def change_kind(files: AreaFiles) -> ChangeKind:
    """Decide new/deleted/updated from file presence."""
    if not _exists(files.working):
        return ChangeKind.NEW
    if not _exists(files.package):
        return ChangeKind.DELETED
    return ChangeKind.UPDATED


def _read_metadata(identifier: str, staging_file: Path) -> Dict[str, str]:
    meta = {"description": "", "version": "", "date": ""}
    try:
        ini = parse_ini_file(staging_file)
    except DefinitionError as e:
        logger.warning("unable to read metadata of '%s': %s", identifier, e)
        return meta
    meta["description"] = ini.version_entry("description") or ini.version_entry("name")
    meta["version"] = ini.version_entry("version")
    meta["date"] = ini.version_entry("date")
    return meta


def build_status(ctx: RunContext, identifier: str) -> TuningObjectStatus:
    """Build the status record of one staged object."""
    files = area_files(ctx, identifier)
    meta = _read_metadata(identifier, files.staging)
    description = meta["description"]
    if identifier == SOLUTIONS_ID and not description:
        description = SOLUTIONS_DESCRIPTION

    active = ctx.active
    return TuningObjectStatus(
        identifier=identifier,
        description=description,
        version=meta["version"],
        date=meta["date"],
        files=files,
        change=change_kind(files),
        has_override=_exists(ctx.paths.override_dir / identifier),
        is_applied=active.is_note_applied(identifier),
        is_enabled=active.position_in_apply_order(identifier) >= 0,
        member_of_solutions=tuple(active.solutions_containing(identifier)),
        enabled_solution=active.enabled_solution,
    )


class Registry:
    """Immutable list of staged objects, indexed by identifier."""

    def __init__(self, objects: List[TuningObjectStatus]):
        self._objects = list(objects)
        self._by_id = {obj.identifier: obj for obj in self._objects}

    @classmethod
    def build(cls, ctx: RunContext) -> "Registry":
        objects = [build_status(ctx, name) for name in staged_identifiers(ctx.paths.staging_area)]
        logger.debug("staging registry: %s", ", ".join(o.identifier for o in objects) or "(empty)")
        return cls(objects)

    @property
    def identifiers(self) -> List[str]:
        return [obj.identifier for obj in self._objects]

    def get(self, identifier: str) -> Optional[TuningObjectStatus]:
        return self._by_id.get(identifier)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._by_id

    def __iter__(self):
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)
