"""
Data models for the staging engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple

from ..errors import FailureList


SOLUTIONS_ID = "solutions"
ALL_OBJECTS = "all"
MISSING_VALUE = "-"


class ChangeKind(str, Enum):
    """How a staged object differs from the working area."""
    NEW = "new"            # not in working area, only staged
    DELETED = "deleted"    # in working area, no longer shipped
    UPDATED = "updated"    # everything else


@dataclass(frozen=True)
class AreaFiles:
    """The three locations of one object."""
    package: Path
    working: Path
    staging: Path


@dataclass(frozen=True)
class TuningObjectStatus:
    """Status of one staged Note or of the solution definition."""
    identifier: str
    description: str
    version: str
    date: str
    files: AreaFiles
    change: ChangeKind
    has_override: bool = False
    is_applied: bool = False
    is_enabled: bool = False
    member_of_solutions: Tuple[str, ...] = ()
    enabled_solution: str = ""

    def __post_init__(self):
        if not isinstance(self.change, ChangeKind):
            raise TypeError(f"change must be a ChangeKind, got {self.change!r}")

    @property
    def is_new(self) -> bool:
        return self.change is ChangeKind.NEW

    @property
    def is_deleted(self) -> bool:
        return self.change is ChangeKind.DELETED

    @property
    def is_updated(self) -> bool:
        return self.change is ChangeKind.UPDATED

    @property
    def is_solutions(self) -> bool:
        return self.identifier == SOLUTIONS_ID

    @property
    def solutions_display(self) -> str:
        return ", ".join(self.member_of_solutions)


@dataclass(frozen=True)
class Comparison:
    """One differing field between working and staging copy."""
    field_name: str
    working_value: str
    staging_value: str
    match: bool = False


ComparisonMap = Dict[str, Comparison]


@dataclass
class ReleaseErrors(FailureList):
    """Failures of a release run, one entry per object."""
    pass


@dataclass
class ReleaseOutcome:
    """Result of a release command."""
    confirmed: bool
    released: list = field(default_factory=list)
    errors: ReleaseErrors = field(default_factory=ReleaseErrors)

    @property
    def ok(self) -> bool:
        return self.errors.ok
