"""
Staging module - three-area staging, diff and release.

Components:
- Registry: status of every staged object
- diff_object: field level comparison working vs staging
- ReleaseCoordinator: analyse, confirm and promote
- StagingCommands: the 'staging' sub commands
"""

from .models import ChangeKind, Comparison, ReleaseErrors, ReleaseOutcome, TuningObjectStatus
from .registry import Registry, build_status
from .diff import DiffTable, compare_fields, diff_object
from .release import ReleaseCoordinator, analyze, promote
from .actions import ACTIONS, StagingCommands

__all__ = [
    "ChangeKind",
    "Comparison",
    "ReleaseErrors",
    "ReleaseOutcome",
    "TuningObjectStatus",
    "Registry",
    "build_status",
    "DiffTable",
    "compare_fields",
    "diff_object",
    "ReleaseCoordinator",
    "analyze",
    "promote",
    "ACTIONS",
    "StagingCommands",
]
