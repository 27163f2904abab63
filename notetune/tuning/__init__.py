"""
Tuning module - applies and reverts Notes on the live system.

Components:
- ParameterModule: inspect/optimise/apply triple per tunable kind
- NoteSnapshot: saved pre-apply state, the 'applied' marker
- NoteTuner: apply/revert/list of Notes
"""

from .modules import MODULES, ParameterModule, get_module, pagecache_limit
from .snapshot import NoteSnapshot
from .executor import NoteInfo, NoteTuner

__all__ = [
    "MODULES",
    "ParameterModule",
    "get_module",
    "pagecache_limit",
    "NoteSnapshot",
    "NoteInfo",
    "NoteTuner",
]
