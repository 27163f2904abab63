"""
notetune - Linux system tuning with Notes and Solutions

A Note is a named bundle of tuning parameters (kernel sysctls, page cache
limit, block device settings); a Solution is a named bundle of Notes.
Notes and the solution definition live in three areas:

- package area: read-only copies as shipped
- working area: the copies in effect
- staging area: updated copies waiting to be released

Usage:
    notetune staging list
    notetune staging diff all
    notetune staging release 1557506
    notetune note apply 1557506

    # Programmatically
    from notetune import Config, RunContext, StagingCommands

    ctx = RunContext.create(Config.load())
    StagingCommands(ctx).run("list")
"""

__version__ = "1.0.0"

from .config import AreaPaths, Config
from .context import RunContext
from .errors import ExitCode, NotetuneError
from .staging import Registry, ReleaseCoordinator, StagingCommands
from .tuning import NoteTuner

__all__ = [
    "__version__",
    "AreaPaths",
    "Config",
    "RunContext",
    "ExitCode",
    "NotetuneError",
    "Registry",
    "ReleaseCoordinator",
    "StagingCommands",
    "NoteTuner",
]
