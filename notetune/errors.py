"""
Error types for notetune.

Every error carries the process exit code the CLI reports for it, so calling
scripts can tell failure classes apart.

Batch operations do not raise on the first failure; they return (or raise)
a collection of labelled failures instead.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class ExitCode(IntEnum):
    """Process exit codes."""
    OK = 0
    FAILURE = 1
    STAGING_ENABLE_FAILED = 122
    STAGING_DISABLE_FAILED = 123
    RELEASE_ALL_FAILED = 126
    NOT_IN_STAGING = 127
    RELEASE_FAILED = 128
    INTERRUPTED = 130


class NotetuneError(Exception):
    """Base class for all notetune errors."""
    exit_code: int = ExitCode.FAILURE

    def __init__(self, message: str = "", exit_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(NotetuneError):
    """The system configuration cannot be read or written, or the host is not supported."""
    pass


class DefinitionError(NotetuneError):
    """A Note or solution definition file cannot be read."""
    pass


class StagingSwitchError(NotetuneError):
    """Staging could not be enabled or disabled."""
    pass


class ObjectNotStagedError(NotetuneError):
    """The requested object is not part of the staging area."""
    exit_code = ExitCode.NOT_IN_STAGING


class ReleaseError(NotetuneError):
    """Releasing one or more objects failed."""
    exit_code = ExitCode.RELEASE_FAILED


class LockError(NotetuneError):
    """Another instance already holds the process lock."""
    pass


@dataclass(frozen=True)
class Failure:
    """One labelled failure of a batch operation."""
    label: str
    message: str

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


@dataclass
class FailureList:
    """Collected failures of a batch operation."""
    failures: List[Failure] = field(default_factory=list)

    def add(self, label: str, message: str) -> None:
        self.failures.append(Failure(label=label, message=str(message)))

    @property
    def ok(self) -> bool:
        return not self.failures

    def labels(self) -> List[str]:
        return [f.label for f in self.failures]

    def summary(self) -> str:
        return "; ".join(str(f) for f in self.failures)

    def __len__(self) -> int:
        return len(self.failures)

    def __iter__(self):
        return iter(self.failures)


class PromotionError(NotetuneError):
    """Moving or removing an object between the areas failed."""

    def __init__(self, identifier: str, failures: FailureList):
        super().__init__(f"Problems during release of '{identifier}': {failures.summary()}")
        self.identifier = identifier
        self.failures = failures


class ApplyError(NotetuneError):
    """One or more parameter writes failed."""

    def __init__(self, failures: FailureList):
        super().__init__(failures.summary())
        self.failures = failures
