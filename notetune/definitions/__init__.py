"""
Definition files - Note/solution INI files and the sysconfig file.
"""

from .ini import (
    IniFile,
    IniParam,
    ParameterSet,
    parse_ini_file,
    parse_ini_text,
    REMINDER_KEY,
    VERSION_SECTION,
)
from .sysconfig import SysconfigFile
from .solutions import ARCH_SECTIONS, SolutionDefinition, load_solutions, solution_selector, solutions_for_arch

__all__ = [
    "IniFile",
    "IniParam",
    "ParameterSet",
    "parse_ini_file",
    "parse_ini_text",
    "REMINDER_KEY",
    "VERSION_SECTION",
    "SysconfigFile",
    "ARCH_SECTIONS",
    "SolutionDefinition",
    "load_solutions",
    "solution_selector",
    "solutions_for_arch",
]
