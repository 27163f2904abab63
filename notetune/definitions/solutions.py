"""
Solution definitions - named lists of Note ids per architecture.
"""

import platform
from pathlib import Path
from typing import Dict, List, Optional

from .ini import parse_ini_file


SolutionDefinition = Dict[str, List[str]]

ARCH_SECTIONS = {
    "x86_64": "ArchX86",
    "amd64": "ArchX86",
    "ppc64le": "ArchPPC64LE",
}


def solution_selector(machine: Optional[str] = None) -> str:
    """
    Map the machine architecture to its section in the solutions file.

    Unknown architectures map to their own name, so lookups fail cleanly.
    """
    machine = (machine or platform.machine()).lower()
    return ARCH_SECTIONS.get(machine, machine)


def load_solutions(path: Path) -> Dict[str, SolutionDefinition]:
    """
    Parse a solutions file.

    Returns:
        {arch_section: {solution_name: [note ids]}}

    Raises:
        DefinitionError: the file cannot be read
    """
    ini = parse_ini_file(path)
    solutions: Dict[str, SolutionDefinition] = {}
    for param in ini.all_values:
        if not param.section.startswith("Arch"):
            continue
        solutions.setdefault(param.section, {})[param.key] = param.value.split()
    return solutions


def solutions_for_arch(path: Path, selector: str) -> Optional[SolutionDefinition]:
    """Solutions of one architecture, None if the section is missing."""
    return load_solutions(path).get(selector)
