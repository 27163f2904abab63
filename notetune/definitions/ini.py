"""
INI definition parser - reads Note and solution definition files.

A definition file looks like:

    [version]
    VERSION=16
    DATE=11.08.2020
    DESCRIPTION=Linux paging improvements

    [sysctl]
    vm.swappiness = 10

    [reminder]
    # free text for the operator
    Check the swap layout before applying.

Lines starting with '#' or ';' are comments, except inside the reminder
section where every line belongs to the single 'reminder' value.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import DefinitionError


VERSION_SECTION = "version"
REMINDER_SECTION = "reminder"
REMINDER_KEY = "reminder"

_SECTION_RE = re.compile(r"^\[([^\]]+)\]\s*$")
_PARAM_RE = re.compile(r"^([^=<>\s]+)\s*(=|<=|>=|<|>)\s*(.*)$")


@dataclass(frozen=True)
class IniParam:
    """A single key/value line of a definition file."""
    section: str
    key: str
    value: str
    operator: str = "="


@dataclass
class ParameterSet:
    """
    Ordered mapping of key -> value, grouped by section.

    The common currency between the parser, the diff engine and the
    parameter modules.
    """
    sections: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def set(self, section: str, key: str, value: str) -> None:
        self.sections.setdefault(section, {})[key] = value

    def section(self, name: str) -> Dict[str, str]:
        """Return the key/value pairs of one section (empty if missing)."""
        return dict(self.sections.get(name, {}))

    def flatten(
        self,
        only: Optional[str] = None,
        exclude: Tuple[str, ...] = (),
    ) -> Dict[str, str]:
        """
        Merge sections into one key -> value mapping.

        Args:
            only: restrict to this section
            exclude: section names to skip

        Later sections win on duplicate keys.
        """
        merged: Dict[str, str] = {}
        for name, values in self.sections.items():
            if only is not None and name != only:
                continue
            if name in exclude:
                continue
            merged.update(values)
        return merged

    def merged_with(self, other: "ParameterSet") -> "ParameterSet":
        """Return a copy with every value of `other` layered on top."""
        result = ParameterSet({name: dict(values) for name, values in self.sections.items()})
        for name, values in other.sections.items():
            for key, value in values.items():
                result.set(name, key, value)
        return result

    def __iter__(self) -> Iterator[Tuple[str, str, str]]:
        for name, values in self.sections.items():
            for key, value in values.items():
                yield name, key, value

    def __len__(self) -> int:
        return sum(len(values) for values in self.sections.values())


@dataclass
class IniFile:
    """Parsed definition file."""
    path: Optional[Path]
    all_values: List[IniParam] = field(default_factory=list)

    @property
    def parameters(self) -> ParameterSet:
        params = ParameterSet()
        for param in self.all_values:
            params.set(param.section, param.key, param.value)
        return params

    def version_entry(self, name: str) -> str:
        """Case-insensitive lookup in the [version] section."""
        wanted = name.lower()
        for param in self.all_values:
            if param.section.lower() == VERSION_SECTION and param.key.lower() == wanted:
                return param.value
        return ""


def _strip_value(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_ini_text(text: str, path: Optional[Path] = None) -> IniFile:
    """Parse definition text into an IniFile."""
    ini = IniFile(path=path)
    section = ""
    reminder: List[str] = []

    for raw in text.splitlines():
        line = raw.strip()
        match = _SECTION_RE.match(line)
        if match:
            section = match.group(1).strip()
            continue

        if section.lower() == REMINDER_SECTION:
            if line:
                reminder.append(line)
            continue

        if not line or line.startswith("#") or line.startswith(";"):
            continue

        match = _PARAM_RE.match(line)
        if not match:
            # tolerate free text lines outside the reminder section
            continue

        key, operator, value = match.groups()
        ini.all_values.append(IniParam(
            section=section,
            key=key.strip(),
            value=_strip_value(value),
            operator=operator,
        ))

    if reminder:
        ini.all_values.append(IniParam(
            section=REMINDER_SECTION,
            key=REMINDER_KEY,
            value="\n".join(reminder),
        ))

    return ini


def parse_ini_file(path: Path) -> IniFile:
    """
    Read and parse a definition file.

    Raises:
        DefinitionError: the file cannot be read
    """
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise DefinitionError(f"Unable to read definition file '{path}': {e}") from e
    return parse_ini_text(text, path=Path(path))
