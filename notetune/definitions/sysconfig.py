"""
Sysconfig file handling - shell style KEY="value" settings.

The file is rewritten line by line: comments, blank lines and unknown
settings are preserved verbatim, only the lines of changed keys are
replaced (or appended when the key is new).
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import ConfigError


_ASSIGN_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


@dataclass
class SysconfigFile:
    """In-memory representation of a sysconfig file."""
    path: Optional[Path] = None
    lines: List[str] = field(default_factory=list)
    values: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> "SysconfigFile":
        conf = cls(path=path)
        for line in text.splitlines():
            conf.lines.append(line)
            if line.lstrip().startswith("#"):
                continue
            match = _ASSIGN_RE.match(line)
            if match:
                conf.values[match.group(1)] = _unquote(match.group(2))
        return conf

    @classmethod
    def load(cls, path: Path, allow_missing: bool = False) -> "SysconfigFile":
        """
        Load a sysconfig file.

        Args:
            path: file to read
            allow_missing: return an empty file instead of failing when the
                file does not exist

        Raises:
            ConfigError: the file cannot be read
        """
        path = Path(path)
        try:
            text = path.read_text()
        except FileNotFoundError as e:
            if allow_missing:
                return cls(path=path)
            raise ConfigError(f"Unable to read file '{path}': {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Unable to read file '{path}': {e}") from e
        return cls.parse(text, path=path)

    def get_string(self, key: str, default: str = "") -> str:
        return self.values.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.values.get(key)
        if value is None or value == "":
            return default
        return value.strip().lower() in ("1", "yes", "true", "on")

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.values.get(key, "").strip())
        except ValueError:
            return default

    def get_list(self, key: str) -> List[str]:
        """Space separated value as a list."""
        return self.values.get(key, "").split()

    def set(self, key: str, value: str) -> None:
        """Set a value, replacing the existing assignment line in place."""
        new_line = f'{key}="{value}"'
        for index, line in enumerate(self.lines):
            if line.lstrip().startswith("#"):
                continue
            match = _ASSIGN_RE.match(line)
            if match and match.group(1) == key:
                self.lines[index] = new_line
                break
        else:
            self.lines.append(new_line)
        self.values[key] = value

    def to_text(self) -> str:
        return "\n".join(self.lines) + "\n"

    def save(self, path: Optional[Path] = None) -> None:
        """
        Write the file back.

        Raises:
            ConfigError: the file cannot be written
        """
        target = Path(path or self.path)
        try:
            target.write_text(self.to_text())
        except OSError as e:
            raise ConfigError(f"Unable to write file '{target}': {e}") from e
