"""
Configuration management for notetune.

Supports:
- TOML config files (directory layout)
- Environment variables
- Command-line overrides
- FHS defaults

Priority (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Config file
4. Defaults

The system settings themselves (STAGING, NOTE_APPLY_ORDER, ...) live in the
sysconfig file, see definitions/sysconfig.py.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError


# Default config file locations (searched in order)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / "notetune.toml",
    Path.home() / ".config" / "notetune" / "config.toml",
    Path("/etc/notetune/notetune.toml"),
]

ROOT_ENV = "NOTETUNE_ROOT"
DEBUG_ENV = "NOTETUNE_DEBUG"
VERBOSE_ENV = "NOTETUNE_VERBOSE"


@dataclass
class AreaPaths:
    """Locations of the three areas and the runtime files."""
    package_area: Path = Path("/usr/share/notetune")
    working_area: Path = Path("/var/lib/notetune/working")
    staging_area: Path = Path("/var/lib/notetune/staging/latest")
    override_dir: Path = Path("/etc/notetune/override")
    saved_state_dir: Path = Path("/run/notetune/saved_state")
    sysconfig_file: Path = Path("/etc/sysconfig/notetune")
    log_file: Path = Path("/var/log/notetune/notetune.log")
    lock_file: Path = Path("/run/notetune.lock")

    @property
    def package_notes(self) -> Path:
        return self.package_area / "notes"

    @property
    def working_notes(self) -> Path:
        return self.working_area / "notes"

    def under(self, root: Path) -> "AreaPaths":
        """Re-root every absolute path below `root`."""
        root = Path(root)
        changes = {}
        for f in fields(self):
            value = getattr(self, f.name)
            changes[f.name] = root / Path(value).relative_to(Path(value).anchor)
        return replace(self, **changes)


@dataclass
class LogConfig:
    """Logging configuration."""
    debug: bool = False
    verbose: bool = True


@dataclass
class Config:
    """Main configuration container."""
    paths: AreaPaths = field(default_factory=AreaPaths)
    log: LogConfig = field(default_factory=LogConfig)
    root: Optional[Path] = None

    # Source tracking
    _config_file: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load configuration from file and environment.

        Args:
            config_path: Explicit path to config file. If None, searches default locations.

        Returns:
            Config instance with loaded values
        """
        config = cls()

        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
        else:
            path = cls._find_config_file()

        if path:
            config = cls._load_from_file(path)
            config._config_file = path

        return config.override_from_env(os.environ)

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """Find config file in default locations."""
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load config from TOML file."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Unable to read config file '{path}': {e}") from e

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "paths" in data:
            known = {f.name for f in fields(AreaPaths)}
            values = {k: Path(v) for k, v in data["paths"].items() if k in known}
            config.paths = replace(config.paths, **values)

        if "log" in data:
            log = data["log"]
            config.log = LogConfig(
                debug=bool(log.get("debug", config.log.debug)),
                verbose=bool(log.get("verbose", config.log.verbose)),
            )

        if data.get("root"):
            config.root = Path(data["root"])

        return config

    def override_from_env(self, environ) -> "Config":
        """Apply NOTETUNE_* environment variables."""
        if environ.get(ROOT_ENV):
            self.root = Path(environ[ROOT_ENV])
        if environ.get(DEBUG_ENV):
            self.log.debug = environ[DEBUG_ENV] == "1"
        if environ.get(VERBOSE_ENV):
            self.log.verbose = environ[VERBOSE_ENV] != "off"
        return self

    def override_from_args(self, args) -> "Config":
        """
        Override config values from argparse namespace.

        Args with value None are ignored (keeping config file values).
        """
        if getattr(args, "root", None):
            self.root = Path(args.root)
        if getattr(args, "debug", None):
            self.log.debug = True
        if getattr(args, "quiet", None):
            self.log.verbose = False
        return self

    def apply_sysconfig(self, sysconfig) -> "Config":
        """
        Take DEBUG/VERBOSE from the sysconfig file unless the environment
        already decided.
        """
        if not os.environ.get(DEBUG_ENV):
            self.log.debug = sysconfig.get_string("DEBUG", "0") == "1"
        if not os.environ.get(VERBOSE_ENV):
            self.log.verbose = sysconfig.get_string("VERBOSE", "on") != "off"
        return self

    @property
    def effective_paths(self) -> AreaPaths:
        """Paths with the root prefix applied."""
        if self.root:
            return self.paths.under(self.root)
        return self.paths

    def summary(self, include_config_path: bool = True) -> str:
        """Generate human-readable config summary."""
        lines = []
        paths = self.effective_paths

        if include_config_path:
            if self._config_file:
                lines.append(f"Config: {self._config_file}")
            else:
                lines.append("Config: (defaults)")

        lines.append(f"Package area: {paths.package_area}")
        lines.append(f"Working area: {paths.working_area}")
        lines.append(f"Staging area: {paths.staging_area}")
        lines.append(f"Sysconfig:    {paths.sysconfig_file}")
        lines.append(f"Log:          {paths.log_file}")

        return "\n".join(lines)
