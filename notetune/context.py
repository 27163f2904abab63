"""
RunContext - everything one invocation works with, built once at start.

Components receive the context explicitly instead of reaching into module
level state.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from .app import ActiveConfiguration
from .config import AreaPaths, Config
from .definitions import SysconfigFile, solution_selector
from .system import Host, HostConfig


@dataclass
class RunContext:
    """Per-invocation context."""
    config: Config
    paths: AreaPaths
    sysconfig: SysconfigFile
    active: ActiveConfiguration
    host: Host
    console: Console
    selector: str

    @classmethod
    def create(
        cls,
        config: Config,
        console: Optional[Console] = None,
        host: Optional[Host] = None,
        sysconfig: Optional[SysconfigFile] = None,
    ) -> "RunContext":
        """
        Build the context from configuration.

        Raises:
            ConfigError: the sysconfig file cannot be read
        """
        paths = config.effective_paths
        if host is None:
            host = Host(HostConfig(root=config.root or HostConfig.root))
        if sysconfig is None:
            sysconfig = SysconfigFile.load(paths.sysconfig_file)
        selector = solution_selector(host.machine())
        active = ActiveConfiguration.load(
            sysconfig=sysconfig,
            saved_state_dir=paths.saved_state_dir,
            solutions_file=paths.working_area / "solutions",
            selector=selector,
        )
        return cls(
            config=config,
            paths=paths,
            sysconfig=sysconfig,
            active=active,
            host=host,
            console=console or Console(),
            selector=selector,
        )
