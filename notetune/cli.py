"""
CLI - Command-line interface for notetune.

    notetune staging (status|is-enabled|enable|disable)
    notetune staging (list|diff|analysis|release) [NOTEID|solutions|all ...]
    notetune note (list|apply NOTEID|revert NOTEID)
    notetune lock remove
    notetune version
"""

import argparse
import logging
import os
import shutil
import sys
from typing import List, Optional, TextIO

from rich.console import Console

from . import __version__
from .config import AreaPaths, Config
from .context import RunContext
from .definitions import ARCH_SECTIONS
from .errors import ConfigError, ExitCode, NotetuneError
from .lock import ProcessLock, remove_lock
from .log import setup_logging
from .staging import ACTIONS, StagingCommands
from .system import ServiceController
from .tuning import NoteTuner
from .ui import ConsoleUI, InteractionManager


logger = logging.getLogger("notetune.cli")

TUNED_SERVICE = "tuned.service"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="notetune",
        description="Tune a Linux system with Notes and Solutions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    notetune staging enable
    notetune staging list
    notetune staging diff 1557506
    notetune staging release all

    notetune note apply 1557506
    notetune note revert 1557506

Environment Variables:
    NOTETUNE_ROOT     Prefix for every notetune path (chroot, tests)
    NOTETUNE_DEBUG    1 to write debug messages to the log
        """,
    )
    parser.add_argument(
        "-c", "--config",
        help="Config file (default: ./notetune.toml, ~/.config/notetune/config.toml, /etc/notetune/notetune.toml)"
    )
    parser.add_argument(
        "--root",
        help="Prefix for every notetune path"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug messages to the log"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only show warnings and errors on the terminal"
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    staging = commands.add_parser("staging", help="Inspect and release staged Notes and solutions")
    staging.add_argument("action", choices=ACTIONS)
    staging.add_argument("objects", nargs="*", metavar="OBJECT", help="NOTEID, 'solutions' or 'all' (default)")

    note = commands.add_parser("note", help="Apply and revert Notes")
    note_actions = note.add_subparsers(dest="note_action", metavar="ACTION")
    note_actions.required = True
    note_actions.add_parser("list", help="List all Notes of the working area")
    for name, text in (("apply", "Apply a Note"), ("revert", "Revert a Note")):
        sub = note_actions.add_parser(name, help=text)
        sub.add_argument("note_id", metavar="NOTEID")

    lock = commands.add_parser("lock", help="Lock file handling")
    lock.add_argument("lock_action", choices=("remove",))

    commands.add_parser("version", help="Print the notetune version")

    return parser.parse_args(argv)


# =============================================================================
# Start-up checks
# =============================================================================

def check_working_area(paths: AreaPaths) -> None:
    """
    Populate a missing working area from the package area.

    Raises:
        ConfigError: the working area cannot be created
    """
    if paths.working_notes.is_dir():
        return

    logger.warning("working area '%s' missing, copying definitions from '%s'",
                   paths.working_area, paths.package_area)
    try:
        paths.working_notes.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Unable to create working area '{paths.working_notes}': {e}") from e

    sources = []
    if paths.package_notes.is_dir():
        sources = [(src, paths.working_notes / src.name) for src in sorted(paths.package_notes.iterdir()) if src.is_file()]
    solutions = paths.package_area / "solutions"
    if solutions.is_file():
        sources.append((solutions, paths.working_area / "solutions"))

    for src, dest in sources:
        try:
            shutil.copy2(src, dest)
        except OSError as e:
            logger.error("Unable to copy '%s' to the working area: %s", src, e)


def check_architecture(ctx: RunContext) -> None:
    """
    Refuse to run on an architecture without a solutions section.

    Raises:
        ConfigError: no solutions section exists for the host architecture
    """
    if ctx.selector not in ARCH_SECTIONS.values():
        raise ConfigError(f"The system architecture ({ctx.host.machine()}) is not supported.")


def check_for_tuned(service: ServiceController) -> None:
    """Warn if tuned is tuning the same host."""
    if service.is_enabled(TUNED_SERVICE) or service.is_running(TUNED_SERVICE):
        logger.warning("%s is enabled or running and may change the same settings as notetune", TUNED_SERVICE)


# =============================================================================
# Commands
# =============================================================================

def run_note(ctx: RunContext, ui: ConsoleUI, args: argparse.Namespace) -> int:
    tuner = NoteTuner(ctx)

    if args.note_action == "list":
        rows = []
        for note in tuner.list_notes():
            marker = "applied" if note.applied else ("enabled" if note.enabled else "")
            rows.append([note.note_id, note.version, note.description, marker])
        ui.print_object_table("Notes", rows, ["Note", "Version", "Description", "State"])
        return ExitCode.OK

    if args.note_action == "apply":
        tuner.apply(args.note_id)
        ui.text(f"Note '{args.note_id}' applied.")
        return ExitCode.OK

    tuner.revert(args.note_id)
    ui.text(f"Note '{args.note_id}' reverted.")
    return ExitCode.OK


def run_cli(
    argv: Optional[List[str]] = None,
    console: Optional[Console] = None,
    stdin: Optional[TextIO] = None,
    service: Optional[ServiceController] = None,
) -> int:
    """
    Run one notetune command.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    console = console or Console()
    ui = ConsoleUI(console)

    if args.command == "version":
        ui.text(f"notetune {__version__}")
        return ExitCode.OK

    if os.geteuid() != 0:
        ui.print_error("ERROR: You need to be root to run this.")
        return ExitCode.FAILURE

    try:
        config = Config.load(args.config).override_from_args(args)
    except ConfigError as e:
        ui.print_error(f"ERROR: {e}")
        return e.exit_code
    paths = config.effective_paths

    if args.command == "lock":
        remove_lock(paths.lock_file)
        return ExitCode.OK

    setup_logging(paths.log_file, debug=config.log.debug, verbose=config.log.verbose)

    try:
        with ProcessLock(paths.lock_file):
            check_working_area(paths)
            ctx = RunContext.create(config, console=console)
            check_architecture(ctx)
            config.apply_sysconfig(ctx.sysconfig).override_from_args(args)
            setup_logging(paths.log_file, debug=config.log.debug, verbose=config.log.verbose)
            logger.debug("host: %s", ctx.host.describe())
            logger.debug("configuration:\n%s", config.summary())
            check_for_tuned(service or ServiceController())

            if args.command == "staging":
                staging = StagingCommands(ctx, ui=ui, interaction=InteractionManager(console, stream=stdin))
                return staging.run(args.action, args.objects)
            return run_note(ctx, ui, args)

    except NotetuneError as e:
        logger.error("%s", e.message)
        return e.exit_code

    except KeyboardInterrupt:
        ui.text()
        logger.warning("Interrupted by user")
        return ExitCode.INTERRUPTED


def main():
    """Main entry point."""
    sys.exit(int(run_cli()))


if __name__ == "__main__":
    main()
