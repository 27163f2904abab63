"""
Staging switch - the STAGING setting of the sysconfig file.
"""

import logging

from ..definitions import SysconfigFile
from ..errors import ConfigError, ExitCode, StagingSwitchError


logger = logging.getLogger(__name__)

STAGING_KEY = "STAGING"


def is_staging_enabled(sysconfig: SysconfigFile) -> bool:
    return sysconfig.get_string(STAGING_KEY, "false") == "true"


def status_text(sysconfig: SysconfigFile) -> str:
    if is_staging_enabled(sysconfig):
        logger.info("STAGING variable is 'true'")
        return "Staging is enabled"
    logger.info("STAGING variable is 'false'")
    return "Staging is disabled"


def set_staging(sysconfig: SysconfigFile, enabled: bool) -> None:
    """
    Rewrite STAGING in the sysconfig file, keeping every other line.

    Raises:
        StagingSwitchError: the file could not be re-read or written
            (exit code 122 on enable, 123 on disable)
    """
    action = "enabled" if enabled else "disabled"
    code = ExitCode.STAGING_ENABLE_FAILED if enabled else ExitCode.STAGING_DISABLE_FAILED
    logger.info("%s staging", "Enable" if enabled else "Disable")

    try:
        current = SysconfigFile.load(sysconfig.path)
        current.set(STAGING_KEY, "true" if enabled else "false")
        current.save()
    except ConfigError as e:
        raise StagingSwitchError(f"Staging could NOT be {action}. - '{e}'", exit_code=code) from e

    sysconfig.set(STAGING_KEY, "true" if enabled else "false")
    logger.info("Staging has been %s.", action)
