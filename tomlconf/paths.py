import logging
import os
import re
from pathlib import Path

import appdirs

from .errors import PathResolutionError

logger = logging.getLogger(__name__)


def _project_name(qualifier, organization, application):
    """Directory name used for the app on the current platform."""
    if appdirs.system == 'darwin':
        parts = [re.sub(r'\s+', '-', p.strip()) for p in (qualifier, organization, application)]
        return '.'.join(p for p in parts if p)
    return re.sub(r'\s+', '', application).lower()


def config_dir(qualifier, organization, application):
    """Return the per-user config directory for an application.

    Linux: $XDG_CONFIG_HOME/<application> (lower-cased, no spaces)
    macOS: ~/Library/Application Support/<qualifier>.<organization>.<application>
    Windows: %APPDATA%\\<organization>\\<application>\\config
    """
    project = _project_name(qualifier, organization, application)
    if not project:
        raise PathResolutionError(
            f"Cannot build a config directory name from application {application!r}"
        )
    try:
        if appdirs.system == 'win32':
            base = os.path.join(
                appdirs.user_config_dir(application.strip(), organization.strip() or False, roaming=True),
                'config',
            )
        else:
            base = appdirs.user_config_dir(project)
    except Exception as e:
        raise PathResolutionError(f"Cannot find config path: {e}") from e
    path = Path(base)
    if not path.is_absolute():
        # expanduser leaves '~' in place when there is no home directory
        raise PathResolutionError(f"Cannot find config path: {base} is not absolute")
    return path


def find_path(qualifier, organization, application, filename):
    """Locate the path of the config file. Nothing is created."""
    if not filename:
        raise PathResolutionError("Config filename must not be empty")
    path = config_dir(qualifier, organization, application) / filename
    logger.debug("Resolved config path: %s", path)
    return path
