import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from apisnip.codec import FORMATS
from apisnip.errors import ConfigError
from apisnip.fetch import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

PROGRAM_NAME = 'apisnip'
CONFIG_FILENAME = 'config.toml'


@dataclass
class Settings:
    verbose: bool = False
    format: str = None
    outfile: str = None
    timeout: float = DEFAULT_TIMEOUT


def config_path():
    base = os.environ.get('XDG_CONFIG_HOME') or os.path.join(os.path.expanduser('~'), '.config')
    return Path(base) / PROGRAM_NAME / CONFIG_FILENAME


def load_settings(path=None):
    """
    Read the ``[default]`` table of the user configuration file.

    A missing file gives the default settings.

    Raises:
        ConfigError: The file is not valid TOML or a value has the wrong type
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        logger.debug("No configuration file at %s", path)
        return Settings()

    try:
        data = tomllib.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not load configuration file {path}: {e}") from e

    section = data.get('default', {})
    if not isinstance(section, dict):
        raise ConfigError(f"[default] in {path} must be a table")

    settings = Settings()
    if 'verbose' in section:
        if not isinstance(section['verbose'], bool):
            raise ConfigError("'verbose' must be true or false")
        settings.verbose = section['verbose']
    if 'format' in section:
        if section['format'] not in FORMATS:
            raise ConfigError(f"'format' must be one of {', '.join(FORMATS)}")
        settings.format = section['format']
    if 'outfile' in section:
        if not isinstance(section['outfile'], str) or not section['outfile']:
            raise ConfigError("'outfile' must be a non-empty string")
        settings.outfile = section['outfile']
    if 'timeout' in section:
        timeout = section['timeout']
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("'timeout' must be a positive number")
        settings.timeout = float(timeout)

    logger.debug("Loaded configuration from %s", path)
    return settings
