"""
Route the root logger into a rotating file configured from the environment.

Importing this module is enough::

    import rotatefile.autoload  # noqa: F401

The writer is built by ``RotateFile.from_env()`` and LOG_LEVEL selects the
minimum level recorded.
"""

from .core.config import ConfigManager
from .core.rotate_file import RotateFile
from .utils.logging.handler import setup_logging

config_manager = ConfigManager()
rotate_file = RotateFile(config_manager.load_config())
handler = setup_logging(rotate_file, level=config_manager.log_level)
