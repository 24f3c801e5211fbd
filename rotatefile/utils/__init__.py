"""
Utility modules for rotatefile.

This package provides:
- Backup name encoding and decoding
- Structured logging and a logging handler for rotating files
- A debounced background worker
- Filesystem, compression, disk usage and clock seams
- Log directory discovery, byte size parsing and rotation signals
"""

from .logging import *
from .async_utils import *
from .file_io import *
