"""
File I/O utilities for rotated log files.

This package provides:
- A FileSystem seam for every path operation rotation performs
- Gzip compression of backups that never loses the source on failure
"""

from rotatefile.utils.file_io.filesystem import FileSystem
from rotatefile.utils.file_io.compressor import compress_file

__all__ = [
    'FileSystem',
    'compress_file'
]
