"""
Utilities for filesystem operations
"""

import gzip
import shutil
import tempfile
from pathlib import Path
from typing import Union

# Read size used when streaming archives to disk
CHUNK_SIZE = 1024 * 1024


def make_temp_dir(prefix: str = "wp-dbsync-") -> Path:
    """
    Creates a fresh, exclusive temporary directory. The caller owns its cleanup.

    Returns:
        Path: Path to the new directory
    """
    return Path(tempfile.mkdtemp(prefix=prefix))


def is_gzip_file(file_path: Union[str, Path]) -> bool:
    """
    Checks the gzip magic number at the start of a file
    """
    with open(file_path, 'rb') as f:
        return f.read(2) == b'\x1f\x8b'


def unzip_file(input_file: Union[str, Path], output_file: Union[str, Path]) -> None:
    """
    Decompresses a gzip archive into output_file without loading it in memory

    Args:
        input_file: Path to the .gz file
        output_file: Path of the decompressed file to write

    Raises:
        OSError: If the archive cannot be read or is not a gzip file
    """
    with gzip.open(input_file, 'rb') as source, open(output_file, 'wb') as dest:
        shutil.copyfileobj(source, dest, CHUNK_SIZE)


def format_size(size_bytes: int) -> str:
    """
    Formats a byte count as MB for console output
    """
    return f"{size_bytes / (1024*1024):.2f} MB"
