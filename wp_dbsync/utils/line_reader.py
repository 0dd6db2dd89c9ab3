"""
Line-by-line reading of large text files
"""

from pathlib import Path
from typing import Iterator, Union


def read_lines(file_path: Union[str, Path], encoding: str = "utf-8") -> Iterator[str]:
    """
    Lazily yields the lines of a file with the line delimiter stripped

    The file is opened when iteration starts and read in a single forward pass,
    so memory use does not depend on the file size. Every call starts a new pass.
    I/O errors are raised from the iteration itself.

    Args:
        file_path: Path to the text file
        encoding: Text encoding. Undecodable bytes are kept as surrogates.

    Yields:
        str: One line at a time, without "\\n" or "\\r\\n"
    """
    with open(file_path, 'r', encoding=encoding, errors='surrogateescape', newline='') as f:
        for line in f:
            if line.endswith('\r\n'):
                yield line[:-2]
            elif line.endswith('\n') or line.endswith('\r'):
                yield line[:-1]
            else:
                yield line
