"""
SQL dump inspection helpers

Detects which tool produced a SQL dump (mysqldump or mydumper) by looking
at its header, and provides the fix-up stage that mydumper stream dumps need
after their content has been rewritten.
"""

import gzip
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from wp_dbsync.utils.filesystem import is_gzip_file

# Only this much of the file is inspected
HEADER_MAX_BYTES = 64 * 1024
HEADER_MAX_LINES = 50

MYDUMPER_METADATA_RE = re.compile(r'^-- metadata(\.header)?( -?\d+)?$')
# mydumper --stream separates the files it concatenates with "-- <file>.sql <size>"
MYDUMPER_FILE_MARKER_RE = re.compile(rb'^-- (\S+\.sql(?:\.gz|\.zst)?) -?\d+(\r?\n)?$')
MYSQLDUMP_HEADER_RE = re.compile(r'^-- (MySQL|MariaDB) dump', re.IGNORECASE)
MYSQLDUMP_SOURCE_DB_RE = re.compile(r'^-- Host: .*Database: (\S+)')
SQL_STATEMENT_PREFIXES = ('CREATE TABLE', 'INSERT INTO', 'DROP TABLE', 'LOCK TABLES', 'SET ', '/*!')


class DumpType(Enum):
    STANDARD = "mysqldump"
    MYDUMPER = "mydumper"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SqlDumpDetails:
    type: DumpType
    source_db: Optional[str] = None


def _read_header_lines(file_path: Union[str, Path]) -> Iterator[str]:
    opener = gzip.open if is_gzip_file(file_path) else open
    with opener(file_path, 'rb') as f:
        header = f.read(HEADER_MAX_BYTES)

    lines = header.decode('utf-8', errors='replace').splitlines()
    # The last line may be cut in half by the byte limit
    if len(header) == HEADER_MAX_BYTES and lines:
        lines = lines[:-1]
    return iter(lines[:HEADER_MAX_LINES])


def get_sql_dump_details(file_path: Union[str, Path]) -> SqlDumpDetails:
    """
    Classifies a SQL dump from the start of the file

    Args:
        file_path: Path to the dump (plain or gzip-compressed)

    Returns:
        SqlDumpDetails: Detected dump type and, for mysqldump, the source database name.
        UNKNOWN is returned when no known marker is found.
    """
    dump_type = DumpType.UNKNOWN
    source_db = None

    for line in _read_header_lines(file_path):
        stripped = line.strip()
        if not stripped:
            continue

        if MYDUMPER_METADATA_RE.match(stripped) or MYDUMPER_FILE_MARKER_RE.match(stripped.encode('utf-8')):
            return SqlDumpDetails(type=DumpType.MYDUMPER)

        if MYSQLDUMP_HEADER_RE.match(stripped):
            dump_type = DumpType.STANDARD
            continue

        db_match = MYSQLDUMP_SOURCE_DB_RE.match(stripped)
        if db_match:
            source_db = db_match.group(1)
            continue

        if dump_type is DumpType.UNKNOWN and stripped.upper().startswith(SQL_STATEMENT_PREFIXES):
            dump_type = DumpType.STANDARD

    return SqlDumpDetails(type=dump_type, source_db=source_db)


def get_sql_dump_type(file_path: Union[str, Path]) -> DumpType:
    return get_sql_dump_details(file_path).type


def fix_mydumper_lines(lines: Iterable[bytes]) -> Iterator[bytes]:
    """
    Rewrites mydumper stream file markers so myloader does not check stale sizes

    After a search-replace the byte sizes recorded in "-- <file>.sql <size>"
    markers no longer match, so they are replaced with -1 (size unknown).

    Args:
        lines: Raw dump lines, line endings included

    Yields:
        bytes: The same lines, with file markers rewritten
    """
    for line in lines:
        if line.startswith(b'-- '):
            match = MYDUMPER_FILE_MARKER_RE.match(line)
            if match:
                line = b'-- ' + match.group(1) + b' -1' + (match.group(2) or b'')
        yield line
