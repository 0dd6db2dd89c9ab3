"""
Streaming search-replace over SQL dumps

Replacements are exact string matches applied to every line of the dump.
PHP serialized strings (s:N:"...";) that change are rewritten with their new
byte length so serialized option values stay readable by WordPress.

The stages are chained generators: the writer pulls lines through the
replacer (and the optional mydumper fix-up) from the reader, so only one
line is held in memory at a time and the slowest stage sets the pace.
"""

import os
import re
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, Optional, Sequence, Union

from tqdm import tqdm

from wp_dbsync.utils.sql_dump import DumpType, fix_mydumper_lines

SERIALIZED_STRING_RE = rb'(?P<ser>s:(?P<len>\d+):(?P<q>\\?")(?P<body>.*?)(?P=q);)'
SQL_ESCAPE_RE = re.compile(rb'\\.', re.S)


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode('utf-8', errors='surrogateescape')


def flatten_replacements(search_replace_map: Dict[str, str]) -> list:
    """
    Flattens a map into [from1, to1, from2, to2, ...] keeping its order
    """
    return [item for pair in search_replace_map.items() for item in pair]


class SearchReplacer:
    """
    Exact-string multi-pattern replacement on bytes

    When several search strings match at the same position the longest one wins.
    """

    def __init__(self, replacements: Sequence[Union[str, bytes]], fix_serialized: bool = True):
        """
        Args:
            replacements: Flat list alternating search and replacement values
            fix_serialized: If True, recomputes the length of changed PHP serialized strings

        Raises:
            ValueError: If the list has an odd number of items
        """
        if len(replacements) % 2:
            raise ValueError("Replacements must be a list of search/replace pairs")

        self.replacements: Dict[bytes, bytes] = {}
        for i in range(0, len(replacements), 2):
            search = _to_bytes(replacements[i])
            if search:
                self.replacements[search] = _to_bytes(replacements[i + 1])

        self.fix_serialized = fix_serialized
        self._key_re = None
        self._combined_re = None
        if self.replacements:
            keys = sorted(self.replacements, key=len, reverse=True)
            alternation = b'|'.join(re.escape(k) for k in keys)
            self._key_re = re.compile(alternation)
            self._combined_re = re.compile(SERIALIZED_STRING_RE + b'|(?P<key>' + alternation + b')', re.S)

    def _replace_keys(self, data: bytes) -> bytes:
        return self._key_re.sub(lambda m: self.replacements[m.group(0)], data)

    @staticmethod
    def _payload_length(body: bytes, escaped: bool) -> int:
        if not escaped:
            return len(body)
        # Each SQL escape sequence stands for a single byte
        return len(SQL_ESCAPE_RE.sub(b'x', body))

    def _replace_match(self, match) -> bytes:
        if match.group('key') is not None:
            return self.replacements[match.group('key')]

        body = match.group('body')
        new_body = self._replace_keys(body)
        if new_body == body:
            return match.group('ser')

        quote = match.group('q')
        escaped = quote.startswith(b'\\')
        declared = int(match.group('len'))
        length = declared
        # Only trust the token when its declared length matches what was parsed
        if declared == self._payload_length(body, escaped):
            length = self._payload_length(new_body, escaped)

        return b's:%d:%s%s%s;' % (length, quote, new_body, quote)

    def replace(self, data: bytes) -> bytes:
        """
        Applies every replacement to a chunk of data (normally one line)
        """
        if self._key_re is None or not self._key_re.search(data):
            return data

        if not self.fix_serialized:
            return self._replace_keys(data)

        return self._combined_re.sub(self._replace_match, data)

    def transform(self, lines: Iterable[bytes]) -> Iterator[bytes]:
        for line in lines:
            yield self.replace(line)


def _read_lines(stream: BinaryIO, progress: Optional[tqdm] = None) -> Iterator[bytes]:
    for line in stream:
        if progress is not None:
            progress.update(len(line))
        yield line


def stream_search_replace(
    source: BinaryIO,
    dest: BinaryIO,
    replacements: Sequence[Union[str, bytes]],
    dump_type: DumpType = DumpType.STANDARD,
    progress: Optional[tqdm] = None
) -> None:
    """
    Pipes source into dest through the replacer and, for mydumper dumps, the fix-up stage

    Args:
        source: Binary stream to read
        dest: Binary stream to write
        replacements: Flat list alternating search and replacement values
        dump_type: Detected dump type of the source
        progress: Optional progress bar updated with the bytes read
    """
    replacer = SearchReplacer(replacements)
    stream = replacer.transform(_read_lines(source, progress))
    if dump_type is DumpType.MYDUMPER:
        stream = fix_mydumper_lines(stream)

    for chunk in stream:
        dest.write(chunk)


def run_search_replace(
    input_file: Union[str, Path],
    output_file: Union[str, Path],
    replacements: Sequence[Union[str, bytes]],
    dump_type: DumpType = DumpType.STANDARD,
    show_progress: bool = False
) -> Path:
    """
    Writes a search-replaced copy of input_file to output_file

    The input file is left untouched; swapping the output into place is up
    to the caller. A partial output file is left behind if a stage fails.

    Args:
        input_file: SQL file to read
        output_file: New file to write
        replacements: Flat list alternating search and replacement values
        dump_type: Detected dump type; mydumper dumps get their file markers fixed
        show_progress: If True, shows a progress bar

    Returns:
        Path: The output file path

    Raises:
        OSError: If reading or writing fails
    """
    output_file = Path(output_file)
    total = os.path.getsize(input_file)

    with open(input_file, 'rb') as source, open(output_file, 'wb') as dest, \
            tqdm(total=total, unit='B', unit_scale=True, desc="Search-replace",
                 disable=not show_progress) as progress:
        stream_search_replace(source, dest, replacements, dump_type, progress)

    return output_file
