"""
Standalone search-replace on a local SQL file
"""

import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Union

from wp_dbsync.sync.search_replace import run_search_replace, stream_search_replace
from wp_dbsync.utils.sql_dump import get_sql_dump_type


def parse_search_replace_pairs(values: Sequence[str]) -> List[str]:
    """
    Parses "from,to" option values into a flat replacement list

    Raises:
        ValueError: If a value is not a pair of strings separated by a comma
    """
    replacements = []
    for value in values:
        parts = value.split(',')
        if len(parts) != 2 or not parts[0]:
            raise ValueError(
                f"Invalid search-replace value '{value}': expected a pair of strings such as original,replacement"
            )
        replacements.extend(parts)
    return replacements


def search_and_replace(
    file_name: Union[str, Path],
    pairs: Sequence[str],
    in_place: bool = False,
    output: Optional[Union[str, Path]] = None,
    show_progress: bool = True
) -> Optional[Path]:
    """
    Runs a search-replace over a SQL file

    Results go to the input file with in_place, to output when given,
    and to standard output otherwise.

    Args:
        file_name: SQL file to process
        pairs: "from,to" values
        in_place: If True, replaces the input file with the result
        output: Destination file (ignored with in_place)
        show_progress: If True, shows a progress bar when writing to a file

    Returns:
        Optional[Path]: The file written, or None when writing to standard output
    """
    file_name = Path(file_name)
    if not file_name.is_file():
        raise FileNotFoundError(f"SQL file not found: {file_name}")

    replacements = parse_search_replace_pairs(pairs)
    dump_type = get_sql_dump_type(file_name)

    if in_place:
        temp_output = file_name.with_name(file_name.name + ".sr")
        run_search_replace(file_name, temp_output, replacements, dump_type, show_progress)
        os.replace(temp_output, file_name)
        print(f"✅ Search-replace applied to {file_name}")
        return file_name

    if output:
        output = Path(output)
        run_search_replace(file_name, output, replacements, dump_type, show_progress)
        print(f"✅ Search-replace result saved to {output}")
        return output

    with open(file_name, 'rb') as source:
        stream_search_replace(source, sys.stdout.buffer, replacements, dump_type)
    sys.stdout.buffer.flush()
    return None
