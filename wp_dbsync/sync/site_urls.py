"""
Discovery of the site URLs stored in a WordPress SQL dump
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Union
from urllib.parse import urlsplit

from wp_dbsync.utils.line_reader import read_lines

SITE_URL_RE = re.compile(r"""['"](siteurl|home)['"],\s?['"](.*?)['"]""")
SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*$')


def is_absolute_url(url: str) -> bool:
    """
    Checks that a string parses as an absolute URL with a host
    """
    if not url or any(c.isspace() for c in url):
        return False
    try:
        parts = urlsplit(url)
        # Accessing the port validates it
        parts.port
    except ValueError:
        return False
    return bool(SCHEME_RE.match(parts.scheme) and parts.hostname)


def find_site_home_url(sql: str) -> Optional[str]:
    """
    Finds the siteurl or home option value in a SQL line

    Args:
        sql: A line in a SQL file

    Returns:
        Optional[str]: The URL, or None if the line has none or it is not a valid URL
    """
    match = SITE_URL_RE.search(sql)
    if not match:
        return None
    url = match.group(2)
    return url if is_absolute_url(url) else None


def extract_site_urls(sql_file: Union[str, Path]) -> List[str]:
    """
    Extracts the list of site URLs from a SQL file

    URLs are deduplicated and sorted longest first, so a URL is always
    replaced before any shorter URL it contains. Equal lengths keep the
    order in which they were found.

    Args:
        sql_file: Path to the SQL file

    Returns:
        List[str]: Site URLs

    Raises:
        OSError: If there is an error reading the file
    """
    urls: Dict[str, None] = {}
    for line in read_lines(sql_file):
        url = find_site_home_url(line)
        if url:
            urls.setdefault(url, None)

    return sorted(urls, key=len, reverse=True)
