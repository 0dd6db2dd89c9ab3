"""
Search-replace map generation

Maps the site URLs found in a dump onto the local development domain.
Sub-sites of a multisite network get their own sub-domain of the local
domain, derived from their original host name.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import urlsplit

PRIMARY_BLOG_ID = 1

HOST_RE = re.compile(r'^([^:]+://)([^:/]+)')


@dataclass(frozen=True)
class NetworkSite:
    """
    A site of a WordPress multisite network
    """
    blog_id: Optional[int]
    home_url: Optional[str]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NetworkSite":
        """
        Builds a site from a config or WP-CLI record

        Accepts both snake_case (blog_id, home_url) and camelCase (blogId, homeUrl) keys.

        Raises:
            ValueError: If the blog id is present but not an integer
        """
        blog_id = data.get("blog_id", data.get("blogId"))
        home_url = data.get("home_url", data.get("homeUrl"))
        if blog_id in (None, ""):
            blog_id = None
        else:
            blog_id = int(blog_id)
        return cls(blog_id=blog_id, home_url=home_url or None)


def to_network_sites(records: Optional[Iterable[Any]]) -> List[NetworkSite]:
    if not records:
        return []
    return [r if isinstance(r, NetworkSite) else NetworkSite.from_dict(r) for r in records if r]


def strip_protocol(url: str) -> str:
    """
    Strips the protocol from the URL

    "https://example.com/path" becomes "example.com/path"; strings without
    "//" are returned unchanged.
    """
    parts = url.split('//', 1)
    return parts[1] if len(parts) > 1 else parts[0]


def replace_domain(url: str, domain: str) -> str:
    """
    Replaces the host of a URL, keeping its scheme, port and path
    """
    return HOST_RE.sub(lambda m: m.group(1) + domain, url, count=1)


def get_hostname(url: str) -> str:
    """
    Gets the host name of an absolute URL

    Raises:
        ValueError: If the URL has no host
    """
    hostname = urlsplit(url).hostname
    if not hostname:
        raise ValueError(f"Invalid URL: {url}")
    return hostname


def slugify_domain(domain: str) -> str:
    """
    Turns a host name into a single DNS label safe token

    "Sub.Exämple.com" becomes "sub-example-com".
    """
    # Split accented characters into base characters and combining marks
    value = unicodedata.normalize('NFKD', str(domain))
    value = re.sub('[\u0300-\u036f]', '', value)
    value = value.strip().lower()
    value = re.sub(r'[^a-z0-9 .-]', '', value)
    value = re.sub(r'[.\s]+', '-', value)
    return re.sub(r'-+', '-', value)


def get_subsite_domain(home_url: str, local_domain: str) -> str:
    return f"{slugify_domain(get_hostname(home_url))}.{local_domain}"


def build_search_replace_map(
    urls: Iterable[str],
    local_domain: str,
    network_sites: Optional[Iterable[Any]] = None
) -> Dict[str, str]:
    """
    Builds the search-replace map for a dump

    Every site URL is mapped onto local_domain. Then each network sub-site
    whose URL was found in the dump is mapped onto its own sub-domain,
    overriding the first mapping.

    Args:
        urls: Site URLs, longest first
        local_domain: Local development domain (e.g. "mysite.ddev.site")
        network_sites: Sites of the remote network (NetworkSite or dicts)

    Returns:
        Dict[str, str]: Stripped source -> stripped target, in insertion order

    Raises:
        ValueError: If a sub-site has a home URL without a host
    """
    search_replace_map: Dict[str, str] = {}

    for url in urls:
        search_replace_map[strip_protocol(url)] = strip_protocol(replace_domain(url, local_domain))

    for site in to_network_sites(network_sites):
        if not site.blog_id or site.blog_id == PRIMARY_BLOG_ID:
            continue

        url = site.home_url
        if not url:
            continue

        stripped_url = strip_protocol(url)
        if stripped_url not in search_replace_map:
            continue

        new_domain = get_subsite_domain(url, local_domain)
        search_replace_map[stripped_url] = strip_protocol(replace_domain(url, new_domain))

    return search_replace_map
