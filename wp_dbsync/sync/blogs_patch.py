"""
SQL patch for the multisite blogs table

The domain column of the blogs table is not rewritten by the search-replace
(it stores bare host names), so a stored procedure is appended to the dump
to update it. The procedure checks that the table exists first, which makes
the patch a no-op on single-site dumps.
"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from wp_dbsync.sync.domain_map import PRIMARY_BLOG_ID, get_subsite_domain, to_network_sites

PROCEDURE_NAME = "wp_dbsync_update_blog_domains"

DOMAIN_RE = re.compile(r'^[A-Za-z0-9.-]+$')
IDENTIFIER_RE = re.compile(r'^[A-Za-z0-9_$]+$')

PROLOGUE = """
DROP PROCEDURE IF EXISTS {procedure};
DELIMITER $$
CREATE PROCEDURE {procedure}()
BEGIN
    IF EXISTS (SELECT * FROM information_schema.tables WHERE table_schema = {schema} AND table_name = '{table}') THEN
"""

EPILOGUE = """
    END IF;
END$$
DELIMITER ;
CALL {procedure}();
DROP PROCEDURE {procedure};
"""


def _check_domain(domain: str) -> str:
    if not DOMAIN_RE.match(domain):
        raise ValueError(f"Invalid domain for the blogs table: {domain!r}")
    return domain


def build_blog_domains_sql(
    network_sites: Optional[Iterable[Any]],
    local_domain: str,
    table_prefix: str = "wp_",
    schema: Optional[str] = None
) -> str:
    """
    Builds the SQL that points every network site at its local domain

    The primary site gets local_domain itself, every other site gets
    "<slugified host>.<local_domain>".

    Args:
        network_sites: Sites of the remote network (NetworkSite or dicts)
        local_domain: Local development domain
        table_prefix: WordPress table prefix
        schema: Database holding the tables. Defaults to the current database.

    Returns:
        str: The SQL block, or an empty string when no site has both a blog id and a home URL

    Raises:
        ValueError: If a value cannot be safely written into the SQL text
    """
    if not IDENTIFIER_RE.match(table_prefix):
        raise ValueError(f"Invalid table prefix: {table_prefix!r}")
    if schema is not None and not IDENTIFIER_RE.match(schema):
        raise ValueError(f"Invalid schema name: {schema!r}")

    table = f"{table_prefix}blogs"
    queries = []
    for site in to_network_sites(network_sites):
        if not site.blog_id or not site.home_url:
            continue

        blog_id = int(site.blog_id)
        if blog_id == PRIMARY_BLOG_ID:
            new_domain = local_domain
        else:
            new_domain = get_subsite_domain(site.home_url, local_domain)

        queries.append(
            f"        UPDATE {table} SET domain = '{_check_domain(new_domain)}' WHERE blog_id = {blog_id};"
        )

    if not queries:
        return ""

    prologue = PROLOGUE.format(
        procedure=PROCEDURE_NAME,
        schema=f"'{schema}'" if schema else "DATABASE()",
        table=table
    )
    epilogue = EPILOGUE.format(procedure=PROCEDURE_NAME)
    return prologue + "\n" + "\n".join(queries) + "\n" + epilogue


def append_blog_domains_sql(
    sql_file: Union[str, Path],
    network_sites: Optional[Iterable[Any]],
    local_domain: str,
    table_prefix: str = "wp_",
    schema: Optional[str] = None
) -> bool:
    """
    Appends the blogs table patch to the end of a SQL file

    Returns:
        bool: True if SQL was appended, False if there was nothing to patch
    """
    sql = build_blog_domains_sql(network_sites, local_domain, table_prefix, schema)
    if not sql:
        return False

    with open(sql_file, 'a', encoding='utf-8') as f:
        f.write(sql)
    return True
