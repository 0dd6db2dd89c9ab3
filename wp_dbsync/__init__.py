"""
wp_dbsync
=========

Pull a remote WordPress database into your local DDEV environment, with site
URLs rewritten for the local domain. Multisite networks get one local
sub-domain per site.
"""

__version__ = "0.1.0"

from wp_dbsync.commands.sync_sql import SyncSQLCommand, SyncState
from wp_dbsync.sync.domain_map import build_search_replace_map, slugify_domain, strip_protocol
from wp_dbsync.sync.site_urls import extract_site_urls
from wp_dbsync.utils.sql_dump import DumpType, get_sql_dump_details
