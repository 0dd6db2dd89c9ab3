#!/usr/bin/env python3
"""
CLI for wp_dbsync

This script provides a command-line interface to pull a remote WordPress
database into the local DDEV environment.
"""

import sys

import click

from wp_dbsync import __version__
from wp_dbsync.config_yaml import get_yaml_config
from wp_dbsync.errors import ImportSQLError
from wp_dbsync.commands.import_sql import ImportSQLCommand
from wp_dbsync.commands.search_replace import parse_search_replace_pairs, search_and_replace
from wp_dbsync.commands.sync_sql import SyncSQLCommand
from wp_dbsync.utils.exit import with_error
from wp_dbsync.utils.sql_dump import get_sql_dump_details
from wp_dbsync.utils.tracking import Tracker
from wp_dbsync.utils.wp_cli import get_network_sites


# Main command group
@click.group()
@click.version_option(__version__)
def cli():
    """
    Database synchronization tools for WordPress.

    Pulls the database of a remote WordPress site (single site or multisite)
    and rewrites its URLs for the local development domain.
    """
    pass


@cli.command("sync-sql")
@click.option("--slug", help="Local site slug (defaults to local.slug in wp-dbsync.yaml)")
@click.option("--domain", help="Local development domain (defaults to local.domain in wp-dbsync.yaml)")
@click.option("--keep-files", is_flag=True, help="Keep the temporary SQL files after a successful sync")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation on low disk space")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed information during execution")
def sync_sql_command(slug, domain, keep_files, assume_yes, verbose):
    """
    Exports the remote database, rewrites its site URLs for the local domain
    and imports it into the local environment.

    For multisite networks every sub-site gets its own sub-domain of the
    local domain, and the blogs table is updated to match.
    """
    config = get_yaml_config(verbose=verbose)
    if verbose:
        config.display()

    try:
        remote_host = config.get_strict("ssh", "remote_host")
        remote_path = config.get_strict("ssh", "remote_path")
        slug = slug or config.get_strict("local", "slug")
        network_sites = config.get_network_sites()
    except ValueError as e:
        with_error(str(e))

    domain = domain or config.get("local", "domain", default="ddev.site")

    if network_sites is None:
        def network_sites():
            return get_network_sites(remote_host, remote_path)

    tracker = Tracker(config.get("tracking", "file"), verbose=verbose)

    command = SyncSQLCommand(
        remote_host,
        remote_path,
        slug,
        domain,
        project_path=config.get("local", "project_path", default="."),
        network_sites=network_sites,
        track=tracker.track,
        table_prefix=config.get("database", "table_prefix", default="wp_"),
        schema=config.get("database", "schema"),
        assume_yes=assume_yes,
        keep_files=keep_files,
        verbose=verbose
    )

    print(f"📥 Synchronizing database from {remote_host} to {command.local_domain}...")
    if not command.run():
        sys.exit(1)


@cli.command("search-replace")
@click.argument("file_name", type=click.Path(exists=True, dir_okay=False))
@click.option("--search-replace", "pairs", multiple=True, required=True,
              help='A pair of strings separated by a comma only, e.g. --search-replace="from,to". Can be repeated.')
@click.option("--in-place", is_flag=True, help="Save the results to the input file")
@click.option("--output", type=click.Path(dir_okay=False),
              help="Save the results to this file. Ignored with --in-place.")
def search_replace_command(file_name, pairs, in_place, output):
    """
    Searches and replaces strings in a local SQL file.

    Results are written to standard output unless --in-place or --output is used.

    Examples:
      search-replace file.sql --search-replace="from,to"
      search-replace file.sql --search-replace="from,to" --in-place
      search-replace file.sql --search-replace="from,to" --output=output-file.sql
    """
    try:
        search_and_replace(file_name, pairs, in_place=in_place, output=output)
    except ValueError as e:
        with_error(str(e))


@cli.command("import-sql")
@click.argument("file_name", type=click.Path(exists=True, dir_okay=False))
@click.option("--search-replace", "pairs", multiple=True,
              help='Replace a string before importing, e.g. --search-replace="from,to". Can be repeated.')
@click.option("--in-place", is_flag=True, help="Apply the search-replace to the input file instead of a copy")
@click.option("--skip-validate", is_flag=True, help="Do not check the dump header before importing")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed information during execution")
def import_sql_command(file_name, pairs, in_place, skip_validate, verbose):
    """
    Imports a local .sql or .gz dump into the DDEV project.

    Examples:
      import-sql file.sql
      import-sql file.sql --search-replace="example.com,mysite.ddev.site" --in-place
    """
    config = get_yaml_config(verbose=verbose)

    try:
        command = ImportSQLCommand(
            file_name,
            project_path=config.get("local", "project_path", default="."),
            in_place=in_place,
            skip_validate=skip_validate,
            search_replace=parse_search_replace_pairs(pairs)
        )
        command.run()
    except (ImportSQLError, ValueError) as e:
        with_error(str(e))

    print("✅ SQL file imported")


@cli.command("detect-dump")
@click.argument("file_name", type=click.Path(exists=True, dir_okay=False))
def detect_dump_command(file_name):
    """
    Shows which tool produced a SQL dump (mysqldump or mydumper).
    """
    details = get_sql_dump_details(file_name)
    print(f"Dump type: {details.type.value}")
    if details.source_db:
        print(f"Source database: {details.source_db}")


def main():
    """
    Main entry point
    """
    try:
        cli()
    except Exception as e:
        click.echo(f"❌ Error: {str(e)}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
