"""
Synchronization of the remote database into the local environment

Runs export -> decompress -> dump type detection -> site URL extraction ->
search-replace map -> search-replace -> blogs table patch -> import.
Every stage runs to completion before the next starts. The first failing
stage is tracked and ends the process; nothing is rolled back.
"""

import os
import shutil
import traceback
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from wp_dbsync.commands.export_sql import ExportSQLCommand
from wp_dbsync.commands.import_sql import ImportSQLCommand
from wp_dbsync.errors import StorageDeclinedError
from wp_dbsync.sync.blogs_patch import append_blog_domains_sql
from wp_dbsync.sync.domain_map import NetworkSite, build_search_replace_map, to_network_sites
from wp_dbsync.sync.search_replace import flatten_replacements, run_search_replace
from wp_dbsync.sync.site_urls import extract_site_urls
from wp_dbsync.utils.exit import with_error
from wp_dbsync.utils.filesystem import make_temp_dir, unzip_file
from wp_dbsync.utils.sql_dump import DumpType, get_sql_dump_details
from wp_dbsync.utils.storage import BackupStorageAvailability, ExportJob
from wp_dbsync.utils.tracking import TrackFunction, noop_track


class SyncState(Enum):
    INIT = "init"
    EXPORTING = "exporting"
    EXTRACTING_ARCHIVE = "extracting_archive"
    DETECTING_TYPE = "detecting_type"
    EXTRACTING_URLS = "extracting_urls"
    BUILDING_MAP = "building_map"
    REPLACING = "replacing"
    PATCHING = "patching"
    IMPORTING = "importing"
    DONE = "done"
    FAILED = "failed"


# Tracking tag and user message for each stage
STAGE_ERRORS = {
    SyncState.EXPORTING: ("export_sql_backup", "Error exporting SQL backup"),
    SyncState.EXTRACTING_ARCHIVE: ("archive_extraction", "Error extracting the SQL export"),
    SyncState.DETECTING_TYPE: ("archive_extraction", "Error extracting the SQL export"),
    SyncState.EXTRACTING_URLS: ("extract_site_urls", "Error extracting site URLs"),
    SyncState.BUILDING_MAP: ("search_replace", "Error replacing domains"),
    SyncState.REPLACING: ("search_replace", "Error replacing domains"),
    SyncState.PATCHING: ("search_replace", "Error replacing domains"),
    SyncState.IMPORTING: ("import_sql_file", "Error importing SQL file"),
}


class SyncSQLCommand:
    """
    Pulls the remote database into the local environment, rewriting its URLs
    for the local domain
    """

    def __init__(
        self,
        remote_host: str,
        remote_path: str,
        slug: str,
        domain: str,
        project_path: Union[str, Path] = ".",
        network_sites: Optional[Union[List[Any], Callable[[], List[Any]]]] = None,
        track: TrackFunction = noop_track,
        exit_with_error: Callable[[str], Any] = with_error,
        export_command_factory: Callable[..., Any] = ExportSQLCommand,
        import_command_factory: Callable[..., Any] = ImportSQLCommand,
        table_prefix: str = "wp_",
        schema: Optional[str] = None,
        assume_yes: bool = False,
        keep_files: bool = False,
        verbose: bool = False,
        tmp_dir: Optional[Union[str, Path]] = None
    ):
        """
        Args:
            remote_host: SSH host alias of the remote server
            remote_path: WordPress path on the server
            slug: Local site slug, first label of the local domain
            domain: Local development TLD (e.g. "ddev.site")
            project_path: DDEV project directory
            network_sites: Network site records, or a function returning them
            track: Tracking function
            exit_with_error: Ends the process with a message
            export_command_factory: Builds the export command
            import_command_factory: Builds the import command
            table_prefix: WordPress table prefix of the dump
            schema: Database name used by the blogs table check
            assume_yes: If True, does not prompt on low disk space
            keep_files: If True, keeps the temporary directory after a successful run
            verbose: If True, displays detailed messages
            tmp_dir: Working directory. A fresh one is created when omitted.
        """
        self.remote_host = remote_host
        self.remote_path = remote_path
        self.slug = slug
        self.domain = domain
        self.project_path = Path(project_path)
        self._network_sites_source = network_sites
        self._network_sites: Optional[List[NetworkSite]] = None
        self._track = track
        self.exit_with_error = exit_with_error
        self.export_command_factory = export_command_factory
        self.import_command_factory = import_command_factory
        self.table_prefix = table_prefix
        self.schema = schema
        self.assume_yes = assume_yes
        self.keep_files = keep_files
        self.verbose = verbose

        self.tmp_dir = Path(tmp_dir) if tmp_dir else make_temp_dir()
        self.state = SyncState.INIT
        self.site_urls: List[str] = []
        self.search_replace_map: Dict[str, str] = {}
        self.sql_dump_type: Optional[DumpType] = None
        self.source_db: Optional[str] = None

    def track(self, name: str, event_props: Dict[str, Any]) -> None:
        props = dict(event_props)
        props["sqldump_type"] = self.sql_dump_type.value if self.sql_dump_type else None
        try:
            self._track(name, props)
        except Exception as e:
            print(f"⚠️ Unable to record tracking event '{name}': {str(e)}")

    @property
    def local_domain(self) -> str:
        return f"{self.slug}.{self.domain}"

    @property
    def sql_file(self) -> Path:
        return self.tmp_dir / "sql-export.sql"

    @property
    def gz_file(self) -> Path:
        return self.tmp_dir / "sql-export.sql.gz"

    @property
    def sr_file(self) -> Path:
        return self.tmp_dir / "sql-export-sr.sql"

    @property
    def network_sites(self) -> List[NetworkSite]:
        if self._network_sites is None:
            source = self._network_sites_source
            records = source() if callable(source) else source
            self._network_sites = to_network_sites(records)
        return self._network_sites

    def get_sql_dump_type(self) -> DumpType:
        if self.sql_dump_type is None:
            raise RuntimeError("SQL dump type not initialized")
        return self.sql_dump_type

    def confirm_enough_storage(self, job: ExportJob) -> bool:
        storage_availability = BackupStorageAvailability.create_from_export_job(job, self.tmp_dir)
        return storage_availability.validate_and_prompt_disk_space_warning(assume_yes=self.assume_yes)

    def generate_export(self) -> None:
        """
        Runs the export command to download the gzipped SQL export
        """
        export_command = self.export_command_factory(
            self.remote_host,
            self.remote_path,
            self.gz_file,
            confirm_enough_storage_hook=self.confirm_enough_storage,
            track=self.track,
            verbose=self.verbose
        )
        export_command.run()

    def extract_archive(self) -> None:
        print(f"🔄 Extracting the exported file {self.gz_file}...")
        unzip_file(self.gz_file, self.sql_file)
        print(f"✅ Extracted to {self.sql_file}")

    def init_sql_dump_type(self) -> None:
        details = get_sql_dump_details(self.sql_file)
        self.sql_dump_type = details.type
        self.source_db = details.source_db
        if self.verbose:
            print(f"   - Dump type: {details.type.value}")
            if details.source_db:
                print(f"   - Source database: {details.source_db}")

    def extract_site_urls(self) -> None:
        print("🔄 Extracting site URLs from the SQL file...")
        self.site_urls = extract_site_urls(self.sql_file)
        if self.verbose:
            for url in self.site_urls:
                print(f"   - {url}")

    def generate_search_replace_map(self) -> None:
        print("🔄 Generating search-replace configuration...")
        self.search_replace_map = build_search_replace_map(
            self.site_urls, self.local_domain, self.network_sites
        )

    def run_search_replace(self) -> None:
        """
        Runs the search-replace on the SQL file and swaps the result into place
        """
        print("🔄 Running the following search-replace operations on the SQL file:")
        for domain, local_domain in self.search_replace_map.items():
            print(f"   {domain} -> {local_domain}")

        run_search_replace(
            self.sql_file,
            self.sr_file,
            flatten_replacements(self.search_replace_map),
            self.get_sql_dump_type(),
            show_progress=True
        )
        os.replace(self.sr_file, self.sql_file)

    def fix_blogs_table(self) -> None:
        if append_blog_domains_sql(
            self.sql_file, self.network_sites, self.local_domain, self.table_prefix, self.schema
        ):
            print("✅ Blogs table domain update appended to the SQL file")

    def run_import(self) -> None:
        print("🔄 Importing the SQL file...")
        import_command = self.import_command_factory(
            self.sql_file,
            self.project_path,
            in_place=True,
            skip_validate=True,
            quiet=True
        )
        import_command.run()
        print("✅ SQL file imported")

    def get_stages(self):
        return [
            (SyncState.EXPORTING, self.generate_export),
            (SyncState.EXTRACTING_ARCHIVE, self.extract_archive),
            (SyncState.DETECTING_TYPE, self.init_sql_dump_type),
            (SyncState.EXTRACTING_URLS, self.extract_site_urls),
            (SyncState.BUILDING_MAP, self.generate_search_replace_map),
            (SyncState.REPLACING, self.run_search_replace),
            (SyncState.PATCHING, self.fix_blogs_table),
            (SyncState.IMPORTING, self.run_import),
        ]

    def fail(self, state: SyncState, error: Exception) -> None:
        """
        Tracks a stage failure and ends the process
        """
        error_type, message = STAGE_ERRORS[state]
        self.state = SyncState.FAILED
        self.track("error", {
            "error_type": error_type,
            "error_message": str(error),
            "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        })
        self.exit_with_error(f"{message}: {error}")

    def cleanup(self) -> None:
        if not self.keep_files:
            shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def run(self) -> bool:
        """
        Sequentially runs the stages to export, search-replace and import the SQL file

        Returns:
            bool: True when every stage completed. False if the user declined to
            continue at the disk space check, or if a stage failed and the exit
            handler returned.
        """
        for state, stage in self.get_stages():
            self.state = state
            try:
                stage()
            except StorageDeclinedError:
                self.state = SyncState.FAILED
                print("❌ Operation cancelled by user.")
                return False
            except Exception as e:
                self.fail(state, e)
                return False

        self.state = SyncState.DONE
        print("✅ Database synchronized")
        self.cleanup()
        return True
