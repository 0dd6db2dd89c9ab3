"""
Export of the remote database to a local gzip file
"""

import shlex
import time
from pathlib import Path
from typing import Callable, Optional, Union

from wp_dbsync.errors import ExportError, StorageDeclinedError
from wp_dbsync.utils.filesystem import format_size
from wp_dbsync.utils.ssh import SSHClient
from wp_dbsync.utils.storage import ExportJob
from wp_dbsync.utils.tracking import TrackFunction, noop_track

ConfirmStorageHook = Callable[[ExportJob], bool]


class ExportSQLCommand:
    """
    Exports the remote WordPress database with WP-CLI and downloads it gzipped
    """

    def __init__(
        self,
        remote_host: str,
        remote_path: str,
        output_file: Union[str, Path],
        confirm_enough_storage_hook: Optional[ConfirmStorageHook] = None,
        track: TrackFunction = noop_track,
        verbose: bool = False,
        ssh_factory: Callable[..., SSHClient] = SSHClient
    ):
        """
        Args:
            remote_host: SSH host alias
            remote_path: WordPress path on the server
            output_file: Local path of the .sql.gz file to write
            confirm_enough_storage_hook: Called with the export job before downloading;
                returning False aborts the export
            track: Tracking function
            verbose: If True, displays detailed messages
            ssh_factory: Builds the SSH client (replaceable in tests)
        """
        self.remote_host = remote_host
        self.remote_path = remote_path.rstrip('/')
        self.output_file = Path(output_file)
        self.confirm_enough_storage_hook = confirm_enough_storage_hook
        self.track = track
        self.verbose = verbose
        self.ssh_factory = ssh_factory

    def get_remote_file(self) -> str:
        timestamp = time.strftime("%Y%m%d-%H%M%S")
        return f"{self.remote_path}/wp-content/wp-dbsync-export-{timestamp}.sql.gz"

    def run(self) -> Path:
        """
        Runs the export

        Returns:
            Path: The downloaded .sql.gz file

        Raises:
            ExportError: If the export or the download fails
            StorageDeclinedError: If the disk space confirmation was declined
        """
        print(f"📤 Exporting remote database from {self.remote_host}...")

        with self.ssh_factory(self.remote_host, verbose=self.verbose) as ssh:
            if not ssh.client:
                raise ExportError(f"Unable to connect to {self.remote_host}")

            remote_file = self.get_remote_file()
            export_cmd = (
                f"cd {shlex.quote(self.remote_path)} && "
                f"wp db export - --add-drop-table | gzip > {shlex.quote(remote_file)}"
            )

            try:
                print("⚙️ Executing export on the remote server...")
                code, _, stderr = ssh.execute(export_cmd)
                if code != 0:
                    raise ExportError(f"Remote export failed: {stderr.strip()}")

                size = ssh.get_file_size(remote_file)
                if not size:
                    raise ExportError(f"Remote export file is missing or empty: {remote_file}")
                print(f"   - Export size: {format_size(size)}")

                job = ExportJob(remote_file=remote_file, compressed_size=size)
                if self.confirm_enough_storage_hook and not self.confirm_enough_storage_hook(job):
                    raise StorageDeclinedError("Not enough disk space confirmed by the user")

                if not ssh.download_file(remote_file, self.output_file, show_progress=True):
                    raise ExportError(f"Unable to download {remote_file}")
            finally:
                ssh.execute(f"rm -f {shlex.quote(remote_file)}")

        self.track("export_sql_command_success", {"size": size})
        print(f"✅ Remote database exported to {self.output_file}")
        return self.output_file
