"""
Disk space checks before downloading a database export
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import click

from wp_dbsync.utils.filesystem import format_size

# A gzipped SQL dump usually expands to several times its size, and the
# search-replace step keeps a second copy while it runs
EXPANSION_FACTOR = 10
REPLACE_COPIES = 2


@dataclass
class ExportJob:
    """
    Information about a remote export that is about to be downloaded
    """
    remote_file: str
    compressed_size: int


class BackupStorageAvailability:
    """
    Compares the space a sync needs with the space available locally
    """

    def __init__(self, compressed_size: int, target_dir: Union[str, Path]):
        self.compressed_size = compressed_size
        self.target_dir = Path(target_dir)

    @classmethod
    def create_from_export_job(cls, job: ExportJob, target_dir: Union[str, Path]) -> "BackupStorageAvailability":
        return cls(job.compressed_size, target_dir)

    def get_required_bytes(self) -> int:
        return self.compressed_size + self.compressed_size * EXPANSION_FACTOR * REPLACE_COPIES

    def get_available_bytes(self) -> int:
        return shutil.disk_usage(self.target_dir).free

    def is_enough_space(self) -> bool:
        return self.get_available_bytes() >= self.get_required_bytes()

    def validate_and_prompt_disk_space_warning(self, assume_yes: bool = False) -> bool:
        """
        Warns when free space looks insufficient and asks whether to continue

        Args:
            assume_yes: If True, continues without asking

        Returns:
            bool: True to continue, False if the user declined
        """
        if self.is_enough_space():
            return True

        print("⚠️ There might not be enough free disk space for this sync:")
        print(f"   - Required (estimated): {format_size(self.get_required_bytes())}")
        print(f"   - Available in {self.target_dir}: {format_size(self.get_available_bytes())}")

        if assume_yes:
            return True

        return click.confirm("   Do you want to continue anyway?", default=False)
