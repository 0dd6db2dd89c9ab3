"""
Import of a SQL file into the local DDEV environment
"""

import os
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple, Union

from wp_dbsync.errors import ImportSQLError
from wp_dbsync.sync.search_replace import run_search_replace
from wp_dbsync.utils.filesystem import format_size, is_gzip_file
from wp_dbsync.utils.sql_dump import DumpType, get_sql_dump_type
from wp_dbsync.utils.wp_cli import run_ddev

RunCommand = Callable[..., Tuple[int, str, str]]

VALID_EXTENSIONS = (".sql", ".gz")


class ImportSQLCommand:
    """
    Imports a SQL file with "ddev import-db", optionally running a search-replace first
    """

    def __init__(
        self,
        sql_file: Union[str, Path],
        project_path: Union[str, Path] = ".",
        in_place: bool = False,
        skip_validate: bool = False,
        quiet: bool = False,
        search_replace: Optional[Sequence[str]] = None,
        run_command: RunCommand = run_ddev
    ):
        """
        Args:
            sql_file: SQL file to import
            project_path: DDEV project directory
            in_place: If True, the search-replace rewrites sql_file itself instead of a copy
            skip_validate: If True, the dump header is not checked before importing
            quiet: If True, DDEV output is captured instead of shown
            search_replace: Flat list alternating search and replacement values
            run_command: Runs a DDEV command (replaceable in tests)
        """
        self.sql_file = Path(sql_file)
        self.project_path = Path(project_path)
        self.in_place = in_place
        self.skip_validate = skip_validate
        self.quiet = quiet
        self.search_replace = list(search_replace or [])
        self.run_command = run_command

    def validate(self) -> None:
        """
        Checks that the file looks like a SQL dump

        Raises:
            ImportSQLError: If it does not
        """
        if get_sql_dump_type(self.sql_file) is DumpType.UNKNOWN:
            raise ImportSQLError(
                f"{self.sql_file} does not look like a SQL dump (no mysqldump or mydumper header found)"
            )

    def prepare_file(self) -> Path:
        if not self.search_replace:
            return self.sql_file

        if is_gzip_file(self.sql_file):
            raise ImportSQLError("Search-replace needs an uncompressed .sql file")

        dump_type = get_sql_dump_type(self.sql_file)
        output = self.sql_file.with_name(self.sql_file.stem + "-sr" + self.sql_file.suffix)
        run_search_replace(self.sql_file, output, self.search_replace, dump_type, show_progress=not self.quiet)

        if self.in_place:
            os.replace(output, self.sql_file)
            return self.sql_file
        return output

    def run(self) -> None:
        """
        Runs the import

        Raises:
            ImportSQLError: If the file is missing, invalid, or DDEV fails
        """
        if not self.sql_file.is_file():
            raise ImportSQLError(f"SQL file not found: {self.sql_file}")

        if self.sql_file.suffix.lower() not in VALID_EXTENSIONS:
            raise ImportSQLError("Invalid file extension. Please provide a .sql or .gz file.")

        if not self.skip_validate:
            self.validate()

        import_file = self.prepare_file()

        if not self.quiet:
            print("⚙️ Importing SQL file to DDEV...")
            print(f"   File: {import_file}")
            print(f"   Size: {format_size(import_file.stat().st_size)}")

        code, stdout, stderr = self.run_command(
            ["import-db", "--file", str(import_file.resolve())],
            self.project_path,
            quiet=self.quiet
        )
        if code != 0:
            details = (stderr or stdout).strip()
            raise ImportSQLError(f"ddev import-db exited with code {code}: {details}")
