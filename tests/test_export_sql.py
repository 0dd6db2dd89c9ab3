from unittest.mock import Mock

import pytest

from wp_dbsync.commands.export_sql import ExportSQLCommand
from wp_dbsync.errors import ExportError, StorageDeclinedError
from wp_dbsync.utils.ssh import SSHClient


class FakeSSH(SSHClient):
    """SSH client that records commands instead of connecting"""

    connected = True
    export_code = 0
    remote_size = "2048\n"
    download_ok = True

    def __init__(self, host, verbose=False):
        super().__init__(host, verbose=verbose)
        self.commands = []
        self.downloads = []
        FakeSSH.last = self

    def connect(self):
        self.client = object() if self.connected else None
        return self.connected

    def disconnect(self):
        self.client = None

    def execute(self, command):
        self.commands.append(command)
        if command.startswith("stat "):
            return (0, self.remote_size, "")
        if "wp db export" in command:
            return (self.export_code, "", "export failed" if self.export_code else "")
        return (0, "", "")

    def download_file(self, remote_path, local_path, show_progress=True):
        self.downloads.append((remote_path, local_path))
        if self.download_ok:
            local_path.write_bytes(b"\x1f\x8b")
        return self.download_ok


def make_ssh_class(**attrs):
    return type("ConfiguredFakeSSH", (FakeSSH,), attrs)


class TestExportSQLCommand:

    def test_exports_and_downloads(self, tmp_path):
        output_file = tmp_path / "sql-export.sql.gz"
        hook = Mock(return_value=True)
        track = Mock()
        command = ExportSQLCommand(
            "remote", "/srv/www/", output_file,
            confirm_enough_storage_hook=hook, track=track, ssh_factory=FakeSSH
        )

        assert command.run() == output_file

        ssh = FakeSSH.last
        export_cmd = ssh.commands[0]
        assert export_cmd.startswith("cd /srv/www && wp db export - --add-drop-table | gzip > ")
        remote_file = ssh.downloads[0][0]
        assert remote_file.startswith("/srv/www/wp-content/wp-dbsync-export-")
        assert output_file.exists()
        assert ssh.commands[-1] == f"rm -f {remote_file}"

        job = hook.call_args[0][0]
        assert job.compressed_size == 2048
        assert job.remote_file == remote_file
        track.assert_called_once_with("export_sql_command_success", {"size": 2048})

    def test_declined_storage_stops_before_download(self, tmp_path):
        command = ExportSQLCommand(
            "remote", "/srv/www", tmp_path / "out.sql.gz",
            confirm_enough_storage_hook=Mock(return_value=False), ssh_factory=FakeSSH
        )

        with pytest.raises(StorageDeclinedError):
            command.run()

        assert FakeSSH.last.downloads == []
        assert FakeSSH.last.commands[-1].startswith("rm -f ")

    def test_connection_failure(self, tmp_path):
        command = ExportSQLCommand("remote", "/srv/www", tmp_path / "out.sql.gz",
                                   ssh_factory=make_ssh_class(connected=False))

        with pytest.raises(ExportError):
            command.run()

    def test_remote_export_failure(self, tmp_path):
        command = ExportSQLCommand("remote", "/srv/www", tmp_path / "out.sql.gz",
                                   ssh_factory=make_ssh_class(export_code=1))

        with pytest.raises(ExportError, match="export failed"):
            command.run()

    def test_empty_export(self, tmp_path):
        command = ExportSQLCommand("remote", "/srv/www", tmp_path / "out.sql.gz",
                                   ssh_factory=make_ssh_class(remote_size="0\n"))

        with pytest.raises(ExportError):
            command.run()

    def test_download_failure(self, tmp_path):
        command = ExportSQLCommand("remote", "/srv/www", tmp_path / "out.sql.gz",
                                   ssh_factory=make_ssh_class(download_ok=False))

        with pytest.raises(ExportError):
            command.run()
