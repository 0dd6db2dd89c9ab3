import subprocess
from unittest.mock import patch

from click.testing import CliRunner

from wp_dbsync.cli import cli

from conftest import MYSQLDUMP_HEADER


class TestSearchReplaceCommand:

    def test_output_file(self, write_sql, tmp_path):
        sql_file = write_sql(MYSQLDUMP_HEADER + "(1,'home','https://old.test','yes');\n")
        output = tmp_path / "out.sql"

        result = CliRunner().invoke(cli, [
            "search-replace", str(sql_file), "--search-replace", "old.test,new.test", "--output", str(output)
        ])

        assert result.exit_code == 0, result.output
        assert "https://new.test" in output.read_text()
        assert "https://old.test" in sql_file.read_text()

    def test_in_place(self, write_sql):
        sql_file = write_sql(MYSQLDUMP_HEADER + "(1,'home','https://old.test','yes');\n")

        result = CliRunner().invoke(cli, [
            "search-replace", str(sql_file), "--search-replace", "old.test,new.test", "--in-place"
        ])

        assert result.exit_code == 0, result.output
        assert "https://new.test" in sql_file.read_text()

    def test_invalid_pair(self, write_sql):
        sql_file = write_sql(MYSQLDUMP_HEADER)

        result = CliRunner().invoke(cli, ["search-replace", str(sql_file), "--search-replace", "no-comma"])

        assert result.exit_code == 1


class TestDetectDumpCommand:

    def test_prints_dump_type(self, write_sql):
        result = CliRunner().invoke(cli, ["detect-dump", str(write_sql(MYSQLDUMP_HEADER))])

        assert result.exit_code == 0
        assert "Dump type: mysqldump" in result.output
        assert "Source database: wordpress" in result.output


class TestSyncSqlCommand:

    def test_requires_remote_configuration(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = CliRunner().invoke(cli, ["sync-sql"])

        assert result.exit_code == 1

    def test_runs_sync_with_configuration(self, tmp_path, monkeypatch):
        (tmp_path / "wp-dbsync.yaml").write_text(
            "ssh:\n  remote_host: production\n  remote_path: /srv/www\n"
            "local:\n  slug: mysite\n  domain: lndo.site\n"
            "network_sites: []\n"
        )
        monkeypatch.chdir(tmp_path)

        with patch("wp_dbsync.cli.SyncSQLCommand") as command_class:
            command_class.return_value.run.return_value = True
            command_class.return_value.local_domain = "mysite.lndo.site"
            result = CliRunner().invoke(cli, ["sync-sql", "--yes"])

        assert result.exit_code == 0, result.output
        args, kwargs = command_class.call_args
        assert args == ("production", "/srv/www", "mysite", "lndo.site")
        assert kwargs["network_sites"] == []
        assert kwargs["assume_yes"] is True


class TestImportSqlCommand:

    def test_search_replace_then_import(self, write_sql, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        sql_file = write_sql(MYSQLDUMP_HEADER + "(1,'home','https://old.test','yes');\n")
        completed = subprocess.CompletedProcess(["ddev"], 0)

        with patch("wp_dbsync.utils.wp_cli.shutil.which", return_value="/usr/bin/ddev"), \
                patch("wp_dbsync.utils.wp_cli.subprocess.run", return_value=completed) as run:
            result = CliRunner().invoke(cli, [
                "import-sql", str(sql_file), "--search-replace", "old.test,new.test", "--in-place"
            ])

        assert result.exit_code == 0, result.output
        assert "https://new.test" in sql_file.read_text()
        run.assert_called_once()
        assert run.call_args[0][0] == ["ddev", "import-db", "--file", str(sql_file.resolve())]

    def test_invalid_extension(self, write_sql):
        sql_file = write_sql(MYSQLDUMP_HEADER, name="dump.txt")

        result = CliRunner().invoke(cli, ["import-sql", str(sql_file)])

        assert result.exit_code == 1
