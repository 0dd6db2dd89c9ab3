import gzip
from pathlib import Path

import pytest

from wp_dbsync import config_yaml


MYSQLDUMP_HEADER = (
    "-- MySQL dump 10.13  Distrib 8.0.32, for Linux (x86_64)\n"
    "--\n"
    "-- Host: localhost    Database: wordpress\n"
    "-- ------------------------------------------------------\n"
)

MULTISITE_DUMP = MYSQLDUMP_HEADER + (
    "INSERT INTO `wp_options` VALUES (1,'siteurl','https://old.example.com','yes');\n"
    "INSERT INTO `wp_options` VALUES (2,'home','https://old.example.com','yes');\n"
    "INSERT INTO `wp_blogs` VALUES (1,1,'old.example.com','/'),(2,1,'shop.old.example.com','/');\n"
    "INSERT INTO `wp_2_options` VALUES (1,'siteurl','https://shop.old.example.com','yes');\n"
    "INSERT INTO `wp_posts` VALUES (7,'<a href=\"https://old.example.com/about\">About</a>');\n"
)

MULTISITE_NETWORK = [
    {"blog_id": 1, "home_url": "https://old.example.com"},
    {"blog_id": 2, "home_url": "https://shop.old.example.com"},
]


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    for env_name in config_yaml.ENV_MAPPING:
        monkeypatch.delenv(env_name, raising=False)
    config_yaml.reset_yaml_config()
    yield
    config_yaml.reset_yaml_config()


@pytest.fixture
def write_sql(tmp_path):
    def _write(content, name="dump.sql"):
        path = tmp_path / name
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return path
    return _write


class FakeExportCommand:
    """Stands in for ExportSQLCommand by writing a gzipped dump to the output file"""

    instances = []

    def __init__(self, remote_host, remote_path, output_file, confirm_enough_storage_hook=None,
                 track=None, verbose=False, content=MULTISITE_DUMP):
        self.remote_host = remote_host
        self.remote_path = remote_path
        self.output_file = Path(output_file)
        self.confirm_enough_storage_hook = confirm_enough_storage_hook
        self.track = track
        self.content = content
        FakeExportCommand.instances.append(self)

    def run(self):
        with gzip.open(self.output_file, "wb") as f:
            f.write(self.content.encode("utf-8"))
        return self.output_file


class FakeImportCommand:
    """Stands in for ImportSQLCommand and keeps what it was asked to import"""

    instances = []

    def __init__(self, sql_file, project_path, in_place=False, skip_validate=False, quiet=False):
        self.sql_file = Path(sql_file)
        self.project_path = project_path
        self.in_place = in_place
        self.skip_validate = skip_validate
        self.quiet = quiet
        self.imported = None
        FakeImportCommand.instances.append(self)

    def run(self):
        self.imported = self.sql_file.read_text(encoding="utf-8")


@pytest.fixture
def fake_commands():
    FakeExportCommand.instances = []
    FakeImportCommand.instances = []
    return FakeExportCommand, FakeImportCommand
