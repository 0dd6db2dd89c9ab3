import gzip

from wp_dbsync.utils.sql_dump import DumpType, fix_mydumper_lines, get_sql_dump_details, get_sql_dump_type

from conftest import MYSQLDUMP_HEADER


class TestGetSqlDumpDetails:

    def test_mysqldump_header(self, write_sql):
        path = write_sql(MYSQLDUMP_HEADER + "CREATE TABLE `wp_options` (id int);\n")

        details = get_sql_dump_details(path)

        assert details.type is DumpType.STANDARD
        assert details.source_db == "wordpress"

    def test_mariadb_header(self, write_sql):
        path = write_sql("-- MariaDB dump 10.19  Distrib 10.6.12-MariaDB\n")
        assert get_sql_dump_type(path) is DumpType.STANDARD

    def test_plain_sql_without_header(self, write_sql):
        path = write_sql("/*!40101 SET NAMES utf8mb4 */;\nINSERT INTO `wp_options` VALUES (1);\n")
        assert get_sql_dump_type(path) is DumpType.STANDARD

    def test_mydumper_stream_marker(self, write_sql):
        path = write_sql(
            "-- wordpress-schema-create.sql 87\n"
            "CREATE DATABASE `wordpress`;\n"
            "-- wordpress.wp_options-schema.sql 1234\n"
        )
        assert get_sql_dump_type(path) is DumpType.MYDUMPER

    def test_mydumper_metadata_header(self, write_sql):
        path = write_sql("-- metadata.header 120\n[config]\n")
        assert get_sql_dump_type(path) is DumpType.MYDUMPER

    def test_unknown_content(self, write_sql):
        path = write_sql("hello world\nthis is not sql\n")

        details = get_sql_dump_details(path)

        assert details.type is DumpType.UNKNOWN
        assert details.source_db is None

    def test_empty_file(self, write_sql):
        assert get_sql_dump_type(write_sql("")) is DumpType.UNKNOWN

    def test_gzipped_dump(self, tmp_path):
        path = tmp_path / "dump.sql.gz"
        with gzip.open(path, "wb") as f:
            f.write(MYSQLDUMP_HEADER.encode())

        assert get_sql_dump_type(path) is DumpType.STANDARD

    def test_only_reads_the_start_of_the_file(self, write_sql):
        # A marker far past the header limit is not seen
        path = write_sql("x\n" * 100000 + "-- MySQL dump 10.13\n")
        assert get_sql_dump_type(path) is DumpType.UNKNOWN


class TestFixMydumperLines:

    def test_rewrites_file_marker_sizes(self):
        lines = [
            b"-- wordpress.wp_options-schema.sql 1234\n",
            b"INSERT INTO `wp_options` VALUES (1,'siteurl','https://a.test','yes');\n",
            b"-- wordpress.wp_posts.00000.sql 99\r\n",
        ]

        result = list(fix_mydumper_lines(lines))

        assert result == [
            b"-- wordpress.wp_options-schema.sql -1\n",
            lines[1],
            b"-- wordpress.wp_posts.00000.sql -1\r\n",
        ]

    def test_leaves_other_comments_alone(self):
        lines = [b"-- MySQL dump 10.13\n", b"-- some comment 12\n", b"-- file.sql\n"]
        assert list(fix_mydumper_lines(lines)) == lines

    def test_last_line_without_newline(self):
        assert list(fix_mydumper_lines([b"-- db.t.sql 5"])) == [b"-- db.t.sql -1"]
