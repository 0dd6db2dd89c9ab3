import pytest

from wp_dbsync.config_yaml import YAMLConfig, get_yaml_config

CONFIG = """
ssh:
  remote_host: production
  remote_path: /srv/www/wordpress
local:
  slug: mysite
database:
  table_prefix: site_
network_sites:
  - blog_id: 1
    home_url: https://example.com
"""


class TestYAMLConfig:

    def test_defaults_without_file(self, tmp_path):
        config = YAMLConfig(project_root=tmp_path)

        assert config.get("local", "domain") == "ddev.site"
        assert config.get("database", "table_prefix") == "wp_"
        assert config.get("database", "schema") is None
        assert config.get_network_sites() is None

    def test_loads_and_merges_yaml(self, tmp_path):
        (tmp_path / "wp-dbsync.yaml").write_text(CONFIG)

        config = YAMLConfig(project_root=tmp_path)

        assert config.get("ssh", "remote_host") == "production"
        assert config.get("local", "slug") == "mysite"
        assert config.get("local", "domain") == "ddev.site"
        assert config.get("database", "table_prefix") == "site_"
        assert config.get_network_sites() == [{"blog_id": 1, "home_url": "https://example.com"}]

    def test_missing_path_returns_default(self, tmp_path):
        config = YAMLConfig(project_root=tmp_path)
        assert config.get("nope", "missing", default="x") == "x"

    def test_get_strict(self, tmp_path):
        (tmp_path / "wp-dbsync.yaml").write_text(CONFIG)
        config = YAMLConfig(project_root=tmp_path)

        assert config.get_strict("ssh", "remote_path") == "/srv/www/wordpress"
        with pytest.raises(ValueError):
            config.get_strict("tracking", "file")
        with pytest.raises(ValueError):
            config.get_strict("ssh", "remote_host", "deeper")

    def test_dotenv_and_environment(self, tmp_path, monkeypatch):
        (tmp_path / "wp-dbsync.yaml").write_text(CONFIG)
        (tmp_path / ".env").write_text("LOCAL_SLUG=from-dotenv\nLOCAL_DOMAIN=lndo.site\n")
        monkeypatch.setenv("LOCAL_DOMAIN", "from-env.test")

        config = YAMLConfig(project_root=tmp_path)

        assert config.get("local", "slug") == "from-dotenv"
        assert config.get("local", "domain") == "from-env.test"

    def test_invalid_network_sites(self, tmp_path):
        (tmp_path / "wp-dbsync.yaml").write_text("network_sites: https://example.com\n")

        with pytest.raises(ValueError):
            YAMLConfig(project_root=tmp_path).get_network_sites()

    def test_file_must_be_a_mapping(self, tmp_path):
        (tmp_path / "wp-dbsync.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            YAMLConfig(project_root=tmp_path)

    def test_singleton(self, tmp_path):
        assert get_yaml_config(project_root=tmp_path) is get_yaml_config()
