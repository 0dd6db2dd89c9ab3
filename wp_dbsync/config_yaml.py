"""
YAML-based configuration module for wp_dbsync

This module is responsible for loading and managing configuration
from YAML files, with .env compatibility for environment variables.
"""

import os
import copy
from pathlib import Path
from typing import Dict, List, Any, Optional

import yaml
from dotenv import dotenv_values

CONFIG_FILENAME = "wp-dbsync.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "ssh": {
        "remote_host": "",
        "remote_path": "",
    },
    "local": {
        "slug": "",
        "domain": "ddev.site",
        "project_path": ".",
    },
    "database": {
        "schema": None,
        "table_prefix": "wp_",
    },
    "tracking": {
        "file": None,
    },
    "network_sites": None,
}

# Mapping of environment variables to the configuration structure
ENV_MAPPING = {
    "REMOTE_SSH": ("ssh", "remote_host"),
    "REMOTE_PATH": ("ssh", "remote_path"),
    "LOCAL_SLUG": ("local", "slug"),
    "LOCAL_DOMAIN": ("local", "domain"),
    "LOCAL_PROJECT_PATH": ("local", "project_path"),
    "DB_SCHEMA": ("database", "schema"),
    "DB_TABLE_PREFIX": ("database", "table_prefix"),
    "TRACKING_FILE": ("tracking", "file"),
}


class YAMLConfig:
    """
    Class for managing YAML-based configuration
    """

    def __init__(self, project_root: Optional[Path] = None, verbose=False):
        """
        Initializes configuration from YAML file

        Args:
            project_root: Directory holding wp-dbsync.yaml. Defaults to the current directory.
            verbose (bool): Enable detailed mode
        """
        self.verbose = verbose
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        self._load_config()

    def _load_config(self):
        """
        Loads the configuration from the project YAML file, then the .env file
        """
        config_file = self.project_root / CONFIG_FILENAME
        if config_file.exists():
            if self.verbose:
                print(f"📝 Loading configuration from {config_file}")
            self._load_yaml_file(config_file)
        elif self.verbose:
            print(f"⚠️ No configuration file found at {config_file}. Default values will be used.")

        self._load_env_vars()

    def _load_yaml_file(self, file_path: Path):
        """
        Loads a YAML file and updates the configuration

        Args:
            file_path: Path to the YAML file

        Raises:
            ValueError: If the file does not contain a mapping
        """
        with open(file_path, 'r') as file:
            yaml_data = yaml.safe_load(file)

        if yaml_data is None:
            return

        if not isinstance(yaml_data, dict):
            raise ValueError(f"Configuration file {file_path} must contain a mapping")

        if self.verbose:
            print(f"📝 Found keys in {file_path}: {', '.join(yaml_data.keys())}")

        self._update_dict_recursive(self.config, yaml_data)

    def _update_dict_recursive(self, target: Dict, source: Dict):
        """
        Updates a dictionary recursively

        Args:
            target: Destination dictionary
            source: Dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict_recursive(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    def _load_env_vars(self):
        """
        Applies variables from the project .env file and the process environment.
        The process environment wins over the .env file.
        """
        env_vars: Dict[str, Optional[str]] = {}

        env_file = self.project_root / ".env"
        if env_file.exists():
            if self.verbose:
                print(f"📝 Loading environment variables from {env_file}")
            env_vars.update(dotenv_values(env_file))

        for env_name in ENV_MAPPING:
            if env_name in os.environ:
                env_vars[env_name] = os.environ[env_name]

        for env_name, config_path in ENV_MAPPING.items():
            value = env_vars.get(env_name)
            if value is not None and value != "":
                self._set_nested_value(self.config, config_path, value)

    def _set_nested_value(self, target: Dict, path: tuple, value: Any):
        current = target
        for key in path[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def get(self, *path: str, default: Any = None) -> Any:
        """
        Gets a configuration value according to a key path

        Args:
            *path: Key path to access the value
            default: Default value if the path is not found

        Returns:
            The configuration value or the default value
        """
        current = self.config
        for key in path:
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
        if current is None:
            return default
        return current

    def get_strict(self, *path: str) -> Any:
        """
        Gets a configuration value following the fail-fast principle

        Unlike get(), this function raises an exception if the path does not exist
        or holds an empty value.

        Args:
            *path: Key path to access the value

        Returns:
            Any: The configuration value

        Raises:
            ValueError: If the path does not exist in the configuration
        """
        current = self.config
        for i, key in enumerate(path):
            if not isinstance(current, dict):
                path_str = ' -> '.join(path[:i])
                raise ValueError(f"Configuration path '{path_str}' is not a dictionary")

            if key not in current or current[key] in (None, ""):
                path_str = ' -> '.join(path[:i+1])
                raise ValueError(f"Key '{key}' is not set in path '{path_str}' ({CONFIG_FILENAME})")

            current = current[key]

        return current

    def get_network_sites(self) -> Optional[List[Dict[str, Any]]]:
        """
        Gets the network sites declared in the configuration

        Returns:
            Optional[List[Dict[str, Any]]]: List of {blog_id, home_url} entries, or None
            when the remote site list should be queried instead
        """
        sites = self.config.get("network_sites")
        if sites is None:
            return None
        if not isinstance(sites, list):
            raise ValueError("'network_sites' must be a list of {blog_id, home_url} entries")
        return sites

    def display(self):
        """
        Displays the current configuration
        """
        print("\n🔧 Loaded configuration:")
        for section, values in self.config.items():
            if isinstance(values, dict):
                print(f"   {section}:")
                for key, value in values.items():
                    print(f"     - {key}: {value}")
            else:
                print(f"   {section}: {values}")
        print()


# Global function to get the configuration
_config_instance = None


def get_yaml_config(verbose=False, project_root: Optional[Path] = None):
    """
    Gets the unique instance of the configuration

    Args:
        verbose: If True, shows additional information
        project_root: Directory holding wp-dbsync.yaml (only used on first call)

    Returns:
        YAMLConfig: Configuration instance
    """
    global _config_instance

    if not _config_instance:
        _config_instance = YAMLConfig(project_root=project_root, verbose=verbose)

    return _config_instance


def reset_yaml_config():
    """
    Drops the cached configuration instance so the next call reloads it
    """
    global _config_instance
    _config_instance = None
