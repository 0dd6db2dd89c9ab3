"""
Utilities for interacting with WP-CLI and DDEV from Python

Remote WP-CLI commands run over the system ssh client, local ones go
through DDEV. Both return (exit code, stdout, stderr) and never raise on a
non-zero exit code; callers decide what a failure means.
"""

import json
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union


def _format_wp_command(command: List[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in command)


def run_wp_cli(command: List[str], remote_host: str, remote_path: str) -> Tuple[int, str, str]:
    """
    Executes a WP-CLI command on a remote server via SSH

    Args:
        command: List with the wp subcommand and its arguments
        remote_host: SSH host alias
        remote_path: WordPress path on the server

    Returns:
        Tuple[int, str, str]: Exit code, standard output, standard error
    """
    if not remote_host or not remote_path:
        return 1, "", "Remote host and path are required to execute WP-CLI on the server"

    remote_cmd = f"cd {shlex.quote(remote_path)} && wp {_format_wp_command(command)}"
    try:
        result = subprocess.run(
            ["ssh", remote_host, remote_cmd],
            capture_output=True,
            text=True,
            check=False
        )
    except OSError as e:
        return 1, "", str(e)
    return result.returncode, result.stdout, result.stderr


def run_ddev(args: List[str], project_path: Union[str, Path], quiet: bool = False) -> Tuple[int, str, str]:
    """
    Executes a DDEV command in the local project

    Args:
        args: DDEV subcommand and arguments (without the leading "ddev")
        project_path: Directory of the DDEV project
        quiet: If True, captures the output instead of streaming it

    Returns:
        Tuple[int, str, str]: Exit code, standard output, standard error
    """
    if shutil.which("ddev") is None:
        return 1, "", "DDEV is not installed or not in the PATH"

    try:
        result = subprocess.run(
            ["ddev"] + args,
            cwd=str(project_path),
            capture_output=quiet,
            text=True,
            check=False
        )
    except OSError as e:
        return 1, "", f"Error executing DDEV command: {str(e)}"
    return result.returncode, result.stdout or "", result.stderr or ""


def get_network_sites(remote_host: str, remote_path: str) -> List[Dict[str, Any]]:
    """
    Lists the sites of a remote multisite network

    Args:
        remote_host: SSH host alias
        remote_path: WordPress path on the server

    Returns:
        List[Dict[str, Any]]: One {"blog_id", "home_url"} entry per site.
        Empty for single-site installs.

    Raises:
        RuntimeError: If WP-CLI fails for a reason other than a single-site install
    """
    code, stdout, stderr = run_wp_cli(
        ["site", "list", "--fields=blog_id,url", "--format=json"],
        remote_host,
        remote_path
    )

    if code != 0:
        if "not a multisite" in stderr.lower():
            return []
        raise RuntimeError(f"Unable to list network sites: {stderr.strip()}")

    sites = []
    for row in json.loads(stdout or "[]"):
        url = row.get("url") or None
        # wp site list reports URLs with a trailing slash, home option values have none
        if url and url.endswith("/"):
            url = url[:-1]
        sites.append({"blog_id": row.get("blog_id"), "home_url": url})
    return sites
