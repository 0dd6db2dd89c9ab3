"""
Utilities for SSH operations with remote servers
"""

import os
import shlex
from pathlib import Path
from typing import Optional, Tuple

import paramiko
from tqdm import tqdm


class SSHClient:
    """
    SSH Client to execute commands on remote servers
    """

    def __init__(self, host: str, verbose: bool = False):
        """
        Initializes the SSH client

        Args:
            host: SSH host alias (must be configured in ~/.ssh/config)
            verbose: If True, echoes every remote command
        """
        self.host = host
        self.verbose = verbose
        self.client = None

    def connect(self) -> bool:
        """
        Establishes an SSH connection with the remote server

        Returns:
            bool: True if the connection was successful, False otherwise
        """
        try:
            self.client = paramiko.SSHClient()
            self.client.load_system_host_keys()
            self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

            hostname = self.host
            port = 22
            username = os.getenv('USER', 'root')
            identity_file = None

            # Use the user's SSH configuration file when there is one
            user_config_file = os.path.expanduser("~/.ssh/config")
            if os.path.exists(user_config_file):
                ssh_config = paramiko.SSHConfig()
                with open(user_config_file) as f:
                    ssh_config.parse(f)

                host_config = ssh_config.lookup(self.host)
                hostname = host_config.get('hostname', self.host)
                port = int(host_config.get('port', port))
                username = host_config.get('user', username)
                identity_file = host_config.get('identityfile', [None])[0]

            connect_kwargs = {"hostname": hostname, "port": port, "username": username}
            if identity_file:
                connect_kwargs["key_filename"] = os.path.expanduser(identity_file)

            self.client.connect(**connect_kwargs)

            print(f"✅ SSH connection established with {self.host} ({hostname})")
            return True

        except (paramiko.SSHException, OSError) as e:
            print(f"❌ Error connecting to {self.host}: {str(e)}")
            self.client = None
            return False

    def disconnect(self):
        """
        Closes the SSH connection
        """
        if self.client:
            self.client.close()
            self.client = None
            if self.verbose:
                print(f"✅ SSH connection closed with {self.host}")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def execute(self, command: str) -> Tuple[int, str, str]:
        """
        Executes a command on the remote server

        Args:
            command: Command to execute

        Returns:
            Tuple[int, str, str]: Exit code, standard output, error output
        """
        if not self.client:
            return (1, "", "No SSH connection established")

        if self.verbose:
            print(f"🔄 Executing remote command: {command}")

        try:
            _, stdout, stderr = self.client.exec_command(command)
            stdout_str = stdout.read().decode('utf-8', errors='replace')
            stderr_str = stderr.read().decode('utf-8', errors='replace')
            exit_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            return (1, "", str(e))

        if exit_code != 0 and self.verbose:
            print(f"⚠️ The command returned exit code {exit_code}")

        return (exit_code, stdout_str, stderr_str)

    def get_file_size(self, remote_path: str) -> Optional[int]:
        """
        Gets the size in bytes of a remote file

        Returns:
            Optional[int]: The size, or None if it could not be read
        """
        code, stdout, _ = self.execute(f"stat -c %s {shlex.quote(remote_path)}")
        if code != 0:
            return None
        try:
            return int(stdout.strip())
        except ValueError:
            return None

    def download_file(self, remote_path: str, local_path: Path, show_progress: bool = True) -> bool:
        """
        Downloads a file from the remote server

        Args:
            remote_path: Remote path of the file
            local_path: Local path where to save the file
            show_progress: If True, shows a progress bar

        Returns:
            bool: True if the transfer was successful, False otherwise
        """
        if not self.client:
            print("❌ No SSH connection established")
            return False

        try:
            sftp = self.client.open_sftp()
            local_path.parent.mkdir(parents=True, exist_ok=True)

            print(f"📥 Downloading file {remote_path} -> {local_path}")
            if show_progress:
                with tqdm(unit='B', unit_scale=True, desc="Downloading") as progress_bar:
                    def _callback(transferred, total):
                        progress_bar.total = total
                        progress_bar.update(transferred - progress_bar.n)

                    sftp.get(remote_path, str(local_path), callback=_callback)
            else:
                sftp.get(remote_path, str(local_path))
            sftp.close()

            print("✅ File downloaded successfully")
            return True

        except (paramiko.SSHException, OSError) as e:
            print(f"❌ Error downloading file: {str(e)}")
            return False
