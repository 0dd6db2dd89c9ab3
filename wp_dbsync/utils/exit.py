"""
Process termination helpers for the CLI
"""

import sys
from typing import NoReturn

import click


def with_error(message: str, exit_code: int = 1) -> NoReturn:
    """
    Prints the error message to stderr and terminates the process

    Args:
        message: Message to show to the user
        exit_code: Process exit status
    """
    click.echo(f"❌ Error: {message}", err=True)
    sys.exit(exit_code)
