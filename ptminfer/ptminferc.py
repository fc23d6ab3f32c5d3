#!/usr/bin/env python3
"""
ptminfer CLI - command line interface for modification site inference.
"""

import sys

import click

from .inference.cli import infer


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """
    ptminfer: cross-spectrum modification site inference

    Available commands:
      infer   Resolve ambiguous modification sites from related spectra

    Examples:
      ptminfer infer -id phosphors_results.idXML -out inferred.idXML
    """
    pass


cli.add_command(infer)


def main():
    """Main entry point for ptminfer CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
