"""Command-line interface for gridgeom.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Validation reports per shape
- Progress bars for triangulation
- Boolean combination of shape documents
- Verbose/quiet output modes
"""

from gridgeom.cli.app import app, cli

__all__ = ["app", "cli"]
