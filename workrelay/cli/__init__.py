"""Workrelay CLI: Typer-based command-line interface.

Provides the ``workrelay`` command with subcommands for serving the
relay, checking an origin against the allow-list, showing the effective
configuration, and listing recorded events.

All output uses Rich for formatted terminal display.
"""
