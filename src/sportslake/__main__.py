"""Allow `python -m sportslake`."""

from sportslake.cli import cli_entry

cli_entry()
