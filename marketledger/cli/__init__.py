"""Marketledger CLI — Typer-based developer tooling.

Provides the ``marketledger`` command with subcommands for running the
end-to-end sale demo and inspecting the event journal.

All output uses Rich for formatted terminal display.
"""
