"""Command line interface for logsim."""
