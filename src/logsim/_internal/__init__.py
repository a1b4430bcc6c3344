"""Internal helpers shared across logsim packages."""
