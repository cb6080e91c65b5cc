"""Command-line entry points for the DDN pipeline tools."""
