"""Ports, clock and application state shared by the CLI and the task subsystem."""
